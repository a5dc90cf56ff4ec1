# Counterexample reproduction script written by scale.qc.
#
# Exits 0 if the property holds for the input below, 1 otherwise.
import json
import sys

import numpy as np

import scale.qc.internal as internal
from scale.qc.outcome import Pass, describe

target = internal._get_function_handle({{ target | tojson }})
prop = getattr(target, "prop", target)

x = {{ input }}

outcome = prop(x)
if isinstance(outcome, bool):
    outcome = Pass() if outcome else None
if isinstance(outcome, Pass):
    print("OK")
    sys.exit(0)

print(json.dumps({"falsified": "Falsified" if outcome is None else describe(outcome)}))
sys.exit(1)
{% if seed is not none %}
# generated with random seed {{ seed }}, test case {{ test_case }}
{% endif %}
