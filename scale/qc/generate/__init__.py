"""
Generators and shrinkers.

A generator is a callable ``gen(ctx)`` taking a
:obj:`scale.qc.generate.context.GenContext`. A shrinker is a pure callable
``shrink(x)`` returning a :obj:`scale.qc.stream.Stream` of strictly smaller values.
"""
import scale.qc.generate.context as context
import scale.qc.generate.numeric as numeric
import scale.qc.generate.discrete as discrete
import scale.qc.generate.collection as collection

from scale.qc.generate.context import GenContext
