"""
Welcome to the SCALE QuickCheck (QC) Python package!

The recommended usage is as follows.

.. code::

	from scale.qc.check import Arbitrary, Check, quickcheck

The :code:`check` is only one of the many modules provided by QC. The other
modules are:

	- :obj:`scale.qc.stream` for lazy, memoized streams of candidates
	- :obj:`scale.qc.generate` for random generators and shrinkers
	- :obj:`scale.qc.result` for structured result comparison
	- :obj:`scale.qc.outcome` for property outcomes
	- :obj:`scale.qc.sandbox` for running properties in isolation
	- :obj:`scale.qc.minimize` for counterexample minimization
	- :obj:`scale.qc.report` for reports and reproduction scripts
	- :obj:`scale.qc.core` for core classes
	- :obj:`scale.qc.internal` for internal, private functions

See their respective documentation for the available classes and functions.

"""

import scale.qc.stream as stream
import scale.qc.generate as generate
import scale.qc.result as result
import scale.qc.outcome as outcome
import scale.qc.sandbox as sandbox
import scale.qc.minimize as minimize
import scale.qc.check as check
import scale.qc.report as report
import scale.qc.core as core
import scale.qc.internal as internal


internal.logger.debug("Initialized " + __name__)
