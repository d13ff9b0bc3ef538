#  ___________________________________________________________________________
#
#  Pyomo: Python Optimization Modeling Objects
#  Copyright (c) 2008-2025
#  National Technology and Engineering Solutions of Sandia, LLC
#  Under the terms of Contract DE-NA0003525 with National Technology and
#  Engineering Solutions of Sandia, LLC, the U.S. Government retains certain
#  rights in this software.
#  This software is distributed under the 3-clause BSD License.
#  ___________________________________________________________________________

"""nlpbridge: compile algebraic nonlinear models into solver-facing
evaluators and orchestrate the solve.

The package is organized as

- :mod:`nlpbridge.core.expr`: the expression graph and its walkers
- :mod:`nlpbridge.core.model`: the model container (variables,
  constraints, objective)
- :mod:`nlpbridge.repn`: linearity classification and canonical forms
- :mod:`nlpbridge.nlp`: the evaluator protocol handed to solvers
- :mod:`nlpbridge.core.plugins.transform`: model reformulations
- :mod:`nlpbridge.solver`: the solver contract and the solve orchestrator
"""

from nlpbridge.version import version, version_info, __version__
