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

from typing import Optional

from nlpbridge.common.config import (
    ConfigDict,
    ConfigValue,
    NonNegativeFloat,
    PositiveInt,
    Bool,
)


class SolverConfig(ConfigDict):
    """
    Base config for all solver adapters
    """

    def __init__(self, description=None, doc=None, implicit=False):
        super().__init__(description=description, doc=doc, implicit=implicit)

        self.time_limit: Optional[float] = self.declare(
            'time_limit',
            ConfigValue(
                domain=NonNegativeFloat,
                description="Time limit applied to the solver (in seconds).",
            ),
        )
        self.iteration_limit: Optional[int] = self.declare(
            'iteration_limit',
            ConfigValue(
                domain=PositiveInt,
                description="Iteration limit applied to the solver.",
            ),
        )
        self.tolerance: Optional[float] = self.declare(
            'tolerance',
            ConfigValue(
                domain=NonNegativeFloat,
                description="Convergence tolerance passed to the solver.  "
                "If None, the solver default is used.",
            ),
        )
        self.solver_options: ConfigDict = self.declare(
            'solver_options',
            ConfigDict(
                implicit=True,
                description="Options to pass to the solver (passed through "
                "to the solver with no validation).",
            ),
        )


class SolveConfig(ConfigDict):
    """
    Options that control a single orchestrated solve
    """

    def __init__(self, description=None, doc=None, implicit=False):
        super().__init__(description=description, doc=doc, implicit=implicit)

        self.suppress_warnings: bool = self.declare(
            'suppress_warnings',
            ConfigValue(
                domain=Bool,
                default=False,
                description="If True, log messages below ERROR emitted while "
                "solving are suppressed.  Results are not affected.",
            ),
        )
        self.load_solutions: bool = self.declare(
            'load_solutions',
            ConfigValue(
                domain=Bool,
                default=True,
                description="If True, an optimal solution is written back into "
                "the model variable values.",
            ),
        )
