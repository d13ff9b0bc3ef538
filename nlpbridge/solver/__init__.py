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

from nlpbridge.solver.base import NLPSolverBase, NLPSolverModel
from nlpbridge.solver.config import SolverConfig, SolveConfig
from nlpbridge.solver.results import SolveStatus, SolveResult
from nlpbridge.solver.orchestrator import (
    SolveOrchestrator,
    SolveState,
    solve,
    warm_start_value,
)
from nlpbridge.solver.scipy_solver import ScipySolver
