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

"""Drive one solve of a model with a solver adapter.

A solve moves through the states

    Built -> Initialized -> Optimizing -> {Solved | Failed}

Built -> Initialized
    the model is frozen and classified, an :py:class:`NLPEvaluator` is
    built, and the adapter's problem instance is created, loaded and
    given a warm start.
Initialized -> Optimizing
    the adapter optimizes.  There is no orchestrator timeout; the
    adapter enforces its own configured limits.
Optimizing -> Solved
    the native status is normalized through the adapter's status map and
    (for an optimal solve) the solution is written back into the model.

Any exception raised by the adapter or the evaluator moves the solve to
Failed and is propagated.  The model is unfrozen in every case.
"""

import enum
import logging
import math

import numpy as np

from nlpbridge.common.config import IsInstance
from nlpbridge.common.log import SuppressLogging
from nlpbridge.common.timing import TicTocTimer
from nlpbridge.core.model import Model
from nlpbridge.nlp.evaluator import NLPEvaluator
from nlpbridge.solver.base import NLPSolverBase
from nlpbridge.solver.config import SolveConfig
from nlpbridge.solver.results import SolveResult, SolveStatus

logger = logging.getLogger('nlpbridge.solver')


class SolveState(enum.Enum):
    Built = 0
    Initialized = 1
    Optimizing = 2
    Solved = 3
    Failed = 4

    def __str__(self):
        return self.name


def warm_start_value(var):
    """The starting value for a variable: its current value, or 0
    projected onto its bounds when the value is unset"""
    if var.value is not None:
        return var.value
    return min(max(0.0, var.lb), var.ub)


class SolveOrchestrator(object):
    """Solve a :py:class:`~nlpbridge.core.model.Model` once with a solver
    adapter.

    Parameters
    ----------
    model: Model
        The model to solve.
    solver: NLPSolverBase
        The solver adapter.
    **kwds
        Options for :py:class:`~nlpbridge.solver.config.SolveConfig`.

    """

    CONFIG = SolveConfig()

    def __init__(self, model, solver, **kwds):
        self.model = IsInstance(Model)(model)
        self.solver = IsInstance(NLPSolverBase)(solver)
        self.config = self.CONFIG(value=kwds)
        self.state = SolveState.Built
        self.evaluator = None
        self.instance = None
        self.result = None

    def __repr__(self):
        return "<SolveOrchestrator model='%s' solver='%s' state=%s>" % (
            self.model.name,
            self.solver.name,
            self.state,
        )

    def _transition(self, state):
        logger.debug(
            "Solve of model '%s': %s -> %s" % (self.model.name, self.state, state)
        )
        self.state = state

    def solve(self, **kwds):
        """Run the solve and return a :py:class:`SolveResult`.

        Keyword arguments override the orchestrator configuration for
        this call.  Non-optimal outcomes are reported through the result
        status; exceptions from the adapter or the evaluator propagate.

        """
        if self.state is not SolveState.Built:
            raise RuntimeError(
                "SolveOrchestrator.solve() may only be called once (current "
                "state: %s); create a new orchestrator to solve again"
                % (self.state,)
            )
        config = self.config(value=kwds)
        with SuppressLogging('nlpbridge', active=config.suppress_warnings):
            timer = TicTocTimer()
            self.model.freeze()
            try:
                self._initialize()
                self._transition(SolveState.Optimizing)
                self.instance.optimize()
                self.result = self._postsolve(config, timer)
                self._transition(SolveState.Solved)
            except Exception:
                self._transition(SolveState.Failed)
                raise
            finally:
                self.model.unfreeze()
        return self.result

    def _initialize(self):
        model = self.model
        n_nonlinear = model.classify()
        logger.debug(
            "Model '%s': %s variables, %s constraints (%s nonlinear), "
            "%s objective"
            % (
                model.name,
                model.n_variables,
                model.n_constraints,
                n_nonlinear,
                'linear' if model.objective.is_linear() else 'nonlinear',
            )
        )
        ev = self.evaluator = NLPEvaluator(model)
        self.instance = self.solver.create_model_instance()
        self.instance.load_problem(
            ev.n_variables,
            ev.n_constraints,
            ev.var_lb,
            ev.var_ub,
            ev.constr_lb,
            ev.constr_ub,
            ev.sense,
            ev,
        )
        self.instance.set_warm_start(
            np.array([warm_start_value(v) for v in model.variables], dtype=float)
        )
        self._transition(SolveState.Initialized)

    def _postsolve(self, config, timer):
        n = self.model.n_variables
        native = self.instance.native_status()
        status = self.solver.map_status(native)
        if status is None:
            logger.warning(
                "Solver '%s' returned the unrecognized status %r; the solve "
                "is reported as '%s'" % (self.solver.name, native, SolveStatus.error)
            )
            status = SolveStatus.error

        solution = self.instance.solution_vector()
        if solution is None:
            solution = np.full(n, math.nan)
        else:
            solution = np.asarray(solution, dtype=float)
            if solution.shape != (n,):
                raise ValueError(
                    "Solver '%s' returned a solution with shape %s; expected "
                    "(%s,)" % (self.solver.name, solution.shape, n)
                )
        obj = self.instance.objective_value()

        if status is SolveStatus.optimal:
            if config.load_solutions:
                self.model.set_values(solution.tolist())
        else:
            logger.info(
                "Solve of model '%s' ended with status '%s' (native status %r); "
                "variable values were not updated"
                % (self.model.name, status, native)
            )

        return SolveResult(
            status,
            obj,
            solution,
            native_status=native,
            message=self.instance.message(),
            solver_name=self.solver.name,
            wall_time=timer.toc(),
        )


def solve(model, solver, **kwds):
    """Solve `model` with the `solver` adapter and return the
    :py:class:`SolveResult` (see :py:class:`SolveOrchestrator`)"""
    return SolveOrchestrator(model, solver, **kwds).solve()
