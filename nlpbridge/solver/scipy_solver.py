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

"""A reference solver adapter built on :py:mod:`scipy.optimize`.

Purely linear problems (linear objective and linear constraints) are
solved with the HiGHS interface of :py:func:`scipy.optimize.linprog`.
Everything else is solved with :py:func:`scipy.optimize.minimize` using
SLSQP, after a HiGHS feasibility check of the linear constraints (so
that a linearly infeasible model is reported as infeasible instead of as
an SLSQP failure).

Native statuses are ``('linprog', k)`` / ``('slsqp', k)`` tuples holding
the scipy status code, or one of the strings ``'unbounded'`` and
``'evaluation_error'``.
"""

import logging
import math

import numpy as np
import scipy
from scipy.optimize import Bounds, linprog, minimize

from nlpbridge.common.enums import maximize
from nlpbridge.common.errors import EvaluationError
from nlpbridge.common.timing import TicTocTimer
from nlpbridge.nlp.evaluator import Feature
from nlpbridge.repn.linear import linear_form
from nlpbridge.solver.base import NLPSolverBase, NLPSolverModel
from nlpbridge.solver.config import SolverConfig
from nlpbridge.solver.results import SolveStatus

logger = logging.getLogger('nlpbridge.solver')

# objective magnitudes beyond this are reported as unbounded
UNBOUNDED_OBJECTIVE = 1e20

# scipy.optimize.minimize reports a callback StopIteration as status 99
_CALLBACK_STOP = 99

# SLSQP statuses after which a huge objective means the iterates diverged:
# success, iteration limit, too many line searches and positive
# directional derivative in the line search
_DIVERGENT_STATUS = (0, 5, 8, 9)


class _TimeLimitReached(StopIteration):
    pass


def _bounds_list(lb, ub):
    return [
        (None if math.isinf(l) else l, None if math.isinf(u) else u)
        for l, u in zip(lb.tolist(), ub.tolist())
    ]


class ScipySolver(NLPSolverBase):
    """Solver adapter for :py:mod:`scipy.optimize`"""

    CONFIG = SolverConfig()

    name = 'scipy'

    status_map = {
        ('linprog', 0): SolveStatus.optimal,
        ('linprog', 1): SolveStatus.iterationLimit,
        ('linprog', 2): SolveStatus.infeasible,
        ('linprog', 3): SolveStatus.unbounded,
        ('linprog', 4): SolveStatus.error,
        ('slsqp', 0): SolveStatus.optimal,
        ('slsqp', 9): SolveStatus.iterationLimit,
        ('slsqp', _CALLBACK_STOP): SolveStatus.iterationLimit,
        ('slsqp', 4): SolveStatus.infeasible,
        ('slsqp', 3): SolveStatus.error,
        ('slsqp', 5): SolveStatus.error,
        ('slsqp', 6): SolveStatus.error,
        ('slsqp', 7): SolveStatus.error,
        ('slsqp', 8): SolveStatus.error,
        'unbounded': SolveStatus.unbounded,
        'evaluation_error': SolveStatus.error,
    }

    def available(self):
        return self.Availability.FullLicense

    def version(self):
        return tuple(
            int(part) if part.isdigit() else part
            for part in scipy.__version__.split('.')
        )

    def create_model_instance(self):
        return ScipySolverModel(self.config(preserve_implicit=True), self.name)


class ScipySolverModel(NLPSolverModel):
    def __init__(self, config, solver_name='scipy'):
        self.config = config
        self.solver_name = solver_name
        self._evaluator = None
        self._x0 = None
        self._status = None
        self._message = ''
        self._x = None
        self._obj = None

    def load_problem(
        self,
        num_vars,
        num_constraints,
        var_lb,
        var_ub,
        constr_lb,
        constr_ub,
        sense,
        evaluator,
    ):
        self.n = num_vars
        self.m = num_constraints
        self.var_lb = np.asarray(var_lb, dtype=float)
        self.var_ub = np.asarray(var_ub, dtype=float)
        self.constr_lb = np.asarray(constr_lb, dtype=float)
        self.constr_ub = np.asarray(constr_ub, dtype=float)
        self.sense = sense
        self._evaluator = evaluator

        self.linear_rows = [
            i for i in range(1, num_constraints + 1) if evaluator.is_constraint_linear(i)
        ]
        self.is_linear = evaluator.is_objective_linear() and len(
            self.linear_rows
        ) == num_constraints
        if self.is_linear:
            evaluator.initialize([Feature.EXPR_GRAPH])
        else:
            evaluator.initialize([Feature.GRAD, Feature.JAC, Feature.EXPR_GRAPH])
        self._x0 = np.zeros(num_vars)

    def set_warm_start(self, values):
        values = np.asarray(values, dtype=float)
        if values.shape != (self.n,):
            raise ValueError(
                "Expected a warm start with %s entries; received shape %s"
                % (self.n, values.shape)
            )
        self._x0 = values

    #
    # Linear data extraction
    #

    def _linear_rows(self, rows):
        """Return (A_ub, b_ub, A_eq, b_eq) for the given linear constraint
        rows (None for empty blocks)"""
        ev = self._evaluator
        A_ub, b_ub, A_eq, b_eq = [], [], [], []
        for i in rows:
            form = linear_form(ev.constraint_expr(i).body)
            a = np.zeros(self.n)
            for j, coef in form.coefficients.items():
                a[j - 1] = coef
            lo = self.constr_lb[i - 1] - form.constant
            up = self.constr_ub[i - 1] - form.constant
            if lo == up:
                A_eq.append(a)
                b_eq.append(up)
                continue
            if not math.isinf(up):
                A_ub.append(a)
                b_ub.append(up)
            if not math.isinf(lo):
                A_ub.append(-a)
                b_ub.append(-lo)
        return (
            np.array(A_ub) if A_ub else None,
            np.array(b_ub) if b_ub else None,
            np.array(A_eq) if A_eq else None,
            np.array(b_eq) if b_eq else None,
        )

    def _linprog_options(self):
        options = {}
        if self.config.time_limit is not None:
            options['time_limit'] = self.config.time_limit
        if self.config.iteration_limit is not None:
            options['maxiter'] = self.config.iteration_limit
        options.update(self.config.solver_options.value())
        return options

    #
    # Solve
    #

    def optimize(self):
        if self.is_linear:
            self._solve_linear()
            return
        if self.linear_rows and not self._linear_feasible():
            return
        try:
            self._solve_nonlinear()
        except EvaluationError as err:
            if isinstance(err.__cause__, OverflowError):
                # the iterates diverged far enough to overflow a float
                logger.warning(
                    "scipy SLSQP stopped: the model overflowed at a trial "
                    "point; reporting the problem as unbounded (%s)" % (err,)
                )
                self._status = 'unbounded'
                self._message = str(err)
                self._x = self._obj = None
                return
            logger.warning(
                "scipy SLSQP stopped: the model could not be evaluated "
                "at a trial point (%s)" % (err,)
            )
            self._status = 'evaluation_error'
            self._message = str(err)
            self._x = self._obj = None

    def _solve_linear(self):
        ev = self._evaluator
        form = linear_form(ev.objective_expr())
        c = np.zeros(self.n)
        for j, coef in form.coefficients.items():
            c[j - 1] = coef
        if self.sense == maximize:
            c = -c
        A_ub, b_ub, A_eq, b_eq = self._linear_rows(self.linear_rows)
        res = linprog(
            c,
            A_ub=A_ub,
            b_ub=b_ub,
            A_eq=A_eq,
            b_eq=b_eq,
            bounds=_bounds_list(self.var_lb, self.var_ub),
            method='highs',
            options=self._linprog_options(),
        )
        self._status = ('linprog', int(res.status))
        self._message = res.message
        if res.x is None:
            self._x = self._obj = None
        else:
            self._x = np.asarray(res.x, dtype=float)
            self._obj = ev.eval_objective(self._x)

    def _linear_feasible(self):
        A_ub, b_ub, A_eq, b_eq = self._linear_rows(self.linear_rows)
        res = linprog(
            np.zeros(self.n),
            A_ub=A_ub,
            b_ub=b_ub,
            A_eq=A_eq,
            b_eq=b_eq,
            bounds=_bounds_list(self.var_lb, self.var_ub),
            method='highs',
            options=self._linprog_options(),
        )
        if res.status == 2:
            self._status = ('linprog', 2)
            self._message = "The linear constraints are infeasible: " + res.message
            self._x = self._obj = None
            return False
        return True

    def _solve_nonlinear(self):
        ev = self._evaluator
        n, m = self.n, self.m
        sign = -1.0 if self.sense == maximize else 1.0

        def fun(x):
            return sign * ev.eval_objective(x)

        def grad(x):
            return sign * ev.eval_objective_gradient(x)

        def jacobian(x):
            J = np.zeros((m, n))
            for i, j, val in ev.eval_jacobian(x):
                J[i - 1, j - 1] = val
            return J

        eq = [k for k in range(m) if self.constr_lb[k] == self.constr_ub[k]]
        eq_set = set(eq)
        lower = [
            k
            for k in range(m)
            if k not in eq_set and not math.isinf(self.constr_lb[k])
        ]
        upper = [
            k
            for k in range(m)
            if k not in eq_set and not math.isinf(self.constr_ub[k])
        ]

        constraints = []
        if eq:
            constraints.append(
                {
                    'type': 'eq',
                    'fun': lambda x: ev.eval_constraints(x)[eq] - self.constr_lb[eq],
                    'jac': lambda x: jacobian(x)[eq],
                }
            )
        # SLSQP inequalities are of the form g(x) >= 0
        if lower or upper:

            def ineq(x):
                g = ev.eval_constraints(x)
                return np.concatenate(
                    (g[lower] - self.constr_lb[lower], self.constr_ub[upper] - g[upper])
                )

            def ineq_jac(x):
                J = jacobian(x)
                return np.vstack((J[lower], -J[upper]))

            constraints.append({'type': 'ineq', 'fun': ineq, 'jac': ineq_jac})

        options = {
            'maxiter': self.config.iteration_limit or 1000,
            'ftol': 1e-10 if self.config.tolerance is None else self.config.tolerance,
        }
        options.update(self.config.solver_options.value())

        callback = None
        if self.config.time_limit is not None:
            timer = TicTocTimer()
            limit = self.config.time_limit

            def callback(xk):
                if timer.toc() > limit:
                    raise _TimeLimitReached()

        x0 = np.clip(self._x0, self.var_lb, self.var_ub)
        res = minimize(
            fun,
            x0,
            jac=grad,
            method='SLSQP',
            bounds=Bounds(self.var_lb, self.var_ub),
            constraints=constraints,
            options=options,
            callback=callback,
        )
        self._x = np.asarray(res.x, dtype=float)
        self._obj = ev.eval_objective(self._x)
        self._message = res.message
        if (
            res.status in _DIVERGENT_STATUS
            and abs(self._obj) > UNBOUNDED_OBJECTIVE
        ):
            self._status = 'unbounded'
        else:
            self._status = ('slsqp', int(res.status))

    #
    # Results
    #

    def native_status(self):
        return self._status

    def objective_value(self):
        return self._obj

    def solution_vector(self):
        return self._x

    def message(self):
        return self._message
