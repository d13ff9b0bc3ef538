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

import math

import numpy as np

import nlpbridge.common.unittest as unittest

from nlpbridge.common.errors import ModeNotInitialized
from nlpbridge.common.log import LoggingIntercept
from nlpbridge.core import Model, cos, maximize, sin
from nlpbridge.core.model import Variable
from nlpbridge.nlp import Feature
from nlpbridge.solver import (
    NLPSolverBase,
    NLPSolverModel,
    SolveOrchestrator,
    SolveResult,
    SolveState,
    SolveStatus,
    solve,
    warm_start_value,
)


class DummySolverModel(NLPSolverModel):
    def __init__(self, solver):
        self.solver = solver

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
        solver = self.solver
        solver.loaded = dict(
            num_vars=num_vars,
            num_constraints=num_constraints,
            var_lb=list(var_lb),
            var_ub=list(var_ub),
            constr_lb=list(constr_lb),
            constr_ub=list(constr_ub),
            sense=sense,
        )
        self.evaluator = evaluator
        evaluator.initialize(solver.features)
        if Feature.EXPR_GRAPH in solver.features:
            solver.expressions = [
                str(evaluator.constraint_expr(i))
                for i in range(1, num_constraints + 1)
            ]
            solver.objective_expression = str(evaluator.objective_expr())

    def set_warm_start(self, values):
        self.solver.warm_start = list(values)

    def optimize(self):
        if self.solver.on_optimize is not None:
            self.solver.on_optimize(self.evaluator)

    def native_status(self):
        return self.solver.native

    def objective_value(self):
        return self.solver.objective

    def solution_vector(self):
        return self.solver.solution

    def message(self):
        return 'dummy message'


class DummySolver(NLPSolverBase):
    """Adapter that records what the orchestrator hands it and returns a
    preset outcome"""

    name = 'dummy'

    status_map = {
        'ok': SolveStatus.optimal,
        'infeasible': SolveStatus.infeasible,
        'limit': SolveStatus.iterationLimit,
    }

    def __init__(self, **kwds):
        super().__init__(**kwds)
        self.features = [Feature.EXPR_GRAPH]
        self.native = 'ok'
        self.objective = None
        self.solution = None
        self.on_optimize = None
        self.loaded = None
        self.warm_start = None
        self.expressions = None
        self.objective_expression = None

    def available(self):
        return self.Availability.FullLicense

    def version(self):
        return (1, 0)

    def create_model_instance(self):
        return DummySolverModel(self)


def small_model():
    m = Model('small')
    x = m.var(m.add_variable(lb=0, ub=4, value=1))
    y = m.var(m.add_variable(value=2))
    m.add_constraint(x + y, '<=', 3)
    m.add_constraint(x * y, '>=', 1)
    m.set_objective(x**2 + y)
    return m


class TestWarmStart(unittest.TestCase):
    def test_warm_start_value(self):
        self.assertEqual(warm_start_value(Variable(1, lb=-1, ub=1, value=0.5)), 0.5)
        self.assertEqual(warm_start_value(Variable(1, lb=-1, ub=1, value=7)), 7)
        self.assertEqual(warm_start_value(Variable(1)), 0)
        self.assertEqual(warm_start_value(Variable(1, lb=1)), 1)
        self.assertEqual(warm_start_value(Variable(1, lb=-5, ub=-2)), -2)
        self.assertEqual(warm_start_value(Variable(1, lb=-5)), 0)

    def test_passed_to_adapter(self):
        m = Model()
        m.add_variable(lb=-1, ub=1, value=0.5)
        m.add_variable(lb=1)
        m.add_variable()
        m.add_variable(ub=-2)
        solver = DummySolver()
        solver.solution = [0, 0, 0, 0]
        solve(m, solver)
        self.assertEqual(solver.warm_start, [0.5, 1.0, 0.0, -2.0])


class TestOrchestrator(unittest.TestCase):
    def test_construction(self):
        m = small_model()
        orch = SolveOrchestrator(m, DummySolver())
        self.assertIs(orch.state, SolveState.Built)
        self.assertEqual(
            repr(orch), "<SolveOrchestrator model='small' solver='dummy' state=Built>"
        )
        with self.assertRaises(ValueError):
            SolveOrchestrator(None, DummySolver())
        with self.assertRaises(ValueError):
            SolveOrchestrator(m, 'dummy')
        with self.assertRaises(ValueError):
            SolveOrchestrator(m, DummySolver(), bogus=True)

    def test_load_problem(self):
        m = small_model()
        m.set_objective(m.objective.expr, maximize)
        solver = DummySolver()
        solver.solution = [1.0, 1.0]
        solve(m, solver)
        inf = float('inf')
        self.assertEqual(
            solver.loaded,
            dict(
                num_vars=2,
                num_constraints=2,
                var_lb=[0.0, -inf],
                var_ub=[4.0, inf],
                constr_lb=[-inf, 1.0],
                constr_ub=[3.0, inf],
                sense=maximize,
            ),
        )

    def test_optimal(self):
        m = small_model()
        solver = DummySolver()
        solver.solution = [1.5, 0.5]
        solver.objective = 2.75
        orch = SolveOrchestrator(m, solver)
        result = orch.solve()
        self.assertIsInstance(result, SolveResult)
        self.assertIs(result, orch.result)
        self.assertIs(orch.state, SolveState.Solved)
        self.assertIs(result.status, SolveStatus.optimal)
        self.assertTrue(result.is_optimal)
        self.assertEqual(result.objective_value, 2.75)
        self.assertEqual(result.solution.tolist(), [1.5, 0.5])
        self.assertEqual(result.native_status, 'ok')
        self.assertEqual(result.message, 'dummy message')
        self.assertEqual(result.solver_name, 'dummy')
        self.assertGreaterEqual(result.wall_time, 0)
        self.assertEqual(m.get_values(), [1.5, 0.5])
        self.assertFalse(m.frozen)

    def test_states_during_solve(self):
        m = small_model()
        solver = DummySolver()
        solver.solution = [1.0, 1.0]
        orch = SolveOrchestrator(m, solver)
        seen = []

        def record(evaluator):
            seen.append((orch.state, m.frozen, evaluator.features))
            with self.assertRaisesRegex(RuntimeError, "the model is frozen"):
                m.add_variable()

        solver.on_optimize = record
        orch.solve()
        self.assertEqual(
            seen, [(SolveState.Optimizing, True, frozenset([Feature.EXPR_GRAPH]))]
        )
        self.assertIs(orch.state, SolveState.Solved)
        self.assertEqual(m.n_variables, 2)

    def test_single_use(self):
        solver = DummySolver()
        solver.solution = [1.0, 1.0]
        orch = SolveOrchestrator(small_model(), solver)
        orch.solve()
        with self.assertRaisesRegex(
            RuntimeError, r"may only be called once \(current state: Solved\)"
        ):
            orch.solve()

    def test_index_stability(self):
        m = small_model()
        for values in ([1.0, 2.0], [3.0, 0.5]):
            solver = DummySolver()
            solver.solution = values
            solve(m, solver)
            self.assertEqual(m.get_values(), values)
            self.assertEqual([v.name for v in m.variables], ['x[1]', 'x[2]'])
            self.assertEqual([c.index for c in m.constraints], [1, 2])

    def test_load_solutions_false(self):
        m = small_model()
        solver = DummySolver()
        solver.solution = [1.5, 0.5]
        result = solve(m, solver, load_solutions=False)
        self.assertIs(result.status, SolveStatus.optimal)
        self.assertEqual(m.get_values(), [1.0, 2.0])

    def test_non_optimal(self):
        m = small_model()
        solver = DummySolver()
        solver.native = 'infeasible'
        with LoggingIntercept(module='nlpbridge.solver') as out:
            result = solve(m, solver)
        self.assertEqual(out.getvalue(), "")
        self.assertIs(result.status, SolveStatus.infeasible)
        self.assertFalse(result.is_optimal)
        self.assertTrue(math.isnan(result.objective_value))
        self.assertEqual(result.solution.shape, (2,))
        self.assertTrue(np.isnan(result.solution).all())
        self.assertEqual(m.get_values(), [1.0, 2.0])

    def test_iteration_limit_keeps_values(self):
        m = small_model()
        solver = DummySolver()
        solver.native = 'limit'
        solver.solution = [3.0, 3.0]
        solver.objective = 12.0
        result = solve(m, solver)
        self.assertIs(result.status, SolveStatus.iterationLimit)
        self.assertEqual(result.solution.tolist(), [3.0, 3.0])
        self.assertEqual(m.get_values(), [1.0, 2.0])

    def test_unrecognized_status(self):
        m = small_model()
        solver = DummySolver()
        solver.native = 'weird'
        solver.solution = [1.5, 0.5]
        with LoggingIntercept(module='nlpbridge') as out:
            result = solve(m, solver)
        self.assertEqual(
            out.getvalue(),
            "Solver 'dummy' returned the unrecognized status 'weird'; the solve "
            "is reported as 'error'\n",
        )
        self.assertIs(result.status, SolveStatus.error)
        self.assertEqual(result.native_status, 'weird')
        self.assertEqual(m.get_values(), [1.0, 2.0])

    def test_unhashable_status(self):
        solver = DummySolver()
        solver.native = ['ok']
        with LoggingIntercept(module='nlpbridge'):
            result = solve(small_model(), solver)
        self.assertIs(result.status, SolveStatus.error)

    def test_suppress_warnings(self):
        m = small_model()
        solver = DummySolver()
        solver.native = 'weird'
        with LoggingIntercept(module='nlpbridge') as out:
            result = solve(m, solver, suppress_warnings=True)
        self.assertEqual(out.getvalue(), "")
        self.assertIs(result.status, SolveStatus.error)

    def test_bad_solution_shape(self):
        m = small_model()
        solver = DummySolver()
        solver.solution = [1.0, 2.0, 3.0]
        orch = SolveOrchestrator(m, solver)
        with self.assertRaisesRegex(
            ValueError, r"returned a solution with shape \(3,\); expected \(2,\)"
        ):
            orch.solve()
        self.assertIs(orch.state, SolveState.Failed)

    def test_adapter_exception(self):
        m = small_model()
        solver = DummySolver()

        def fail(evaluator):
            raise RuntimeError("solver crashed")

        solver.on_optimize = fail
        orch = SolveOrchestrator(m, solver)
        with self.assertRaisesRegex(RuntimeError, "solver crashed"):
            orch.solve()
        self.assertIs(orch.state, SolveState.Failed)
        self.assertIsNone(orch.result)
        self.assertFalse(m.frozen)
        self.assertEqual(m.get_values(), [1.0, 2.0])
        # the model may be modified again
        self.assertEqual(m.add_variable(), 3)

    def test_mode_not_initialized(self):
        m = small_model()
        solver = DummySolver()
        solver.features = [Feature.GRAD]

        def use_jacobian(evaluator):
            evaluator.eval_jacobian([1.0, 2.0])

        solver.on_optimize = use_jacobian
        orch = SolveOrchestrator(m, solver)
        with self.assertRaises(ModeNotInitialized):
            orch.solve()
        self.assertIs(orch.state, SolveState.Failed)
        self.assertFalse(m.frozen)


class TestCanonicalOutput(unittest.TestCase):
    def test_constraint_and_objective_expressions(self):
        m = Model()
        x = m.var(m.add_variable())
        y = m.var(m.add_variable())
        m.add_constraint(2 * x + y, '<=', 1)
        m.add_constraint(sin(x) * cos(y), '==', 5)
        m.add_constraint(x**2, '==', 1)
        m.add_constraint(2 * x**2, '==', 2)
        m.add_constraint(2 * x**2 + y, '>=', 2)
        m.set_objective(-x + y)
        solver = DummySolver()
        solver.solution = [0.0, 0.0]
        solve(m, solver)
        self.assertEqual(
            solver.expressions,
            [
                "2.0*x[1] + 1.0*x[2] <= 1.0",
                "sin(x[1])*cos(x[2]) - 5.0 == 0.0",
                "x[1]**2 - 1.0 == 0.0",
                "2*x[1]**2 - 2.0 == 0.0",
                "2*x[1]**2 + x[2] - 2.0 >= 0.0",
            ],
        )
        self.assertEqual(solver.objective_expression, "-1.0*x[1] + 1.0*x[2]")

    def test_nonlinear_objective_expression(self):
        m = Model()
        x = m.var(m.add_variable(lb=1))
        y = m.var(m.add_variable())
        m.set_objective(x**y)
        solver = DummySolver()
        solver.solution = [1.0, 1.0]
        solve(m, solver)
        self.assertEqual(solver.expressions, [])
        self.assertEqual(solver.objective_expression, "x[1]**x[2]")


if __name__ == "__main__":
    unittest.main()
