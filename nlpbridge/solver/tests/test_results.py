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

import nlpbridge.common.unittest as unittest

from nlpbridge.solver import SolveResult, SolveStatus, SolverConfig, SolveConfig


class TestSolveResult(unittest.TestCase):
    def test_fields(self):
        r = SolveResult(
            'optimal',
            3,
            [1, 2],
            native_status=('slsqp', 0),
            message='Optimization terminated successfully',
            solver_name='scipy',
            wall_time=0.25,
        )
        self.assertIs(r.status, SolveStatus.optimal)
        self.assertTrue(r.is_optimal)
        self.assertEqual(r.objective_value, 3.0)
        self.assertIs(r.objective_value.__class__, float)
        self.assertEqual(r.solution.tolist(), [1.0, 2.0])
        self.assertEqual(r.native_status, ('slsqp', 0))
        self.assertEqual(
            str(r),
            "status:          optimal\n"
            "native status:   ('slsqp', 0)\n"
            "objective value: 3.0\n"
            "solution:        [1.0, 2.0]\n"
            "message:         Optimization terminated successfully\n"
            "solver:          scipy\n"
            "wall time:       0.250 s",
        )
        self.assertEqual(
            repr(r),
            "SolveResult(status=optimal, objective_value=3.0, "
            "solution=[1.0, 2.0], native_status=('slsqp', 0))",
        )

    def test_missing_values(self):
        r = SolveResult(SolveStatus.infeasible, None, [math.nan])
        self.assertFalse(r.is_optimal)
        self.assertTrue(math.isnan(r.objective_value))
        self.assertEqual(r.message, '')
        self.assertIsNone(r.solver_name)
        self.assertEqual(str(r).count('\n'), 3)

    def test_immutable(self):
        r = SolveResult(SolveStatus.error, 1.0, [0.0])
        with self.assertRaisesRegex(AttributeError, "immutable"):
            r.status = SolveStatus.optimal
        with self.assertRaisesRegex(AttributeError, "immutable"):
            del r.objective_value
        with self.assertRaises(ValueError):
            r.solution[0] = 1.0
        self.assertIs(r.status, SolveStatus.error)

    def test_solution_is_copied(self):
        values = [1.0, 2.0]
        r = SolveResult(SolveStatus.optimal, 0.0, values)
        values[0] = 5.0
        self.assertEqual(r.solution.tolist(), [1.0, 2.0])

    def test_bad_status(self):
        with self.assertRaises(ValueError):
            SolveResult('finished', 0.0, [])


class TestSolveStatus(unittest.TestCase):
    def test_str(self):
        self.assertEqual(str(SolveStatus.iterationLimit), 'iterationLimit')
        self.assertIs(SolveStatus('unbounded'), SolveStatus.unbounded)


class TestSolverConfig(unittest.TestCase):
    def test_defaults(self):
        config = SolverConfig()
        self.assertIsNone(config.time_limit)
        self.assertIsNone(config.iteration_limit)
        self.assertIsNone(config.tolerance)
        self.assertEqual(config.solver_options.value(), {})

    def test_domains(self):
        config = SolverConfig()
        config.time_limit = 10
        self.assertEqual(config.time_limit, 10.0)
        with self.assertRaises(ValueError):
            config.iteration_limit = 0
        with self.assertRaises(ValueError):
            config.tolerance = -1e-6
        config.solver_options['ftol'] = 1e-8
        self.assertEqual(config.solver_options.value(), {'ftol': 1e-8})

    def test_solve_config(self):
        config = SolveConfig()
        self.assertFalse(config.suppress_warnings)
        self.assertTrue(config.load_solutions)
        local = config(value={'suppress_warnings': True})
        self.assertTrue(local.suppress_warnings)
        self.assertFalse(config.suppress_warnings)


if __name__ == "__main__":
    unittest.main()
