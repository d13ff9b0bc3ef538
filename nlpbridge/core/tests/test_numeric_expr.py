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

from nlpbridge.common.errors import InvalidReference
from nlpbridge.core.expr import (
    DivisionExpression,
    NegationExpression,
    PowExpression,
    ProductExpression,
    SumExpression,
    UnaryFunctionExpression,
    VarRef,
    cos,
    exp,
    log,
    sin,
    sqrt,
    unary_functions,
)


class TestVarRef(unittest.TestCase):
    def test_index(self):
        x = VarRef(3)
        self.assertEqual(x.index, 3)
        self.assertEqual(x.args, ())
        self.assertEqual(x.nargs(), 0)
        self.assertTrue(x.is_variable_type())
        self.assertFalse(x.is_expression_type())
        self.assertEqual(str(x), "x[3]")

    def test_invalid_index(self):
        for bad in (0, -1, 1.0, True, '1', None):
            with self.assertRaises(InvalidReference):
                VarRef(bad)

    def test_equality(self):
        self.assertEqual(VarRef(1), VarRef(1))
        self.assertNotEqual(VarRef(1), VarRef(2))
        self.assertNotEqual(VarRef(1), 1)
        self.assertEqual(hash(VarRef(1)), hash(VarRef(1)))
        self.assertEqual(len({VarRef(1), VarRef(1), VarRef(2)}), 2)


class TestConstruction(unittest.TestCase):
    def setUp(self):
        self.x = VarRef(1)
        self.y = VarRef(2)
        self.z = VarRef(3)

    def test_sum(self):
        x, y, z = self.x, self.y, self.z
        e = x + y
        self.assertIs(e.__class__, SumExpression)
        self.assertEqual(e.args, (x, y))
        # sums are flattened from the left
        e = x + y + z
        self.assertEqual(e.args, (x, y, z))
        self.assertEqual(e.nargs(), 3)
        e = x + (y + z)
        self.assertEqual(e.nargs(), 2)
        self.assertIs(e.arg(1).__class__, SumExpression)

    def test_additive_zero(self):
        x = self.x
        self.assertIs(x + 0, x)
        self.assertIs(0 + x, x)
        self.assertIs(x + 0.0, x)
        self.assertIs(sum([x]), x)

    def test_sub(self):
        x, y = self.x, self.y
        e = x - y
        self.assertIs(e.__class__, SumExpression)
        self.assertIs(e.arg(1).__class__, NegationExpression)
        self.assertEqual(e.arg(1).arg(0), y)
        e = x - 5
        self.assertEqual(e.args, (x, -5))
        e = 5 - x
        self.assertEqual(e.args, (5, NegationExpression((x,))))

    def test_negation(self):
        x = self.x
        e = -x
        self.assertIs(e.__class__, NegationExpression)
        self.assertIs(-e, x)
        self.assertIs(+x, x)

    def test_product(self):
        x, y, z = self.x, self.y, self.z
        e = 2 * x
        self.assertIs(e.__class__, ProductExpression)
        self.assertEqual(e.args, (2, x))
        e = x * y * z
        self.assertEqual(e.args, (x, y, z))
        # multiplicative ones are kept
        self.assertEqual((1 * x).args, (1, x))

    def test_numpy_scalar_operand(self):
        x = self.x
        e = x * np.float64(2.5)
        self.assertEqual(e.args, (x, 2.5))
        self.assertIs(e.arg(1).__class__, float)

    def test_division(self):
        x, y = self.x, self.y
        e = x / y
        self.assertIs(e.__class__, DivisionExpression)
        self.assertEqual(e.args, (x, y))
        e = 1 / x
        self.assertEqual(e.args, (1, x))
        with self.assertRaisesRegex(ZeroDivisionError, "divided by zero"):
            x / 0

    def test_pow(self):
        x, y = self.x, self.y
        e = x**2
        self.assertIs(e.__class__, PowExpression)
        self.assertEqual(e.args, (x, 2))
        e = 2**x
        self.assertEqual(e.args, (2, x))
        e = x**y
        self.assertEqual(e.args, (x, y))

    def test_unsupported_operand(self):
        with self.assertRaises(TypeError):
            self.x + 'a'
        with self.assertRaises(TypeError):
            self.x * [1]

    def test_no_truth_value(self):
        with self.assertRaisesRegex(TypeError, "no truth value"):
            bool(self.x + 1)
        with self.assertRaises(TypeError):
            if self.x:
                pass

    def test_unary_functions(self):
        x = self.x
        e = sin(x)
        self.assertIs(e.__class__, UnaryFunctionExpression)
        self.assertEqual(e.getname(), 'sin')
        self.assertEqual(e.args, (x,))
        self.assertEqual(sorted(unary_functions), [
            'acos', 'asin', 'atan', 'cos', 'cosh', 'exp', 'log', 'log10',
            'sin', 'sinh', 'sqrt', 'tan', 'tanh',
        ])
        with self.assertRaisesRegex(ValueError, "Unknown intrinsic function 'erf'"):
            UnaryFunctionExpression((x,), 'erf')

    def test_unary_functions_of_numbers(self):
        self.assertEqual(sin(0), 0.0)
        self.assertEqual(exp(0), 1.0)
        self.assertAlmostEqual(log(math.e), 1.0)
        self.assertEqual(sqrt(4), 2.0)
        with self.assertRaisesRegex(TypeError, "sin\\(\\) argument must be"):
            sin('a')

    def test_create_node_with_local_data(self):
        x, y = self.x, self.y
        e = cos(x)
        f = e.create_node_with_local_data((y,))
        self.assertEqual(f.getname(), 'cos')
        self.assertEqual(f.args, (y,))
        g = (x * y).create_node_with_local_data((y, x, 2))
        self.assertEqual(g.args, (y, x, 2))


class TestStructuralEquality(unittest.TestCase):
    def test_equal_trees(self):
        x, y = VarRef(1), VarRef(2)
        self.assertEqual(x * y + sin(x), x * y + sin(x))
        self.assertEqual(hash(x * y + sin(x)), hash(x * y + sin(x)))
        self.assertNotEqual(x * y, y * x)
        self.assertNotEqual(sin(x), cos(x))
        self.assertNotEqual(x + y, x + y + 1)

    def test_int_and_float_constants_differ(self):
        x = VarRef(1)
        self.assertNotEqual(x**2, x**2.0)
        self.assertNotEqual(2 * x, 2.0 * x)
        self.assertEqual(x**2, x**2)

    def test_comparison_with_other_objects(self):
        x = VarRef(1)
        self.assertNotEqual(x + 1, 'x[1] + 1')
        self.assertNotEqual(x + 1, None)

    def test_assertExpressionsEqual(self):
        x = VarRef(1)
        self.assertExpressionsEqual(x + 2, x + 2)
        with self.assertRaises(self.failureException):
            self.assertExpressionsEqual(x + 2, x + 2.0)


class TestToString(unittest.TestCase):
    def setUp(self):
        self.x = VarRef(1)
        self.y = VarRef(2)
        self.z = VarRef(3)

    def test_basic(self):
        x, y = self.x, self.y
        self.assertEqual(str(x * y), "x[1]*x[2]")
        self.assertEqual(str(x**2), "x[1]**2")
        self.assertEqual(str(sin(x)), "sin(x[1])")
        self.assertEqual(str(x - 5.0), "x[1] - 5.0")
        self.assertEqual(str(x - y), "x[1] - x[2]")
        self.assertEqual(str(2 * x + 3), "2*x[1] + 3")
        self.assertEqual(str(x / y), "x[1]/x[2]")
        self.assertEqual(str(2**x), "2**x[1]")

    def test_parentheses(self):
        x, y, z = self.x, self.y, self.z
        self.assertEqual(str((x + y) * z), "(x[1] + x[2])*x[3]")
        self.assertEqual(str(-(x + y)), "-(x[1] + x[2])")
        self.assertEqual(str(x / (y * z)), "x[1]/(x[2]*x[3])")
        self.assertEqual(str(x * y / z), "x[1]*x[2]/x[3]")
        self.assertEqual(str((x**2) ** 3), "(x[1]**2)**3")
        self.assertEqual(str(x ** (y**2)), "x[1]**(x[2]**2)")
        self.assertEqual(str((x + y) ** 2), "(x[1] + x[2])**2")
        self.assertEqual(str(x - 2 * y), "x[1] - 2*x[2]")
        self.assertEqual(str(x + (y + z)), "x[1] + (x[2] + x[3])")
        self.assertEqual(str(sin(x + y)), "sin(x[1] + x[2])")

    def test_negative_constants(self):
        x = self.x
        self.assertEqual(str(x**-1), "x[1]**(-1)")
        self.assertEqual(str(x * -2), "x[1]*(-2)")
        self.assertEqual(str(-2 * x), "-2*x[1]")
        self.assertEqual(str(-x), "-x[1]")

    def test_repr(self):
        self.assertEqual(repr(self.x + 1), "<SumExpression: x[1] + 1>")

    def test_deterministic(self):
        x, y = self.x, self.y
        self.assertEqual(str(x * sin(y) + y**2), str(x * sin(y) + y**2))


if __name__ == "__main__":
    unittest.main()
