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

"""
Symbolic differentiation of nlpbridge expressions.

Derivatives are propagated from the root to the leaves (reverse mode):
every interior node is visited after all of its parents, and each node
class has a ``_diff_*`` rule that pushes the node's adjoint to its
children.  The adjoints are themselves expressions, so the result is a
set of derivative expressions that can be evaluated (or differentiated
again) like any other expression.
"""

import math

from nlpbridge.common.errors import DifferentiationException
from nlpbridge.core.expr import numeric_expr as _expr
from nlpbridge.core.expr.numeric_expr import native_numeric_types
from nlpbridge.core.expr.visitor import (
    StreamBasedExpressionVisitor,
    identify_variables,
)

_LOG10 = math.log(10)


def _is_const(val, target=None):
    if val.__class__ not in native_numeric_types:
        return False
    return target is None or val == target


def _add(a, b):
    if _is_const(a, 0):
        return b
    if _is_const(b, 0):
        return a
    return a + b


def _mul(a, b):
    if _is_const(a, 0) or _is_const(b, 0):
        return 0
    if _is_const(a, 1):
        return b
    if _is_const(b, 1):
        return a
    return a * b


def _div(a, b):
    if _is_const(a, 0):
        return 0
    if _is_const(b, 1):
        return a
    return a / b


def _neg(a):
    return -a


def _pow(a, b):
    if _is_const(b, 0):
        return 1
    if _is_const(b, 1):
        return a
    return a**b


def _diff_SumExpression(node, der, accumulate):
    for arg in node.args:
        accumulate(arg, der)


def _diff_ProductExpression(node, der, accumulate):
    args = node.args
    for i, arg in enumerate(args):
        if arg.__class__ in native_numeric_types:
            continue
        term = der
        for j, other in enumerate(args):
            if i != j:
                term = _mul(term, other)
        accumulate(arg, term)


def _diff_NegationExpression(node, der, accumulate):
    accumulate(node.arg(0), _neg(der))


def _diff_DivisionExpression(node, der, accumulate):
    num, den = node.args
    accumulate(num, _div(der, den))
    if den.__class__ not in native_numeric_types:
        accumulate(den, _neg(_div(_mul(der, num), _pow(den, 2))))


def _diff_PowExpression(node, der, accumulate):
    base, exponent = node.args
    if exponent.__class__ in native_numeric_types:
        # d/dx x**c = c*x**(c-1); an int exponent stays an int
        accumulate(base, _mul(der, _mul(exponent, _pow(base, exponent - 1))))
        return
    if base.__class__ not in native_numeric_types:
        accumulate(
            base, _mul(der, _mul(exponent, _pow(base, _add(exponent, -1))))
        )
    # d/dy x**y = x**y*log(x), which is only defined for x > 0
    if base.__class__ in native_numeric_types and base > 0:
        log_base = math.log(base)
    else:
        log_base = _expr.UnaryFunctionExpression((base,), 'log')
    accumulate(exponent, _mul(der, _mul(node, log_base)))


def _diff_exp(node, arg, der):
    return _mul(der, node)


def _diff_log(node, arg, der):
    return _div(der, arg)


def _diff_log10(node, arg, der):
    return _div(der, _mul(arg, _LOG10))


def _diff_sqrt(node, arg, der):
    return _div(der, _mul(2, node))


def _diff_sin(node, arg, der):
    return _mul(der, _expr.cos(arg))


def _diff_cos(node, arg, der):
    return _neg(_mul(der, _expr.sin(arg)))


def _diff_tan(node, arg, der):
    return _div(der, _pow(_expr.cos(arg), 2))


def _diff_asin(node, arg, der):
    return _div(der, _pow(1 - _pow(arg, 2), 0.5))


def _diff_acos(node, arg, der):
    return _neg(_div(der, _pow(1 - _pow(arg, 2), 0.5)))


def _diff_atan(node, arg, der):
    return _div(der, 1 + _pow(arg, 2))


def _diff_sinh(node, arg, der):
    return _mul(der, _expr.cosh(arg))


def _diff_cosh(node, arg, der):
    return _mul(der, _expr.sinh(arg))


def _diff_tanh(node, arg, der):
    return _div(der, _pow(_expr.cosh(arg), 2))


_unary_map = {
    'exp': _diff_exp,
    'log': _diff_log,
    'log10': _diff_log10,
    'sqrt': _diff_sqrt,
    'sin': _diff_sin,
    'cos': _diff_cos,
    'tan': _diff_tan,
    'asin': _diff_asin,
    'acos': _diff_acos,
    'atan': _diff_atan,
    'sinh': _diff_sinh,
    'cosh': _diff_cosh,
    'tanh': _diff_tanh,
}


def _diff_UnaryFunctionExpression(node, der, accumulate):
    name = node.getname()
    if name not in _unary_map:
        raise DifferentiationException(
            'Unsupported intrinsic function for differentiation: {0}'.format(name)
        )
    arg = node.arg(0)
    accumulate(arg, _unary_map[name](node, arg, der))


_diff_map = {
    _expr.SumExpression: _diff_SumExpression,
    _expr.ProductExpression: _diff_ProductExpression,
    _expr.NegationExpression: _diff_NegationExpression,
    _expr.DivisionExpression: _diff_DivisionExpression,
    _expr.PowExpression: _diff_PowExpression,
    _expr.UnaryFunctionExpression: _diff_UnaryFunctionExpression,
}


class _TopologicalOrderVisitor(StreamBasedExpressionVisitor):
    """Collect the unique interior nodes of an expression (by identity)
    in postorder.  Reversing the list gives an order in which every node
    comes after all of its parents."""

    def __init__(self):
        super().__init__()
        self.seen = set()
        self.order = []

    def beforeChild(self, node, child, child_idx):
        if child.__class__ in native_numeric_types or not child.is_expression_type():
            return False, None
        if id(child) in self.seen:
            return False, None
        return True, None

    def exitNode(self, node, data):
        if node.__class__ in native_numeric_types or not node.is_expression_type():
            return None
        self.seen.add(id(node))
        self.order.append(node)
        return None


def reverse_sd(expr):
    """
    First order reverse symbolic differentiation

    Parameters
    ----------
    expr:
        expression to differentiate

    Returns
    -------
    dict
        maps the index of every variable appearing in `expr` to the
        derivative of `expr` with respect to that variable (either an
        expression or a native constant).  Entries are in the order the
        variables are first encountered in the expression.

    Raises
    ------
    DifferentiationException
        if `expr` contains a node class with no derivative rule
    """
    ans = {}
    if expr.__class__ in native_numeric_types:
        return ans
    if expr.is_variable_type():
        ans[expr.index] = 1
        return ans

    visitor = _TopologicalOrderVisitor()
    visitor.walk_expression(expr)

    # adjoints of interior nodes are keyed by id(); variables by index
    der_dict = {id(expr): 1}

    first_seen = [v.index for v in identify_variables(expr)]

    def accumulate(child, value):
        if child.__class__ in native_numeric_types:
            return
        if child.is_variable_type():
            ans[child.index] = _add(ans.get(child.index, 0), value)
        else:
            key = id(child)
            der_dict[key] = _add(der_dict.get(key, 0), value)

    for node in reversed(visitor.order):
        handler = _diff_map.get(node.__class__, None)
        if handler is None:
            raise DifferentiationException(
                "Unsupported expression type for differentiation: {0}".format(
                    type(node)
                )
            )
        der = der_dict.get(id(node), 0)
        if _is_const(der, 0):
            continue
        handler(node, der, accumulate)

    return {idx: ans.get(idx, 0) for idx in first_seen}
