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

import enum
import math

from operator import itemgetter

from nlpbridge.core.expr.numeric_expr import (
    NegationExpression,
    ProductExpression,
    DivisionExpression,
    PowExpression,
    UnaryFunctionExpression,
    SumExpression,
    VarRef,
    native_numeric_types,
)
from nlpbridge.core.expr.visitor import StreamBasedExpressionVisitor
from nlpbridge.repn.util import (
    ExitNodeDispatcher,
    ExprType,
    apply_node_operation,
    initialize_exit_node_dispatcher,
)

_CONSTANT = ExprType.CONSTANT
_LINEAR = ExprType.LINEAR
_GENERAL = ExprType.GENERAL


class Linearity(enum.Enum):
    LINEAR = 'linear'
    NONLINEAR = 'nonlinear'

    def __str__(self):
        return self.name


def _sum_terms(terms):
    # Exactly rounded, so the result does not depend on the term order.
    # Integer-only sums stay integers.
    if all(t.__class__ is int for t in terms):
        return sum(terms)
    return math.fsum(terms)


class LinearForm(object):
    """The canonical linear form of an affine expression:
    ``sum(coefficients[i] * x[i]) + constant``.

    `coefficients` maps variable indices to (nonzero) float
    coefficients, ordered by increasing variable index.

    """

    __slots__ = ('coefficients', 'constant')

    def __init__(self, coefficients=None, constant=0.0):
        self.coefficients = dict(coefficients or {})
        self.constant = constant

    def __eq__(self, other):
        if other.__class__ is not LinearForm:
            return NotImplemented
        return (
            self.coefficients == other.coefficients and self.constant == other.constant
        )

    def __hash__(self):
        return hash((tuple(self.coefficients.items()), self.constant))

    def __str__(self):
        linear = ", ".join(f"{k}: {v}" for k, v in self.coefficients.items())
        return (
            f"{self.__class__.__name__}(coefficients={{{linear}}}, "
            f"constant={self.constant})"
        )

    __repr__ = __str__

    def variables(self):
        return list(self.coefficients)

    def evaluate(self, point):
        """Evaluate the form at `point` (``point[i-1]`` is ``x[i]``)"""
        return math.fsum(
            [c * float(point[i - 1]) for i, c in self.coefficients.items()]
            + [self.constant]
        )


class LinearRepn(object):
    """Intermediate result of the linear walker.

    Coefficient and constant contributions are stored as lists of
    terms and only summed (with :py:func:`math.fsum`) when the final
    :py:class:`LinearForm` is produced.  `multiplier` scales everything
    and is applied lazily.

    """

    __slots__ = ("multiplier", "constant", "linear", "nonlinear")

    def __init__(self):
        self.multiplier = 1
        self.constant = []
        self.linear = {}
        self.nonlinear = False

    def __str__(self):
        return (
            f"{self.__class__.__name__}(mult={self.multiplier}, "
            f"const={self.constant}, linear={self.linear}, "
            f"nonlinear={self.nonlinear})"
        )

    def __repr__(self):
        return str(self)

    def walker_exitNode(self):
        if self.nonlinear:
            return _GENERAL, None
        elif self.linear:
            return _LINEAR, self
        else:
            return _CONSTANT, self.multiplier * _sum_terms(self.constant)

    def append(self, other):
        """Append a child result (the parent operator is "+")"""
        _type, other = other
        if _type is _CONSTANT:
            self.constant.append(other)
            return
        if _type is _GENERAL:
            self.nonlinear = True
            return
        mult = other.multiplier
        if mult == 1:
            self.constant.extend(other.constant)
            for vid, terms in other.linear.items():
                if vid in self.linear:
                    self.linear[vid].extend(terms)
                else:
                    self.linear[vid] = list(terms)
        else:
            self.constant.extend(mult * c for c in other.constant)
            for vid, terms in other.linear.items():
                if vid in self.linear:
                    self.linear[vid].extend(mult * t for t in terms)
                else:
                    self.linear[vid] = [mult * t for t in terms]

    def to_linear_form(self):
        mult = self.multiplier
        coefficients = {}
        for vid in sorted(self.linear):
            coef = math.fsum(mult * t for t in self.linear[vid])
            if coef:
                coefficients[vid] = coef
        constant = math.fsum(mult * c for c in self.constant)
        return LinearForm(coefficients, constant)


#
# NEGATION handlers
#


def _handle_negation_constant(visitor, node, arg):
    return (_CONSTANT, -arg[1])


def _handle_negation_linear(visitor, node, arg):
    arg[1].multiplier *= -1
    return arg


def _handle_general(visitor, node, *args):
    return _GENERAL, None


#
# PRODUCT handler (n-ary)
#


def _handle_product(visitor, node, *args):
    factor = 1
    linear = None
    for _type, val in args:
        if _type is _CONSTANT:
            factor *= val
        elif _type is _LINEAR and linear is None:
            linear = val
        else:
            # a nonlinear factor, or a second non-constant factor
            return _GENERAL, None
    if linear is None:
        return _CONSTANT, factor
    linear.multiplier *= factor
    return _LINEAR, linear


#
# DIVISION handlers
#


def _handle_division_constant_constant(visitor, node, arg1, arg2):
    ans = apply_node_operation(node, (arg1[1], arg2[1]))
    if ans is None:
        return _GENERAL, None
    return _CONSTANT, ans


def _handle_division_linear_constant(visitor, node, arg1, arg2):
    if not arg2[1]:
        return _GENERAL, None
    arg1[1].multiplier /= arg2[1]
    return arg1


#
# EXPONENTIATION handlers
#


def _handle_pow_constant_constant(visitor, node, arg1, arg2):
    ans = apply_node_operation(node, (arg1[1], arg2[1]))
    if ans is None:
        return _GENERAL, None
    return _CONSTANT, ans


def _handle_pow_linear_constant(visitor, node, arg1, arg2):
    # x**0 is not folded: the variable stays in the expression
    if arg2[1] == 1:
        return arg1
    return _GENERAL, None


#
# UNARY handlers
#


def _handle_unary_constant(visitor, node, arg):
    ans = apply_node_operation(node, (arg[1],))
    if ans is None:
        return _GENERAL, None
    return _CONSTANT, ans


def define_exit_node_handlers(_exit_node_handlers=None):
    if _exit_node_handlers is None:
        _exit_node_handlers = {}
    _exit_node_handlers[NegationExpression] = {
        None: _handle_general,
        (_CONSTANT,): _handle_negation_constant,
        (_LINEAR,): _handle_negation_linear,
    }
    _exit_node_handlers[ProductExpression] = {None: _handle_product}
    _exit_node_handlers[DivisionExpression] = {
        None: _handle_general,
        (_CONSTANT, _CONSTANT): _handle_division_constant_constant,
        (_LINEAR, _CONSTANT): _handle_division_linear_constant,
    }
    _exit_node_handlers[PowExpression] = {
        None: _handle_general,
        (_CONSTANT, _CONSTANT): _handle_pow_constant_constant,
        (_LINEAR, _CONSTANT): _handle_pow_linear_constant,
    }
    _exit_node_handlers[UnaryFunctionExpression] = {
        None: _handle_general,
        (_CONSTANT,): _handle_unary_constant,
    }
    return _exit_node_handlers


class LinearRepnVisitor(StreamBasedExpressionVisitor):
    """Walk an expression and return its :py:class:`LinearForm`, or
    None if the expression is not linear.

    Classification is bottom-up: constants and variables are linear,
    sums and negations of linear terms are linear, products are linear
    when at most one factor is non-constant, division by a constant is
    linear, and powers are linear only for the constant exponent 1 (or
    when both operands are constant).  Intrinsic functions of a
    non-constant argument are nonlinear.

    """

    Result = LinearRepn
    exit_node_dispatcher = ExitNodeDispatcher(
        initialize_exit_node_dispatcher(define_exit_node_handlers())
    )

    def initializeWalker(self, expr):
        walk, result = self.beforeChild(None, expr, 0)
        if not walk:
            return False, self.finalizeResult(result)
        return True, expr

    def beforeChild(self, node, child, child_idx):
        if child.__class__ in native_numeric_types:
            return False, (_CONSTANT, child)
        if child.__class__ is VarRef:
            ans = self.Result()
            ans.linear[child.index] = [1]
            return False, (_LINEAR, ans)
        return True, None

    def enterNode(self, node):
        # Sums are potentially large n-ary operators: directly
        # accumulate into the result
        if node.__class__ is SumExpression:
            return node.args, self.Result()
        else:
            return node.args, []

    def exitNode(self, node, data):
        if data.__class__ is self.Result:
            return data.walker_exitNode()
        return self.exit_node_dispatcher[(node.__class__, *map(itemgetter(0), data))](
            self, node, *data
        )

    def finalizeResult(self, result):
        _type, ans = result
        if _type is _GENERAL:
            return None
        if _type is _CONSTANT:
            return LinearForm({}, float(ans))
        return ans.to_linear_form()


def linear_form(expr):
    """Return the :py:class:`LinearForm` of `expr`, or None if `expr`
    is nonlinear."""
    return LinearRepnVisitor().walk_expression(expr)


def classify(expr):
    """Classify an expression.

    Returns
    -------
    (Linearity, LinearForm or None)
        The linear form is only produced for linear expressions.

    """
    form = linear_form(expr)
    if form is None:
        return Linearity.NONLINEAR, None
    return Linearity.LINEAR, form
