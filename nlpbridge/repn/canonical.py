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

"""Deterministic canonical forms of constraints and objectives.

These are the symbolic trees handed to solvers that consume expression
graphs (see :py:meth:`NLPEvaluator.constraint_expr`):

* a linear constraint renders as ``c1*x[i1] + c2*x[i2] + ... <relop> bound``
  with float coefficients, terms in increasing variable index, zero
  coefficients dropped and a zero constant omitted;
* a nonlinear constraint keeps its operator structure with literal
  constants folded;
* a nonlinear one-sided constraint renders as ``body - rhs <relop> 0.0``
  with ``rhs`` folded into the constant of the body; a ranged one stays
  ``lb <= body <= ub``.
"""

from nlpbridge.core.expr.numeric_expr import (
    DivisionExpression,
    NegationExpression,
    ProductExpression,
    SumExpression,
    VarRef,
    native_numeric_types,
)
from nlpbridge.core.expr.relational_expr import (
    EqualityExpression,
    InequalityExpression,
    RangedExpression,
)
from nlpbridge.core.expr.visitor import StreamBasedExpressionVisitor
from nlpbridge.repn.util import apply_node_operation


def _is_native(val):
    return val.__class__ in native_numeric_types


def _fold_sum(node, args):
    terms = []
    const = 0
    for arg in args:
        if arg.__class__ is SumExpression:
            sub = arg.args
        else:
            sub = (arg,)
        for term in sub:
            if _is_native(term):
                const += term
            else:
                terms.append(term)
    if const != 0:
        terms.append(const)
    if not terms:
        return const
    if len(terms) == 1:
        return terms[0]
    return SumExpression(terms)


def _fold_product(node, args):
    factors = []
    const = 1
    for arg in args:
        if arg.__class__ is ProductExpression:
            sub = arg.args
        else:
            sub = (arg,)
        for factor in sub:
            if _is_native(factor):
                const *= factor
            else:
                factors.append(factor)
    if const != 1:
        factors.insert(0, const)
    if not factors:
        return const
    if len(factors) == 1:
        return factors[0]
    return ProductExpression(factors)


def _fold_division(node, args):
    num, den = args
    if _is_native(den) and den == 1:
        return num
    return None


def _fold_negation(node, args):
    if args[0].__class__ is NegationExpression:
        return args[0].arg(0)
    return None


_fold_handlers = {
    SumExpression: _fold_sum,
    ProductExpression: _fold_product,
    DivisionExpression: _fold_division,
    NegationExpression: _fold_negation,
}


class ConstantFoldingVisitor(StreamBasedExpressionVisitor):
    """Fold literal constants in an expression.

    Constant subtrees are evaluated (unless the operation is undefined
    for the constants, in which case the subtree is kept), literals in
    n-ary sums are merged into a single trailing constant and literals
    in n-ary products into a single leading coefficient.  Additive
    zeros and multiplicative ones are dropped; nested sums and products
    are flattened.  All other structure is preserved.

    """

    def initializeWalker(self, expr):
        walk, result = self.beforeChild(None, expr, 0)
        if not walk:
            return False, result
        return True, expr

    def beforeChild(self, node, child, child_idx):
        if _is_native(child) or child.__class__ is VarRef:
            return False, child
        return True, None

    def exitNode(self, node, data):
        if all(_is_native(arg) for arg in data):
            ans = apply_node_operation(node, data)
            if ans is not None:
                return ans
        handler = _fold_handlers.get(node.__class__, None)
        if handler is not None:
            ans = handler(node, data)
            if ans is not None:
                return ans
        if any(new is not old for new, old in zip(data, node.args)):
            return node.create_node_with_local_data(tuple(data))
        return node


def fold_constants(expr):
    """Return `expr` with its literal constants folded"""
    return ConstantFoldingVisitor().walk_expression(expr)


def linear_expression(form):
    """Build the canonical expression for a :py:class:`LinearForm`.

    Terms are ``coef*x[i]`` products in increasing variable index; a
    nonzero constant is appended as the last term.
    """
    terms = [
        ProductExpression((float(coef), VarRef(vid)))
        for vid, coef in form.coefficients.items()
    ]
    if form.constant:
        terms.append(float(form.constant))
    if not terms:
        return 0.0
    if len(terms) == 1:
        return terms[0]
    return SumExpression(terms)


def _move_bound(body, rhs):
    # body - rhs, folded into the constant term of the body
    if body.__class__ is SumExpression:
        args = body.args + (-rhs,)
    else:
        args = (body, -rhs)
    return fold_constants(SumExpression(args))


def canonical_constraint(constraint):
    """Return the canonical relational expression for a model
    constraint (see the module documentation)."""
    relation = constraint.relation
    form = constraint.linear_form
    if form is not None:
        body = linear_expression(form)
    else:
        body = fold_constants(constraint.body)

    if relation == 'ranged':
        return RangedExpression(
            (float(constraint.lower), body, float(constraint.upper))
        )

    if relation == '>=':
        rhs = float(constraint.lower)
    else:
        rhs = float(constraint.upper)
    if form is None:
        body = _move_bound(body, rhs)
        rhs = 0.0
    if relation == '==':
        return EqualityExpression((body, rhs))
    return InequalityExpression((body, rhs), relation)


def canonical_objective(objective):
    """Return the canonical expression of a model objective: the linear
    form for a linear objective, the constant-folded tree otherwise."""
    form = objective.linear_form
    if form is not None:
        return linear_expression(form)
    return fold_constants(objective.expr)
