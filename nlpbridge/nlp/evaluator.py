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

"""The evaluator handed to a solver adapter.

An :py:class:`NLPEvaluator` is built from a (frozen)
:py:class:`~nlpbridge.core.model.Model` and exposes the problem the way
numerical solvers consume it:

- dimensions, bound arrays and the objective sense,
- *numeric mode*: values, gradients, the sparse constraint Jacobian
  and the sparse Hessian of the Lagrangian at a point,
- *expression mode*: canonical symbolic expressions for the objective
  and each constraint.

Solvers first call :py:meth:`NLPEvaluator.initialize` with the
:py:class:`Feature` set they need; derivative expressions are generated
once at that point.  Every evaluation is a pure function of the point
passed in: the only state updated by an evaluation is the
:py:attr:`NLPEvaluator.eval_counts` diagnostics counter, which is
protected by a lock so that an evaluator may be shared between threads.

Variables and constraints use the model's 1-based indices.  Dense arrays
are ordered by index (position ``k`` holds index ``k+1``), while sparse
triples carry the 1-based indices themselves.
"""

import enum
import logging
import threading

import numpy as np

from nlpbridge.common.errors import IndexOutOfRange, ModeNotInitialized
from nlpbridge.core.expr.calculus import reverse_sd
from nlpbridge.core.expr.numeric_expr import PowExpression, native_numeric_types
from nlpbridge.core.expr.visitor import (
    StreamBasedExpressionVisitor,
    evaluate_expression,
)
from nlpbridge.repn.canonical import canonical_constraint, canonical_objective

logger = logging.getLogger('nlpbridge.nlp')


class Feature(str, enum.Enum):
    """The evaluation modes a solver may request"""

    GRAD = 'Grad'
    JAC = 'Jac'
    HESS = 'Hess'
    EXPR_GRAPH = 'ExprGraph'

    @classmethod
    def _missing_(cls, value):
        for member in cls:
            if member.name == value:
                return member
        return None

    def __str__(self):
        return self.value


class _VariableExponentFinder(StreamBasedExpressionVisitor):
    def __init__(self):
        super().__init__()
        self.found = False

    def beforeChild(self, node, child, child_idx):
        if self.found:
            return False, None
        if child.__class__ in native_numeric_types or not child.is_expression_type():
            return False, None
        return True, None

    def exitNode(self, node, data):
        if (
            node.__class__ is PowExpression
            and node.arg(1).__class__ not in native_numeric_types
        ):
            self.found = True


def _has_variable_exponent(expr):
    if expr.__class__ in native_numeric_types or not expr.is_expression_type():
        return False
    finder = _VariableExponentFinder()
    finder.walk_expression(expr)
    return finder.found


def _second_derivatives(gradient):
    """Lower triangle of the Hessian of one function, as a dict mapping
    (row, col) with row >= col to a derivative expression."""
    ans = {}
    for j, d in gradient.items():
        for k, d2 in reverse_sd(d).items():
            # each (j, k) pair is reached from both partials; keep one
            if k <= j:
                ans[j, k] = d2
    return ans


class NLPEvaluator(object):
    """Solver-facing evaluator for a :py:class:`~nlpbridge.core.model.Model`.

    Parameters
    ----------
    model: Model
        The model to evaluate.  The model is expected to be frozen for
        the lifetime of the evaluator; the evaluator reads the model
        structure when it is constructed and initialized.

    """

    def __init__(self, model):
        self._model = model
        self.n_variables = model.n_variables
        self.n_constraints = model.n_constraints
        self.sense = model.objective.sense

        variables = model.variables
        self.var_lb = np.array([v.lb for v in variables], dtype=float)
        self.var_ub = np.array([v.ub for v in variables], dtype=float)

        self._objective = model.objective
        self._constraints = model.constraints
        self.constr_lb = np.array([c.lower for c in self._constraints], dtype=float)
        self.constr_ub = np.array([c.upper for c in self._constraints], dtype=float)

        self._features = None
        self._obj_grad = None
        self._con_grad = None
        self._jac_structure = None
        self._hess_structure = None
        self._hess_terms = None
        self._canonical = {}

        self._lock = threading.Lock()
        self._eval_counts = dict.fromkeys(
            (
                'objective',
                'constraints',
                'objective_gradient',
                'jacobian',
                'hessian',
            ),
            0,
        )

    def __repr__(self):
        return "<NLPEvaluator for model '%s': %s variables, %s constraints>" % (
            self._model.name,
            self.n_variables,
            self.n_constraints,
        )

    #
    # Mode declaration
    #

    def features_available(self):
        return [Feature.GRAD, Feature.JAC, Feature.HESS, Feature.EXPR_GRAPH]

    @property
    def features(self):
        """The features requested in :py:meth:`initialize` (None before
        the evaluator is initialized)"""
        if self._features is None:
            return None
        return frozenset(self._features)

    def initialize(self, requested_features):
        """Declare the evaluation modes the solver will use.

        Numeric evaluation of function values is always available after
        initialization; derivatives and expression graphs require the
        corresponding :py:class:`Feature`.

        Raises
        ------
        ValueError
            if a requested feature is not available

        """
        features = set()
        available = self.features_available()
        for f in requested_features:
            try:
                feature = Feature(f)
            except ValueError:
                feature = None
            if feature not in available:
                raise ValueError(
                    "Unsupported evaluator feature '%s'; available features "
                    "are %s" % (f, ', '.join(str(a) for a in available))
                )
            features.add(feature)
        # Hessians are built from the first derivatives
        if Feature.HESS in features:
            need = {Feature.GRAD, Feature.JAC, Feature.HESS}
        else:
            need = features & {Feature.GRAD, Feature.JAC}

        self._obj_grad = self._con_grad = None
        self._jac_structure = self._hess_structure = self._hess_terms = None
        if need:
            self._build_first_derivatives()
        if Feature.HESS in need:
            self._build_second_derivatives()
        self._features = features | need

        if need and self._check_variable_exponents():
            logger.warning(
                "Model '%s' contains powers with a variable exponent (x**y).  "
                "Their derivatives include log(x) and are only defined where "
                "the base is positive." % (self._model.name,)
            )

    def _check_variable_exponents(self):
        if _has_variable_exponent(self._objective.expr):
            return True
        return any(
            not c.is_linear() and _has_variable_exponent(c.body)
            for c in self._constraints
        )

    def _build_first_derivatives(self):
        self._obj_grad = sorted(reverse_sd(self._objective.expr).items())
        self._con_grad = []
        structure = []
        for c in self._constraints:
            grad = sorted(reverse_sd(c.body).items())
            self._con_grad.append(grad)
            structure.extend((c.index, j) for j, _ in grad)
        self._jac_structure = structure

    def _build_second_derivatives(self):
        # terms[0] is the objective, terms[i] constraint i
        terms = []
        structure = set()
        for grad in [self._obj_grad] + self._con_grad:
            if not grad:
                terms.append(())
                continue
            h = _second_derivatives(dict(grad))
            structure.update(h)
            terms.append(tuple(h.items()))
        self._hess_structure = sorted(structure)
        position = {key: i for i, key in enumerate(self._hess_structure)}
        self._hess_terms = [
            tuple((position[key], d2) for key, d2 in h) for h in terms
        ]

    def _require(self, feature, operation):
        if self._features is None:
            raise ModeNotInitialized(
                "Cannot call %s: the evaluator has not been initialized" % (operation,)
            )
        if feature is not None and feature not in self._features:
            raise ModeNotInitialized(
                "Cannot call %s: the evaluator was not initialized with the "
                "'%s' feature" % (operation, feature)
            )

    def _point(self, x):
        x = np.asarray(x, dtype=float)
        if x.ndim != 1 or x.shape[0] != self.n_variables:
            raise ValueError(
                "Expected a point with %s entries; received shape %s"
                % (self.n_variables, x.shape)
            )
        return x

    def _count(self, key):
        with self._lock:
            self._eval_counts[key] += 1

    @property
    def eval_counts(self):
        """A snapshot of the number of evaluations of each kind"""
        with self._lock:
            return dict(self._eval_counts)

    def _constraint(self, i):
        if i.__class__ is not int or not 1 <= i <= self.n_constraints:
            raise IndexOutOfRange(
                "Constraint index %r is out of range (valid indices are 1..%s)"
                % (i, self.n_constraints)
            )
        return self._constraints[i - 1]

    #
    # Expression mode
    #

    def objective_expr(self):
        """The canonical expression of the objective"""
        self._require(Feature.EXPR_GRAPH, 'objective_expr')
        if 0 not in self._canonical:
            self._canonical[0] = canonical_objective(self._objective)
        return self._canonical[0]

    def constraint_expr(self, i):
        """The canonical relational expression of constraint `i`"""
        self._require(Feature.EXPR_GRAPH, 'constraint_expr')
        c = self._constraint(i)
        if i not in self._canonical:
            self._canonical[i] = canonical_constraint(c)
        return self._canonical[i]

    def is_constraint_linear(self, i):
        return self._constraint(i).is_linear()

    def is_objective_linear(self):
        return self._objective.is_linear()

    #
    # Numeric mode
    #

    def eval_objective(self, x):
        self._require(None, 'eval_objective')
        x = self._point(x)
        self._count('objective')
        return float(evaluate_expression(self._objective.expr, x))

    def eval_constraints(self, x):
        """Return the constraint body values as an array ordered by
        constraint index"""
        self._require(None, 'eval_constraints')
        x = self._point(x)
        self._count('constraints')
        ans = np.empty(self.n_constraints, dtype=float)
        for k, c in enumerate(self._constraints):
            ans[k] = evaluate_expression(c.body, x)
        return ans

    def eval_objective_gradient(self, x):
        self._require(Feature.GRAD, 'eval_objective_gradient')
        x = self._point(x)
        self._count('objective_gradient')
        ans = np.zeros(self.n_variables, dtype=float)
        for j, d in self._obj_grad:
            ans[j - 1] = evaluate_expression(d, x)
        return ans

    def jacobian_structure(self):
        """The structural nonzeros of the constraint Jacobian as a list of
        (constraint index, variable index) pairs"""
        self._require(Feature.JAC, 'jacobian_structure')
        return list(self._jac_structure)

    def eval_jacobian(self, x):
        """Return (constraint index, variable index, value) triples in the
        order given by :py:meth:`jacobian_structure`"""
        self._require(Feature.JAC, 'eval_jacobian')
        x = self._point(x)
        self._count('jacobian')
        ans = []
        for c, grad in zip(self._constraints, self._con_grad):
            for j, d in grad:
                ans.append((c.index, j, float(evaluate_expression(d, x))))
        return ans

    def hessian_lagrangian_structure(self):
        """The structural nonzeros of the lower triangle of the Hessian of
        the Lagrangian as (row variable, column variable) pairs with
        ``row >= col``"""
        self._require(Feature.HESS, 'hessian_lagrangian_structure')
        return list(self._hess_structure)

    def eval_hessian_lagrangian(self, x, obj_factor, multipliers):
        """Evaluate the lower triangle of

        ``obj_factor * H_f(x) + sum_i multipliers[i-1] * H_{c_i}(x)``

        as (row variable, column variable, value) triples in the order
        given by :py:meth:`hessian_lagrangian_structure`.

        """
        self._require(Feature.HESS, 'eval_hessian_lagrangian')
        x = self._point(x)
        mu = np.asarray(multipliers, dtype=float)
        if mu.ndim != 1 or mu.shape[0] != self.n_constraints:
            raise ValueError(
                "Expected %s multipliers; received shape %s"
                % (self.n_constraints, mu.shape)
            )
        self._count('hessian')
        values = np.zeros(len(self._hess_structure), dtype=float)
        weights = [float(obj_factor)] + mu.tolist()
        for weight, terms in zip(weights, self._hess_terms):
            if not weight:
                continue
            for pos, d2 in terms:
                values[pos] += weight * evaluate_expression(d2, x)
        return [
            (row, col, float(val))
            for (row, col), val in zip(self._hess_structure, values)
        ]
