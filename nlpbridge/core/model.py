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

import logging
import math

from nlpbridge.common.enums import ObjectiveSense, minimize
from nlpbridge.common.errors import InvalidReference
from nlpbridge.core.expr.numeric_expr import (
    NumericValue,
    VarRef,
    is_native_number,
    native_numeric_types,
)
from nlpbridge.core.expr.relational_expr import RelationalExpression
from nlpbridge.core.expr.visitor import identify_variables

logger = logging.getLogger('nlpbridge.core')

_inf = float('inf')

_relations = ('<=', '>=', '==')


def _bound(val, default):
    if val is None:
        return default
    if not is_native_number(val):
        raise TypeError("Bounds must be numbers or None (received %r)" % (val,))
    val = float(val)
    if math.isnan(val):
        raise ValueError("Bounds may not be NaN")
    return val


class Variable(object):
    """The model-side data of one decision variable.

    Expressions never hold Variable objects; they reference the
    variable through its (1-based) index with a :py:class:`VarRef`.

    """

    __slots__ = ('index', 'lb', 'ub', 'value', 'name')

    def __init__(self, index, lb=None, ub=None, value=None, name=None):
        self.index = index
        self.lb = _bound(lb, -_inf)
        self.ub = _bound(ub, _inf)
        if self.lb > self.ub:
            raise ValueError(
                "Variable x[%s] has lower bound %s greater than its upper bound %s"
                % (index, self.lb, self.ub)
            )
        self.value = None if value is None else float(value)
        self.name = name if name is not None else f"x[{index}]"

    def __repr__(self):
        return (
            f"Variable({self.index}, lb={self.lb}, ub={self.ub}, "
            f"value={self.value}, name={self.name!r})"
        )

    def copy(self):
        return Variable(self.index, self.lb, self.ub, self.value, self.name)


class _ClassifiedExpression(object):
    """Base for the model components that cache their linearity"""

    __slots__ = ('_repn',)

    def _classify(self):
        raise NotImplementedError()

    @property
    def linearity(self):
        if self._repn is None:
            self._repn = self._classify()
        return self._repn[0]

    @property
    def linear_form(self):
        if self._repn is None:
            self._repn = self._classify()
        return self._repn[1]

    def is_linear(self):
        from nlpbridge.repn.linear import Linearity

        return self.linearity is Linearity.LINEAR


class Constraint(_ClassifiedExpression):
    """A model constraint.

    `relation` is one of ``'<='``, ``'>='``, ``'=='`` or ``'ranged'``.
    `lower` and `upper` are the constraint bounds as seen by a solver
    (``-inf`` / ``inf`` for the missing side).

    """

    __slots__ = ('index', 'body', 'relation', 'lower', 'upper')

    def __init__(self, index, body, relation, lower, upper):
        self.index = index
        self.body = body
        self.relation = relation
        self.lower = lower
        self.upper = upper
        self._repn = None

    def _classify(self):
        # repn imports the expression system, which loads this module
        from nlpbridge.repn.linear import classify

        return classify(self.body)

    def __repr__(self):
        if self.relation == 'ranged':
            return f"Constraint({self.index}: {self.lower} <= {self.body} <= {self.upper})"
        bound = self.lower if self.relation == '>=' else self.upper
        return f"Constraint({self.index}: {self.body} {self.relation} {bound})"


class Objective(_ClassifiedExpression):
    """The model objective: an expression and a sense"""

    __slots__ = ('expr', 'sense')

    def __init__(self, expr=0, sense=minimize):
        self.expr = expr
        self.sense = ObjectiveSense(sense)
        self._repn = None

    def _classify(self):
        from nlpbridge.repn.linear import classify

        return classify(self.expr)

    def __repr__(self):
        return f"Objective({self.sense}: {self.expr})"


class Model(object):
    """An optimization model: a variable table, an ordered sequence of
    constraints, and one objective.

    The model is built with an explicit builder API.  Variables and
    constraints receive stable 1-based indices in insertion order; an
    index is never reused or renumbered.

    >>> from nlpbridge.core import Model, sin
    >>> m = Model()
    >>> i = m.add_variable(lb=0, ub=1, value=0.5)
    >>> x = m.var(i)
    >>> m.add_constraint(2*x + sin(x), '<=', 1)
    1
    >>> m.set_objective(x, 'maximize')

    While a model is frozen (for the duration of a solve) any structural
    change raises a :py:class:`RuntimeError`.  Variable values may be
    updated at any time.

    """

    def __init__(self, name='unknown'):
        self.name = name
        self._variables = []
        self._constraints = []
        self._objective = Objective()
        self._frozen = False

    def __repr__(self):
        return (
            f"<Model {self.name!r}: {self.n_variables} variables, "
            f"{self.n_constraints} constraints>"
        )

    #
    # Freezing
    #

    @property
    def frozen(self):
        return self._frozen

    def freeze(self):
        self._frozen = True

    def unfreeze(self):
        self._frozen = False

    def _check_mutable(self, action):
        if self._frozen:
            raise RuntimeError(
                "Cannot %s on model '%s': the model is frozen while it is "
                "being solved" % (action, self.name)
            )

    #
    # Variables
    #

    @property
    def n_variables(self):
        return len(self._variables)

    @property
    def variables(self):
        return tuple(self._variables)

    def add_variable(self, lb=None, ub=None, value=None, name=None):
        """Declare a new variable and return its (1-based) index"""
        self._check_mutable("add a variable")
        index = len(self._variables) + 1
        self._variables.append(Variable(index, lb, ub, value, name))
        return index

    def _check_index(self, index):
        if index.__class__ is not int or not 1 <= index <= len(self._variables):
            raise InvalidReference(
                "Variable index %r is not part of model '%s' (valid indices "
                "are 1..%s)" % (index, self.name, len(self._variables))
            )

    def var(self, index):
        """Return a :py:class:`VarRef` for the variable with this index"""
        self._check_index(index)
        return VarRef(index)

    def variable(self, index):
        """Return the :py:class:`Variable` data for this index"""
        self._check_index(index)
        return self._variables[index - 1]

    def set_bounds(self, index, lb=None, ub=None):
        self._check_mutable("change variable bounds")
        var = self.variable(index)
        new = Variable(index, lb, ub, var.value, var.name)
        var.lb, var.ub = new.lb, new.ub

    def set_value(self, index, value):
        self.variable(index).value = None if value is None else float(value)

    def get_values(self):
        """Return the current variable values (None where unset),
        ordered by variable index"""
        return [v.value for v in self._variables]

    def set_values(self, values):
        if len(values) != len(self._variables):
            raise ValueError(
                "Expected %s values, received %s" % (len(self._variables), len(values))
            )
        for var, val in zip(self._variables, values):
            var.value = None if val is None else float(val)

    def _validate_expr(self, expr, what):
        if is_native_number(expr):
            return expr if expr.__class__ in native_numeric_types else float(expr)
        if isinstance(expr, RelationalExpression):
            raise TypeError(
                "The %s must be a numeric expression; pass the relation "
                "and bound separately" % (what,)
            )
        if not isinstance(expr, NumericValue):
            raise TypeError(
                "The %s must be a number or an expression (received %s)"
                % (what, type(expr).__name__)
            )
        n = len(self._variables)
        for v in identify_variables(expr):
            if v.index > n:
                raise InvalidReference(
                    "The %s references x[%s], which is not part of model '%s' "
                    "(valid indices are 1..%s)" % (what, v.index, self.name, n)
                )
        return expr

    #
    # Constraints
    #

    @property
    def n_constraints(self):
        return len(self._constraints)

    @property
    def constraints(self):
        return tuple(self._constraints)

    def constraint(self, index):
        if index.__class__ is not int or not 1 <= index <= len(self._constraints):
            raise InvalidReference(
                "Constraint index %r is not part of model '%s'" % (index, self.name)
            )
        return self._constraints[index - 1]

    def add_constraint(self, body, relation, bound):
        """Add the constraint ``body <relation> bound`` and return its
        (1-based) index.  `relation` is ``'<='``, ``'>='`` or ``'=='``."""
        self._check_mutable("add a constraint")
        body = self._validate_expr(body, "constraint body")
        if relation not in _relations:
            raise ValueError(
                "Unknown constraint relation '%s'; expected one of %s"
                % (relation, _relations)
            )
        if relation == '==':
            rhs = _bound(bound, None)
            if rhs is None or math.isinf(rhs):
                raise ValueError("Equality constraints require a finite bound")
            lower = upper = rhs
        elif relation == '<=':
            lower, upper = -_inf, _bound(bound, _inf)
        else:
            lower, upper = _bound(bound, -_inf), _inf
        return self._add_constraint(body, relation, lower, upper)

    def add_range_constraint(self, lb, body, ub):
        """Add the ranged constraint ``lb <= body <= ub`` and return its
        (1-based) index"""
        self._check_mutable("add a constraint")
        body = self._validate_expr(body, "constraint body")
        lower = _bound(lb, -_inf)
        upper = _bound(ub, _inf)
        if lower > upper:
            raise ValueError(
                "Ranged constraint has lower bound %s greater than its upper "
                "bound %s" % (lower, upper)
            )
        return self._add_constraint(body, 'ranged', lower, upper)

    def _add_constraint(self, body, relation, lower, upper):
        index = len(self._constraints) + 1
        self._constraints.append(Constraint(index, body, relation, lower, upper))
        return index

    #
    # Objective
    #

    @property
    def objective(self):
        return self._objective

    def set_objective(self, expr, sense=minimize):
        """Replace the model objective.  `sense` is an
        :py:class:`ObjectiveSense` or one of the strings ``'minimize'`` /
        ``'maximize'``."""
        self._check_mutable("set the objective")
        expr = self._validate_expr(expr, "objective")
        try:
            sense = ObjectiveSense(sense)
        except ValueError:
            raise ValueError(
                "Unknown objective sense '%s'; expected 'minimize' or 'maximize'"
                % (sense,)
            ) from None
        self._objective = Objective(expr, sense)

    #
    # Whole-model operations
    #

    def classify(self):
        """Classify the objective and every constraint (the results are
        cached on the components).  Returns the number of nonlinear
        constraints."""
        self._objective.linearity
        return sum(1 for c in self._constraints if not c.is_linear())

    def clone(self):
        """Return an independent copy of this model.

        Expressions are immutable and are shared between the copies;
        variables, constraints and the objective are copied, so indices
        are identical in both models.

        """
        ans = Model(self.name)
        ans._variables = [v.copy() for v in self._variables]
        for c in self._constraints:
            new = Constraint(c.index, c.body, c.relation, c.lower, c.upper)
            new._repn = c._repn
            ans._constraints.append(new)
        ans._objective = Objective(self._objective.expr, self._objective.sense)
        ans._objective._repn = self._objective._repn
        return ans
