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

from nlpbridge.core.expr.numeric_expr import (
    OperatorAssociativity,
    _structural_key,
)


class RelationalExpression(object):
    """Base class for the relational (constraint) expressions produced
    by the canonical forms in :py:mod:`nlpbridge.repn.canonical`.

    Relational expressions are immutable, compare structurally, and do
    not support arithmetic.

    """

    __slots__ = ('_args_',)
    PRECEDENCE = 9
    ASSOCIATIVITY = OperatorAssociativity.LEFT_TO_RIGHT

    def __init__(self, args):
        self._args_ = tuple(args)

    @property
    def args(self):
        """
        Return the child nodes

        Returns: A tuple containing only the child nodes of this node
        """
        return self._args_

    def arg(self, i):
        return self._args_[i]

    def nargs(self):
        return 2

    def is_expression_type(self):
        return True

    def is_relational(self):
        return True

    def __eq__(self, other):
        if self is other:
            return True
        if not isinstance(other, RelationalExpression):
            return False
        return _structural_key(self) == _structural_key(other)

    def __ne__(self, other):
        return not self.__eq__(other)

    def __hash__(self):
        return hash(_structural_key(self))

    def __bool__(self):
        raise TypeError(
            "Cannot convert the relational expression '%s' to bool" % (self,)
        )

    def __str__(self):
        from nlpbridge.core.expr.visitor import expression_to_string

        return expression_to_string(self)

    def __repr__(self):
        return f"<{self.__class__.__name__}: {self}>"

    def create_node_with_local_data(self, args, classtype=None):
        if classtype is None:
            classtype = self.__class__
        return classtype(args)

    @property
    def body(self):
        return self._args_[0]


class EqualityExpression(RelationalExpression):
    """
    Equality expression::

        x == y
    """

    __slots__ = ()

    def getname(self, *args, **kwds):
        return '=='

    def _to_string(self, values):
        return f"{values[0]} == {values[1]}"

    def _apply_operation(self, result):
        _l, _r = result
        return _l == _r

    @property
    def rhs(self):
        return self._args_[1]


class InequalityExpression(RelationalExpression):
    """
    Inequality expressions::

        body <= bound
        body >= bound

    Args:
        args (tuple): the body and the bound
        sense (str): ``'<='`` or ``'>='``
    """

    __slots__ = ('_sense',)

    def __init__(self, args, sense='<='):
        if sense not in ('<=', '>='):
            raise ValueError(
                "Inequality sense must be '<=' or '>=' (received '%s')" % (sense,)
            )
        self._args_ = tuple(args)
        self._sense = sense

    def create_node_with_local_data(self, args, classtype=None):
        if classtype is None:
            classtype = self.__class__
        return classtype(args, self._sense)

    @property
    def sense(self):
        return self._sense

    @property
    def bound(self):
        return self._args_[1]

    def getname(self, *args, **kwds):
        return self._sense

    def _to_string(self, values):
        return f"{values[0]} {self._sense} {values[1]}"

    def _apply_operation(self, result):
        _l, _r = result
        if self._sense == '<=':
            return _l <= _r
        return _l >= _r


class RangedExpression(RelationalExpression):
    """
    Ranged expressions::

        lb <= body <= ub

    The body is the *middle* argument.
    """

    __slots__ = ()

    def nargs(self):
        return 3

    @property
    def body(self):
        return self._args_[1]

    def getname(self, *args, **kwds):
        return 'ranged'

    def _to_string(self, values):
        return f"{values[0]} <= {values[1]} <= {values[2]}"

    def _apply_operation(self, result):
        _lb, _b, _ub = result
        return _lb <= _b <= _ub
