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
import logging
import math

from nlpbridge.common.errors import InvalidReference

logger = logging.getLogger('nlpbridge.core')

#: The native (host) numeric types that may appear as constant leaves
native_numeric_types = {int, float}


class OperatorAssociativity(enum.IntEnum):
    """Enum for indicating the associativity of an operator.

    LEFT_TO_RIGHT(1) if this operator is left-to-right associative or
    RIGHT_TO_LEFT(-1) if it is right-to-left associative.  Any other
    values will be interpreted as "not associative" (implying any
    arguments that are at this operator's PRECEDENCE will be enclosed
    in parens).

    """

    RIGHT_TO_LEFT = -1
    NON_ASSOCIATIVE = 0
    LEFT_TO_RIGHT = 1


def is_native_number(obj):
    """True for int and float constants (bool is not a number here)"""
    return obj.__class__ in native_numeric_types or (
        isinstance(obj, (int, float)) and not isinstance(obj, bool)
    )


def _as_native(obj):
    # numpy scalars and other int / float subclasses become plain natives
    if obj.__class__ in native_numeric_types:
        return obj
    if isinstance(obj, int):
        return int(obj)
    return float(obj)


def _structural_key(expr):
    """Return the prefix notation of `expr` as a hashable tuple.

    Operator nodes contribute ``(class, name, nargs)``, variable
    references ``(VarRef, index)`` and constants ``(type, value)``, so
    that ``2`` and ``2.0`` produce different keys.

    """
    ans = []
    stack = [expr]
    while stack:
        node = stack.pop()
        if node.__class__ is VarRef:
            ans.append((VarRef, node._index))
        elif node.__class__ in native_numeric_types:
            ans.append((node.__class__, node))
        else:
            args = node.args
            ans.append((node.__class__, node.getname(), len(args)))
            stack.extend(reversed(args))
    return tuple(ans)


class NumericValue(object):
    """Base class for everything that can appear in an expression tree
    other than native constants.

    This class provides the Python operator overloads that build new
    expression nodes (``+ - * / **`` and unary ``-``) and structural
    equality / hashing.  Relational operators are *not* overloaded:
    ``==`` compares tree structure and constraints are created through
    the :py:class:`~nlpbridge.core.model.Model` builder API.

    """

    __slots__ = ()

    # Expression nodes are immutable, so hashing them is safe.
    def __eq__(self, other):
        if self is other:
            return True
        if not isinstance(other, NumericValue):
            return False
        return _structural_key(self) == _structural_key(other)

    def __ne__(self, other):
        return not self.__eq__(other)

    def __hash__(self):
        return hash(_structural_key(self))

    def __bool__(self):
        raise TypeError(
            "Cannot convert the expression '%s' to a bool; "
            "expressions have no truth value" % (self,)
        )

    def is_expression_type(self):
        return False

    def is_variable_type(self):
        return False

    def __str__(self):
        from nlpbridge.core.expr.visitor import expression_to_string

        return expression_to_string(self)

    def __repr__(self):
        return f"<{self.__class__.__name__}: {self}>"

    def __add__(self, other):
        return _add(self, other)

    def __radd__(self, other):
        return _add(other, self)

    def __sub__(self, other):
        return _sub(self, other)

    def __rsub__(self, other):
        return _sub(other, self)

    def __mul__(self, other):
        return _mul(self, other)

    def __rmul__(self, other):
        return _mul(other, self)

    def __truediv__(self, other):
        return _div(self, other)

    def __rtruediv__(self, other):
        return _div(other, self)

    def __pow__(self, other):
        return _pow(self, other)

    def __rpow__(self, other):
        return _pow(other, self)

    def __neg__(self):
        return _neg(self)

    def __pos__(self):
        return self


class VarRef(NumericValue):
    """A reference to a model variable, identified by its (1-based)
    index in the owning model's variable table.

    Variable references are leaves: they carry no value and no
    bounds.  Both live in the model and are looked up by index.

    """

    __slots__ = ('_index',)

    def __init__(self, index):
        if index.__class__ is not int and not (
            isinstance(index, int) and not isinstance(index, bool)
        ):
            raise InvalidReference(
                "Variable references require an integer index (received %r)"
                % (index,)
            )
        if index < 1:
            raise InvalidReference(
                "Variable index %s is out of range; indices start at 1" % (index,)
            )
        self._index = int(index)

    @property
    def index(self):
        return self._index

    @property
    def args(self):
        return ()

    def nargs(self):
        return 0

    def is_variable_type(self):
        return True

    def __eq__(self, other):
        if other.__class__ is VarRef:
            return self._index == other._index
        return False

    def __hash__(self):
        return hash((VarRef, self._index))

    def to_string(self):
        return f"x[{self._index}]"


class NumericExpression(NumericValue):
    """
    The base class for nlpbridge expression nodes.

    This class is used to define the interior nodes of a numeric
    expression tree.

    Args:
        args (list or tuple): Children of this node.
    """

    __slots__ = ('_args_',)
    PRECEDENCE = 0
    ASSOCIATIVITY = OperatorAssociativity.LEFT_TO_RIGHT

    def __init__(self, args):
        self._args_ = tuple(args)

    def nargs(self):
        # by default, numeric operators are binary operators
        return 2

    @property
    def args(self):
        """
        Return the child nodes

        Returns
        -------
        tuple:
            Sequence containing only the child nodes of this node.
        """
        return self._args_

    def arg(self, i):
        """Return the i-th child node"""
        return self._args_[i]

    def is_expression_type(self):
        return True

    def create_node_with_local_data(self, args, classtype=None):
        """Construct a node of the same type with a new set of children.

        Any additional data carried by this node (e.g., the function
        name for :py:class:`UnaryFunctionExpression`) is copied to the
        new node.

        """
        if classtype is None:
            classtype = self.__class__
        return classtype(args)

    def getname(self, *args, **kwds):
        raise NotImplementedError(
            "Derived expression (%s) failed to implement getname()"
            % (str(self.__class__),)
        )

    def _apply_operation(self, result):
        raise NotImplementedError(
            "Derived expression (%s) failed to implement _apply_operation()"
            % (str(self.__class__),)
        )

    def _to_string(self, values):
        raise NotImplementedError(
            "Derived expression (%s) failed to implement _to_string()"
            % (str(self.__class__),)
        )


class NegationExpression(NumericExpression):
    """
    Negation expressions::

        - x
    """

    __slots__ = ()
    PRECEDENCE = 4

    def nargs(self):
        return 1

    def getname(self, *args, **kwds):
        return 'neg'

    def _to_string(self, values):
        tmp = values[0]
        if tmp[0] == '-':
            return f"-({tmp})"
        return "-" + tmp

    def _apply_operation(self, result):
        return -result[0]


class UnaryFunctionExpression(NumericExpression):
    """
    An expression object for the intrinsic (math) functions
    (e.g. sin, cos, exp).

    Args:
        args (tuple): Children nodes
        name (string): The function name.  Must be one of the names in
            :py:data:`unary_functions`
    """

    __slots__ = ('_name',)

    # This operator does not have an infix representation
    PRECEDENCE = None

    def __init__(self, args, name=None):
        if name not in unary_functions:
            raise ValueError(
                "Unknown intrinsic function '%s'; expected one of %s"
                % (name, sorted(unary_functions))
            )
        self._args_ = tuple(args)
        self._name = name

    def nargs(self):
        return 1

    def create_node_with_local_data(self, args, classtype=None):
        if classtype is None:
            classtype = self.__class__
        return classtype(args, self._name)

    def getname(self, *args, **kwds):
        return self._name

    def _to_string(self, values):
        return f"{self._name}({', '.join(values)})"

    def _apply_operation(self, result):
        return unary_functions[self._name](result[0])


class DivisionExpression(NumericExpression):
    """
    Division expressions::

        x/y
    """

    __slots__ = ()
    PRECEDENCE = 4

    def getname(self, *args, **kwds):
        return 'div'

    def _to_string(self, values):
        return f"{values[0]}/{values[1]}"

    def _apply_operation(self, result):
        return result[0] / result[1]


class PowExpression(NumericExpression):
    """
    Power expressions::

        x**y

    Integer and floating point exponents are kept distinct: ``x**2``
    and ``x**2.0`` are different trees.
    """

    __slots__ = ()
    PRECEDENCE = 2

    # "**" is right-to-left associative in Python; we make it
    # non-associative so that nested powers are always parenthesized
    ASSOCIATIVITY = OperatorAssociativity.NON_ASSOCIATIVE

    def getname(self, *args, **kwds):
        return 'pow'

    def _to_string(self, values):
        return f"{values[0]}**{values[1]}"

    def _apply_operation(self, result):
        _l, _r = result
        return _l**_r


class ProductExpression(NumericExpression):
    """
    Product expressions::

        x*y*...

    This node represents an "n-ary" product over at least 2 arguments.
    """

    __slots__ = ()
    PRECEDENCE = 4

    def nargs(self):
        return len(self._args_)

    def getname(self, *args, **kwds):
        return 'prod'

    def _to_string(self, values):
        return '*'.join(values)

    def _apply_operation(self, result):
        ans = 1
        for v in result:
            ans *= v
        return ans


class SumExpression(NumericExpression):
    """
    Sum expression::

        x + y + ...

    This node represents an "n-ary" sum expression over at least 2 arguments.

    Args:
        args (list): Children nodes

    """

    __slots__ = ()
    PRECEDENCE = 6

    def nargs(self):
        return len(self._args_)

    def getname(self, *args, **kwds):
        return 'sum'

    def _apply_operation(self, result):
        return sum(result)

    def _to_string(self, values):
        if not values:
            return '0'
        values = list(values)
        for i in range(1, len(values)):
            term = values[i]
            if term[0] in '-+':
                values[i] = term[0] + ' ' + term[1:].strip()
            else:
                values[i] = '+ ' + term.strip()
        return ' '.join(values)


#
# The closed set of intrinsic functions.  Adding a function means
# adding it here, to the named wrappers below, and to the derivative
# rules in nlpbridge.core.expr.calculus.derivatives.
#
unary_functions = {
    'exp': math.exp,
    'log': math.log,
    'log10': math.log10,
    'sqrt': math.sqrt,
    'sin': math.sin,
    'cos': math.cos,
    'tan': math.tan,
    'asin': math.asin,
    'acos': math.acos,
    'atan': math.atan,
    'sinh': math.sinh,
    'cosh': math.cosh,
    'tanh': math.tanh,
}


def _check_operand(arg):
    if isinstance(arg, NumericValue):
        return arg
    if is_native_number(arg):
        return _as_native(arg)
    return NotImplemented


def _add(a, b):
    a = _check_operand(a)
    b = _check_operand(b)
    if a is NotImplemented or b is NotImplemented:
        return NotImplemented
    # additive zeros are dropped at construction (e.g., sum(terms))
    if a.__class__ in native_numeric_types and not a:
        return b
    if b.__class__ in native_numeric_types and not b:
        return a
    if a.__class__ is SumExpression:
        return SumExpression(a._args_ + (b,))
    return SumExpression((a, b))


def _neg(a):
    if a.__class__ in native_numeric_types:
        return -a
    if a.__class__ is NegationExpression:
        return a._args_[0]
    return NegationExpression((a,))


def _sub(a, b):
    a = _check_operand(a)
    b = _check_operand(b)
    if a is NotImplemented or b is NotImplemented:
        return NotImplemented
    return _add(a, _neg(b))


def _mul(a, b):
    a = _check_operand(a)
    b = _check_operand(b)
    if a is NotImplemented or b is NotImplemented:
        return NotImplemented
    if a.__class__ is ProductExpression:
        return ProductExpression(a._args_ + (b,))
    return ProductExpression((a, b))


def _div(a, b):
    a = _check_operand(a)
    b = _check_operand(b)
    if a is NotImplemented or b is NotImplemented:
        return NotImplemented
    if b.__class__ in native_numeric_types and not b:
        raise ZeroDivisionError("Expression '%s' divided by zero" % (a,))
    return DivisionExpression((a, b))


def _pow(a, b):
    a = _check_operand(a)
    b = _check_operand(b)
    if a is NotImplemented or b is NotImplemented:
        return NotImplemented
    return PowExpression((a, b))


def _unary_function(name, arg):
    if isinstance(arg, NumericValue):
        return UnaryFunctionExpression((arg,), name)
    if is_native_number(arg):
        return unary_functions[name](arg)
    raise TypeError(
        "%s() argument must be a number or an expression, not '%s'"
        % (name, type(arg).__name__)
    )


def exp(arg):
    return _unary_function('exp', arg)


def log(arg):
    return _unary_function('log', arg)


def log10(arg):
    return _unary_function('log10', arg)


def sqrt(arg):
    return _unary_function('sqrt', arg)


def sin(arg):
    return _unary_function('sin', arg)


def cos(arg):
    return _unary_function('cos', arg)


def tan(arg):
    return _unary_function('tan', arg)


def asin(arg):
    return _unary_function('asin', arg)


def acos(arg):
    return _unary_function('acos', arg)


def atan(arg):
    return _unary_function('atan', arg)


def sinh(arg):
    return _unary_function('sinh', arg)


def cosh(arg):
    return _unary_function('cosh', arg)


def tanh(arg):
    return _unary_function('tanh', arg)
