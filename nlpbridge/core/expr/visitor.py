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

from collections.abc import Mapping

from nlpbridge.common.errors import EvaluationError, InvalidReference
from nlpbridge.core.expr.numeric_expr import (
    NegationExpression,
    OperatorAssociativity,
    VarRef,
    native_numeric_types,
)

logger = logging.getLogger('nlpbridge.core')

LEFT_TO_RIGHT = OperatorAssociativity.LEFT_TO_RIGHT
RIGHT_TO_LEFT = OperatorAssociativity.RIGHT_TO_LEFT


def _is_leaf(node):
    return node.__class__ in native_numeric_types or not node.is_expression_type()


class StreamBasedExpressionVisitor(object):
    """This class implements a generic stream-based expression walker.

    This visitor walks an expression tree using a depth-first strategy
    and generates a full event stream similar to other tree visitors
    (e.g., the expat XML parser).  The following events are triggered
    through callback functions as the traversal enters and leaves nodes
    in the tree:

    ::

       initializeWalker(expr) -> walk, result
       enterNode(N1) -> args, data
       {for N2 in args:}
         beforeChild(N1, N2) -> descend, child_result
           enterNode(N2) -> N2_args, N2_data
           [...]
           exitNode(N2, n2_data) -> child_result
         acceptChildResult(N1, data, child_result) -> data
         afterChild(N1, N2) -> None
       exitNode(N1, data) -> N1_result
       finalizeWalker(result) -> result

    Individual event callbacks match the following signatures:

    walk, result = initializeWalker(self, expr):

         initializeWalker() is called to set the walker up and perform
         any preliminary processing on the root node.  The method returns
         a flag indicating if the tree should be walked and a result.  If
         `walk` is True, then result is ignored.  If `walk` is False,
         then `result` is returned as the final result from the walker,
         bypassing all other callbacks (including finalizeResult).

    args, data = enterNode(self, node):

         enterNode() is called when the walker first enters a node (from
         above), and is passed the node being entered.  It is expected to
         return a tuple of child `args` (as either a tuple or list) and a
         user-specified data structure for collecting results.  If None
         is returned for args, the node's args attribute is used for
         expression types and the empty tuple for leaf nodes.  Returning
         None is equivalent to returning (None,None).  If the callback is
         not defined, the default behavior is equivalent to returning
         (None, []).

    node_result = exitNode(self, node, data):

         exitNode() is called after the node is completely processed (as
         the walker returns up the tree to the parent node).  It is
         passed the node and the results data structure (defined by
         enterNode() and possibly further modified by
         acceptChildResult()), and is expected to return the "result" for
         this node.  If not specified, the default action is to return
         the data object from enterNode().

    descend, child_result = beforeChild(self, node, child, child_idx):

         beforeChild() is called by a node for every child before
         entering the child node.  If descend is False, the child node
         will not be entered and the value returned to child_result will
         be passed to the node's acceptChildResult callback.  Returning
         None is equivalent to (True, None).

    data = acceptChildResult(self, node, data, child_result, child_idx):

         acceptChildResult() is called for each child result being
         returned to a node.  The data structure (possibly modified or
         replaced) must be returned.  If acceptChildResult is not
         specified, it does nothing if data is None, otherwise it calls
         data.append(result).

    afterChild(self, node, child, child_idx):

         afterChild() is called by a node for every child node
         immediately after processing the node is complete.

    finalizeResult(self, result):

         finalizeResult() is called once after the entire expression tree
         has been walked.  It is passed the result returned by the root
         node exitNode() callback.

    Clients interact with this class by either deriving from it and
    implementing the necessary callbacks (see above), or passing the
    callback functions as arguments to this class' constructor.

    The walker never recurses: the stack lives in a linked list of
    tuples, so arbitrarily deep trees can be processed.

    """

    client_methods = (
        'enterNode',
        'exitNode',
        'beforeChild',
        'afterChild',
        'acceptChildResult',
        'initializeWalker',
        'finalizeResult',
    )

    def __init__(self, **kwds):
        # Derived classes override the "None" defaults by defining the
        # methods; keyword arguments override both.
        for field in self.client_methods:
            if field in kwds:
                setattr(self, field, kwds.pop(field))
            elif not hasattr(self, field):
                setattr(self, field, None)
        if kwds:
            raise RuntimeError("Unrecognized keyword arguments: %s" % (kwds,))

    def walk_expression(self, expr):
        """Walk an expression, calling registered callbacks.

        This routine uses a linked list to store the stack.  The nodes
        of the linked list are 6-member tuples:

           ( pointer to parent,
             expression node,
             tuple/list of child nodes (arguments),
             number of child nodes (arguments) minus one,
             data object to aggregate results from child nodes,
             current child node index )

        """
        if self.initializeWalker is not None:
            walk, result = self.initializeWalker(expr)
            if not walk:
                return result
            elif result is not None:
                expr = result
        if self.enterNode is not None:
            tmp = self.enterNode(expr)
            if tmp is None:
                args = data = None
            else:
                args, data = tmp
        else:
            args = None
            data = []
        if args is None:
            if _is_leaf(expr):
                args = ()
            else:
                args = expr.args
        return self._nonrecursive_walker_loop((None, expr, args, len(args) - 1, data, -1))

    def _nonrecursive_walker_loop(self, ptr):
        _, node, args, _, data, child_idx = ptr
        while 1:
            if child_idx < ptr[3]:
                child_idx += 1
                child = ptr[2][child_idx]

                if self.beforeChild is not None:
                    tmp = self.beforeChild(node, child, child_idx)
                    if tmp is None:
                        descend = True
                        child_result = None
                    else:
                        descend, child_result = tmp
                    if not descend:
                        if self.acceptChildResult is not None:
                            data = self.acceptChildResult(
                                node, data, child_result, child_idx
                            )
                        elif data is not None:
                            data.append(child_result)
                        if self.afterChild is not None:
                            self.afterChild(node, child, child_idx)
                        continue

                # Tuples are immutable, so recreate the stack entry
                # before descending
                ptr = ptr[:4] + (data, child_idx)

                if self.enterNode is not None:
                    tmp = self.enterNode(child)
                    if tmp is None:
                        args = data = None
                    else:
                        args, data = tmp
                else:
                    args = None
                    data = []
                if args is None:
                    if _is_leaf(child):
                        args = ()
                    else:
                        args = child.args
                node = child
                child_idx = -1
                ptr = (ptr, node, args, len(args) - 1, data, child_idx)

            else:
                if self.exitNode is not None:
                    node_result = self.exitNode(node, data)
                else:
                    node_result = data

                ptr = ptr[0]
                if ptr is None:
                    if self.finalizeResult is not None:
                        return self.finalizeResult(node_result)
                    else:
                        return node_result
                node, child = ptr[1], node
                data = ptr[4]
                child_idx = ptr[5]

                if self.acceptChildResult is not None:
                    data = self.acceptChildResult(node, data, node_result, child_idx)
                elif data is not None:
                    data.append(node_result)

                if self.afterChild is not None:
                    self.afterChild(node, child, child_idx)


# =====================================================
#  expression_to_string
# =====================================================


class _ToStringVisitor(StreamBasedExpressionVisitor):
    def beforeChild(self, node, child, child_idx):
        if child.__class__ in native_numeric_types:
            return False, str(child)
        if not child.is_expression_type():
            return False, child.to_string()
        return True, None

    def exitNode(self, node, values):
        if _is_leaf(node):
            # only reached when the root itself is a leaf
            if node.__class__ in native_numeric_types:
                return str(node)
            return node.to_string()
        node_prec = node.PRECEDENCE
        if node_prec is not None:
            for i, (val, arg) in enumerate(zip(values, node.args)):
                arg_prec = getattr(arg, 'PRECEDENCE', None)
                if arg_prec is None:
                    # negative constants bind like a negation
                    if val[0] == '-' and node_prec < NegationExpression.PRECEDENCE:
                        values[i] = f"({val})"
                    elif (
                        val[0] == '-'
                        and node_prec == NegationExpression.PRECEDENCE
                        and i > 0
                    ):
                        values[i] = f"({val})"
                else:
                    if node_prec < arg_prec:
                        parens = True
                    elif node_prec == arg_prec:
                        if i == 0:
                            parens = node.ASSOCIATIVITY != LEFT_TO_RIGHT
                        elif i == node.nargs() - 1:
                            parens = node.ASSOCIATIVITY != RIGHT_TO_LEFT
                        else:
                            parens = True
                    else:
                        parens = False
                    if parens:
                        values[i] = f"({val})"
        return node._to_string(values)


def expression_to_string(expr):
    """Return a string representation of an expression.

    The string is an algebraic (infix) rendering with the minimal
    number of parentheses required by operator precedence.  Variables
    render as ``x[i]`` and constants with :py:func:`str`, so ``2`` and
    ``2.0`` are rendered differently.

    Parameters
    ----------
    expr:
        The root node of an expression tree (or a native constant).

    Returns
    -------
    str

    """
    return _ToStringVisitor().walk_expression(expr)


# =====================================================
#  evaluate_expression
# =====================================================


class _EvaluationVisitor(StreamBasedExpressionVisitor):
    def __init__(self, point):
        super().__init__()
        self.point = point
        self._mapping = isinstance(point, Mapping)

    def _value(self, var):
        idx = var.index
        try:
            if self._mapping:
                val = self.point[idx]
            else:
                val = self.point[idx - 1]
        except (KeyError, IndexError):
            raise InvalidReference(
                "No value provided for variable x[%s] (point of length %s)"
                % (idx, len(self.point))
            ) from None
        if val is None:
            raise ValueError(
                "No value for uninitialized variable x[%s]" % (idx,)
            )
        return float(val)

    def beforeChild(self, node, child, child_idx):
        if child.__class__ in native_numeric_types:
            return False, child
        if not child.is_expression_type():
            return False, self._value(child)
        return True, None

    def exitNode(self, node, data):
        if node.__class__ in native_numeric_types:
            return node
        if not node.is_expression_type():
            return self._value(node)
        try:
            ans = node._apply_operation(data)
        except (ValueError, ZeroDivisionError, OverflowError) as e:
            raise EvaluationError(
                "Error evaluating '%s' with arguments %s: %s"
                % (node.getname(), data, e)
            ) from e
        if ans.__class__ is complex:
            raise EvaluationError(
                "Evaluating '%s' with arguments %s produced the complex "
                "value %s" % (node.getname(), data, ans)
            )
        return ans


def evaluate_expression(expr, point):
    """Evaluate the value of the expression at a point.

    Args:
        expr: The root node of an expression tree.
        point: Either a sequence where ``point[i-1]`` holds the value
            of variable ``x[i]`` (e.g., a list or a numpy array), or a
            mapping from variable index to value.

    Returns:
        A floating point value (or a native constant if the expression
        is constant).

    Raises:
        EvaluationError: the expression is undefined at the point
            (domain error, division by zero, overflow).
        InvalidReference: the point has no value for a variable.
    """
    if expr.__class__ in native_numeric_types:
        return expr
    return _EvaluationVisitor(point).walk_expression(expr)


# =====================================================
#  identify_variables
# =====================================================


class _VariableCollector(StreamBasedExpressionVisitor):
    def __init__(self):
        super().__init__()
        self.seen = set()
        self.found = []

    def beforeChild(self, node, child, child_idx):
        if child.__class__ in native_numeric_types:
            return False, None
        if child.is_variable_type():
            if child.index not in self.seen:
                self.seen.add(child.index)
                self.found.append(child)
            return False, None
        return True, None

    def exitNode(self, node, data):
        return None


def identify_variables(expr):
    """A generator that yields the (unique) variables in an expression,
    in the order in which they are first encountered.

    Args:
        expr: The root node of an expression tree.

    Yields:
        :py:class:`VarRef` objects
    """
    if expr.__class__ in native_numeric_types:
        return
    if expr.is_variable_type():
        yield expr
        return
    visitor = _VariableCollector()
    visitor.walk_expression(expr)
    yield from visitor.found


# =====================================================
#  replace_expressions
# =====================================================


class ExpressionReplacementVisitor(StreamBasedExpressionVisitor):
    """Rebuild an expression, substituting variable references.

    `substitute` maps variable indices to replacement expressions (or
    native constants).  Nodes whose children are unchanged are reused;
    no simplification is performed.

    """

    def __init__(self, substitute=None):
        super().__init__()
        if substitute is None:
            substitute = {}
        self.substitute = {
            (k.index if k.__class__ is VarRef else k): v for k, v in substitute.items()
        }

    def initializeWalker(self, expr):
        walk, result = self.beforeChild(None, expr, 0)
        if not walk:
            return False, result
        return True, expr

    def beforeChild(self, node, child, child_idx):
        if child.__class__ in native_numeric_types:
            return False, child
        if child.is_variable_type():
            return False, self.substitute.get(child.index, child)
        return True, None

    def enterNode(self, node):
        args = list(node.args)
        # [bool:args_have_changed, list:original_args]
        return args, [False, args]

    def acceptChildResult(self, node, data, child_result, child_idx):
        if data[1][child_idx] is not child_result:
            data[1][child_idx] = child_result
            data[0] = True
        return data

    def exitNode(self, node, data):
        if data[0]:
            return node.create_node_with_local_data(tuple(data[1]))
        return node


def replace_expressions(expr, substitution_map):
    """Return a copy of `expr` with variables replaced.

    Args:
        expr: The root node of an expression tree.
        substitution_map (dict): maps variable indices (or
            :py:class:`VarRef` objects) to the expressions that replace
            them.

    Returns:
        The new expression.  The original expression is not modified.
    """
    return ExpressionReplacementVisitor(substitute=substitution_map).walk_expression(
        expr
    )


# =====================================================
#  sizeof_expression
# =====================================================


def sizeof_expression(expr):
    """
    Return the number of nodes in the expression tree.

    Args:
        expr: The root node of an expression tree.

    Returns:
        A non-negative integer that is the number of
        interior and leaf nodes in the expression tree.
    """

    def enter(node):
        return None, 1

    def accept(node, data, child_result, child_idx):
        return data + child_result

    return StreamBasedExpressionVisitor(
        enterNode=enter, acceptChildResult=accept
    ).walk_expression(expr)
