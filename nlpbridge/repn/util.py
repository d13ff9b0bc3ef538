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

from nlpbridge.common.errors import DeveloperError

logger = logging.getLogger('nlpbridge.repn')


class ExprType(enum.IntEnum):
    # The ordering is meaningful: values increase with the "degree" of
    # the expression, so instances may be compared with relational
    # operators.
    CONSTANT = 0
    LINEAR = 20
    GENERAL = 40


class ExitNodeDispatcher(dict):
    """Dispatcher for handling the :class:`StreamBasedExpressionVisitor`
    `exitNode` callback

    Keys are either ``(node_class, *child_types)`` (for unary and
    binary operators) or ``node_class`` alone (the handler used for any
    combination of child types).  Lookups that miss are resolved by
    walking the node class MRO; the resolved handler is cached so the
    search happens at most once per key.  A node class that was never
    registered resolves to :py:meth:`unexpected_expression_type`.

    """

    __slots__ = ()

    def __missing__(self, key):
        if type(key) is tuple:
            # only unary and binary operators dispatch on child types
            if len(key) <= 3:
                node_class = key[0]
                node_args = key[1:]
            else:
                node_class = key = key[0]
                if node_class in self:
                    return self[node_class]
                node_args = ()
        else:
            node_class = key
            node_args = ()
        fcn = None
        for base_type in node_class.__mro__:
            if key is not node_class:
                if (base_type,) + node_args in self:
                    fcn = self[(base_type,) + node_args]
                    break
            if base_type in self:
                fcn = self[base_type]
                break
        if fcn is None:
            return self.unexpected_expression_type
        self[key] = fcn
        return fcn

    @staticmethod
    def unexpected_expression_type(visitor, node, *args):
        raise DeveloperError(
            f"Unexpected expression node type '{type(node).__name__}' "
            f"found while walking expression tree in {type(visitor).__name__}."
        )


def initialize_exit_node_dispatcher(exit_handlers):
    exit_dispatcher = {}
    for cls, handlers in exit_handlers.items():
        for args, fcn in handlers.items():
            if args is None:
                exit_dispatcher[cls] = fcn
            else:
                exit_dispatcher[(cls, *args)] = fcn
    return exit_dispatcher


def apply_node_operation(node, args):
    """Evaluate `node` on constant arguments.

    Returns None (after logging the reason at DEBUG level) when the
    operation is undefined for these arguments (domain error, division
    by zero, overflow, or a complex result).

    """
    try:
        ans = node._apply_operation(args)
    except (ValueError, ZeroDivisionError, OverflowError) as e:
        logger.debug(
            "Exception encountered evaluating expression '%s(%s)'\n\tmessage: %s",
            node.getname(),
            ", ".join(map(str, args)),
            e,
        )
        return None
    if ans.__class__ is complex:
        logger.debug(
            "Evaluating '%s(%s)' produced a complex value",
            node.getname(),
            ", ".join(map(str, args)),
        )
        return None
    return ans
