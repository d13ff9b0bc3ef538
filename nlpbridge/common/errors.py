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

import inspect
import textwrap


def format_exception(msg, prolog=None, epilog=None, exception=None, width=76):
    """Generate a formatted exception message

    This returns a formatted exception message, line wrapped for display
    on the console and with optional prolog and epilog messages.

    Parameters
    ----------
    msg: str
        The raw exception message

    prolog: str, optional
        A message to output before the exception message, ``msg``.  If
        this message is long enough to line wrap, the ``msg`` will be
        indented a level below the ``prolog`` message.

    epilog: str, optional
        A message to output after the exception message, ``msg``.  If
        provided, the ``msg`` will be indented a level below the
        ``prolog`` / ``epilog`` messages.

    exception: Exception, optional
        The raw exception being raised (used to improve initial line wrapping).

    width: int, optional
        The line length to wrap the exception message to.

    Returns
    -------
    str
    """
    fields = []

    if epilog:
        indent = ' ' * 8
    else:
        indent = ' ' * 4

    if exception is None:
        # default to the length of 'NotImplementedError: '
        initial_indent = ' ' * 21
    else:
        if not inspect.isclass(exception):
            exception = exception.__class__
        initial_indent = ' ' * (len(exception.__name__) + 2)
        if exception.__module__ != 'builtins':
            initial_indent += ' ' * (len(exception.__module__) + 1)

    if prolog is not None:
        if '\n' not in prolog:
            prolog = textwrap.fill(
                prolog,
                width=width,
                initial_indent=initial_indent,
                subsequent_indent=' ' * 4,
                break_long_words=False,
                break_on_hyphens=False,
            ).lstrip()
        if '\n' in prolog:
            indent = ' ' * 8
        fields.append(prolog)
        initial_indent = indent

    if '\n' not in msg:
        msg = textwrap.fill(
            msg,
            width=width,
            initial_indent=initial_indent,
            subsequent_indent=indent,
            break_long_words=False,
            break_on_hyphens=False,
        )
        if not fields:
            msg = msg.lstrip()
    fields.append(msg)

    if epilog is not None:
        if '\n' not in epilog:
            epilog = textwrap.fill(
                epilog,
                width=width,
                initial_indent=' ' * 4,
                subsequent_indent=' ' * 4,
                break_long_words=False,
                break_on_hyphens=False,
            )
        fields.append(epilog)

    return '\n'.join(fields)


class NLPBridgeException(Exception):
    """
    Exception class for other nlpbridge exceptions to inherit from,
    allowing nlpbridge exceptions to be caught in a general way.
    Subclasses can define a class-level `default_message` attribute.
    """

    def __init__(self, *args):
        if not args and getattr(self, 'default_message', None):
            args = (self.default_message,)
        return super().__init__(*args)


class DeveloperError(NLPBridgeException, NotImplementedError):
    """
    Exception class used to throw errors that result from nlpbridge
    programming errors, rather than user modeling errors (e.g., an
    expression node class that was never registered with a walker).
    """

    def __str__(self):
        return format_exception(
            repr(super().__str__()),
            prolog="Internal nlpbridge implementation error:",
            epilog="Please report this to the nlpbridge developers.",
            exception=self,
        )


class InvalidReference(NLPBridgeException, KeyError):
    """Raised when an expression references a variable index that is not
    part of the model variable table."""

    def __str__(self):
        # KeyError repr()s its argument; we want the plain message
        return NLPBridgeException.__str__(self)


class IndexOutOfRange(NLPBridgeException, IndexError):
    """Raised when the evaluator is queried for a constraint (or
    variable) index that does not exist."""


class ModeNotInitialized(NLPBridgeException, RuntimeError):
    """Raised when an evaluator is asked for a quantity (values,
    derivatives) that the solver did not request when it initialized
    the evaluator."""


class EvaluationError(NLPBridgeException, ArithmeticError):
    """An exception raised when an expression cannot be evaluated at the
    requested point (e.g., ``log`` of a nonpositive number).  Solver
    adapters are expected to catch this and translate it into their
    native evaluation-error handling."""


class DifferentiationException(NLPBridgeException):
    """Raised when an expression node has no registered derivative rule."""
