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
#
# Utility classes for working with the logger
#
import io
import logging

_DEBUG = logging.DEBUG
_NOTSET = logging.NOTSET


def is_debug_set(logger):
    """A variant of Logger.isEnabledFor that returns False if NOTSET

    The implementation of logging.Logger.isEnabledFor() returns True
    if the effective level of the logger is NOTSET.  This variant
    only returns True if the effective level of the logger is NOTSET
    < level <= DEBUG.  This is used to detect if the user explicitly
    requested DEBUG output.

    """
    if not logger.isEnabledFor(_DEBUG):
        return False
    return logger.getEffectiveLevel() > _NOTSET


class LoggingIntercept(object):
    r"""Context manager for intercepting messages sent to a log stream

    This class is designed to enable easy testing of log messages.

    The LoggingIntercept context manager will intercept messages sent to
    a log stream matching a specified level and send the messages to the
    specified output stream.  Other handlers registered to the target
    logger will be temporarily removed and the logger will be set not to
    propagate messages up to higher-level loggers.

    Parameters
    ----------
    output: io.TextIOBase
        the file stream to send log messages to

    module: str
        the target logger name to intercept. `logger` and `module` are
        mutually exclusive.

    level: int
        the logging level to intercept

    formatter: logging.Formatter
        the formatter to use when rendering the log messages.  If not
        specified, uses `'%(message)s'`

    logger: logging.Logger
        the target logger to intercept. `logger` and `module` are
        mutually exclusive.

    Examples
    --------
    >>> import io, logging
    >>> from nlpbridge.common.log import LoggingIntercept
    >>> buf = io.StringIO()
    >>> with LoggingIntercept(buf, 'nlpbridge.solver', logging.WARNING):
    ...     logging.getLogger('nlpbridge.solver').warning('a simple message')
    >>> buf.getvalue()
    'a simple message\n'

    """

    def __init__(
        self,
        output=None,
        module=None,
        level=logging.WARNING,
        formatter=None,
        logger=None,
    ):
        self.handler = None
        self.output = output
        if logger is not None:
            if module is not None:
                raise ValueError(
                    "LoggingIntercept: only one of 'module' and 'logger' is allowed"
                )
            self._logger = logger
        else:
            self._logger = logging.getLogger(module)
        self._level = level
        if formatter is None:
            formatter = logging.Formatter('%(message)s')
        self._formatter = formatter
        self._save = None

    def __enter__(self):
        logger = self._logger
        self._save = logger.level, logger.propagate, logger.handlers
        if self._level is None:
            self._level = logger.getEffectiveLevel()
        output = self.output
        if output is None:
            output = io.StringIO()
        assert self.handler is None
        self.handler = logging.StreamHandler(output)
        self.handler.setFormatter(self._formatter)
        self.handler.setLevel(self._level)
        logger.handlers = []
        logger.propagate = False
        logger.setLevel(self.handler.level)
        logger.addHandler(self.handler)
        return output

    def __exit__(self, et, ev, tb):
        logger = self._logger
        logger.removeHandler(self.handler)
        self.handler = None
        logger.setLevel(self._save[0])
        logger.propagate = self._save[1]
        assert not logger.handlers
        logger.handlers.extend(self._save[2])

    @property
    def module(self):
        return self._logger.name


class SuppressLogging(object):
    """Context manager that temporarily raises the level of a logger

    All records below `level` that are sent to the target logger (or
    any of its children that do not set their own level) are dropped
    while the context is active.  Handlers, propagation and the level
    of the logger are restored on exit.  When `active` is False the
    context manager does nothing, which lets callers write a single
    ``with`` statement for an optional verbosity toggle.

    """

    def __init__(self, module='nlpbridge', level=logging.ERROR, active=True):
        self._logger = logging.getLogger(module)
        self._level = level
        self._active = active
        self._save = None

    def __enter__(self):
        if self._active:
            self._save = self._logger.level
            self._logger.setLevel(self._level)
        return self

    def __exit__(self, et, ev, tb):
        if self._save is not None:
            self._logger.setLevel(self._save)
            self._save = None
