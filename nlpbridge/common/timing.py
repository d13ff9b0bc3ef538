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

"""Utilities for collecting timing information"""

import logging
import time

_transform_logger = logging.getLogger('nlpbridge.common.timing.transformation')

# perf_counter is monotonic and the most accurate timer available
default_timer = time.perf_counter


class TicTocTimer(object):
    """A minimal stopwatch.

    ``tic()`` starts (or restarts) the timer and ``toc()`` returns the
    number of seconds elapsed since the last ``tic()``.

    """

    def __init__(self):
        self._start = default_timer()

    def tic(self):
        self._start = default_timer()

    def toc(self):
        return default_timer() - self._start


class TransformationTimer(object):
    __slots__ = ('obj', 'mode', 'timer')
    msg = "%6.*f seconds to apply Transformation %s%s"
    in_progress = "TransformationTimer object for %s%s; %0.3f elapsed seconds"

    def __init__(self, obj, mode=None):
        self.obj = obj
        if mode is None:
            self.mode = ''
        else:
            self.mode = " (%s)" % (mode,)
        self.timer = -default_timer()

    def report(self):
        # Record the elapsed time now: handlers may format the message later
        self.timer += default_timer()
        _transform_logger.info(self)

    @property
    def name(self):
        return self.obj.__class__.__name__

    def __str__(self):
        total_time = self.timer
        if total_time < 0:
            total_time += default_timer()
            return self.in_progress % (self.name, self.mode, total_time)
        return self.msg % (
            2 if total_time >= 0.005 else 0,
            total_time,
            self.name,
            self.mode,
        )
