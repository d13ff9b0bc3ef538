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


class NamedIntEnum(enum.IntEnum):
    """An extended version of :py:class:`enum.IntEnum` that supports
    creating members by name as well as value.

    """

    @classmethod
    def _missing_(cls, value):
        for member in cls:
            if member.name == value:
                return member
        return None


class ObjectiveSense(NamedIntEnum):
    """Flag indicating if an objective is minimizing (1) or maximizing (-1).

    While the numeric values are arbitrary, code that converts a
    maximization into a minimization multiplies by the sense, so the
    values must remain +1 / -1.

    """

    minimize = 1
    maximize = -1

    def __str__(self):
        return self.name


minimize = ObjectiveSense.minimize
maximize = ObjectiveSense.maximize
