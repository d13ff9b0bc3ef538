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

import numpy as np


class SolveStatus(enum.Enum):
    """
    The normalized outcome of a solve.

    Attributes
    ----------
    optimal
        The solver reports a (locally) optimal solution.
    infeasible
        The solver reports that no feasible point exists (or could not
        find one).
    unbounded
        The objective is unbounded in the direction of optimization.
    iterationLimit
        The solver stopped after reaching an iteration or time limit.
    error
        The solver failed, or reported a status that could not be
        mapped onto one of the statuses above.
    """

    optimal = 'optimal'
    infeasible = 'infeasible'
    unbounded = 'unbounded'
    iterationLimit = 'iterationLimit'
    error = 'error'

    def __str__(self):
        return self.name


class SolveResult(object):
    """The (immutable) result of one solve.

    Attributes
    ----------
    status: SolveStatus
        The normalized status.
    objective_value: float
        The objective value reported by the solver (NaN if not available).
    solution: numpy.ndarray
        The solution vector ordered by variable index (NaN entries where
        no value is available).  The array is read-only.
    native_status:
        The status exactly as reported by the solver adapter.
    message: str
        The solver message (may be empty).
    solver_name: str
        The name of the solver adapter.
    wall_time: float
        Elapsed wall-clock time of the solve (in seconds).
    """

    __slots__ = (
        'status',
        'objective_value',
        'solution',
        'native_status',
        'message',
        'solver_name',
        'wall_time',
    )

    def __init__(
        self,
        status,
        objective_value,
        solution,
        native_status=None,
        message='',
        solver_name=None,
        wall_time=None,
    ):
        solution = np.array(solution, dtype=float)
        solution.setflags(write=False)
        _set = super().__setattr__
        _set('status', SolveStatus(status))
        _set(
            'objective_value',
            float('nan') if objective_value is None else float(objective_value),
        )
        _set('solution', solution)
        _set('native_status', native_status)
        _set('message', '' if message is None else str(message))
        _set('solver_name', solver_name)
        _set('wall_time', wall_time)

    def __setattr__(self, name, value):
        raise AttributeError("SolveResult objects are immutable")

    def __delattr__(self, name):
        raise AttributeError("SolveResult objects are immutable")

    @property
    def is_optimal(self):
        return self.status is SolveStatus.optimal

    def __repr__(self):
        return (
            f"SolveResult(status={self.status}, "
            f"objective_value={self.objective_value!r}, "
            f"solution={self.solution.tolist()!r}, "
            f"native_status={self.native_status!r})"
        )

    def __str__(self):
        lines = [
            f"status:          {self.status}",
            f"native status:   {self.native_status}",
            f"objective value: {self.objective_value}",
            f"solution:        {self.solution.tolist()}",
        ]
        if self.message:
            lines.append(f"message:         {self.message}")
        if self.solver_name is not None:
            lines.append(f"solver:          {self.solver_name}")
        if self.wall_time is not None:
            lines.append(f"wall time:       {self.wall_time:0.3f} s")
        return "\n".join(lines)
