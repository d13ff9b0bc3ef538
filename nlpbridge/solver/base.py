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

import abc
import enum
from typing import Mapping, Sequence, Tuple

from nlpbridge.solver.config import SolverConfig
from nlpbridge.solver.results import SolveStatus


class NLPSolverBase(abc.ABC):
    """
    This base class defines the methods required for all solver adapters:
        - available: Determines whether the solver is able to be run.
        - version: The version of the solver.
        - create_model_instance: Create an empty solver-side problem
          (an :class:`NLPSolverModel`) that the orchestrator loads and
          optimizes.

    Adapters also provide a ``status_map`` that maps every native status
    the adapter can report onto a :class:`SolveStatus`, and a
    :attr:`config<NLPSolverBase.config>` attribute derived from
    :class:`SolverConfig<nlpbridge.solver.config.SolverConfig>`.
    """

    CONFIG = SolverConfig()

    #: native status -> SolveStatus
    status_map: Mapping = {}

    def __init__(self, **kwds) -> None:
        # The solver may be given a different name; otherwise it is the
        # class name (all lowercase)
        if "name" in kwds:
            self.name = kwds.pop('name')
        elif not hasattr(self, 'name'):
            self.name = type(self).__name__.lower()
        self.config = self.CONFIG(value=kwds)

    #
    # Support "with" statements.
    #
    def __enter__(self):
        return self

    def __exit__(self, t, v, traceback):
        """Exit statement - enables `with` statements."""

    class Availability(enum.IntEnum):
        """
        Class to capture different statuses in which a solver can exist in
        order to record its availability for use.
        """

        FullLicense = 2
        LimitedLicense = 1
        NotFound = 0
        BadVersion = -1
        BadLicense = -2
        NeedsCompiledExtension = -3

        def __bool__(self):
            return self._value_ > 0

        def __format__(self, format_spec):
            # format as the member name, not the int
            return format(self.name, format_spec)

        def __str__(self):
            return self.name

    @abc.abstractmethod
    def available(self) -> bool:
        """Test if the solver is available on this system.

        Returns
        -------
        available: NLPSolverBase.Availability
            An enum that indicates "how available" the solver is.
            Note that the enum can be cast to bool, which will
            be True if the solver is runable at all and False
            otherwise.
        """

    @abc.abstractmethod
    def version(self) -> Tuple:
        """
        Returns
        -------
        version: tuple
            A tuple representing the version
        """

    @abc.abstractmethod
    def create_model_instance(self) -> 'NLPSolverModel':
        """
        Returns
        -------
        instance: NLPSolverModel
            A new, empty solver-side problem
        """

    def map_status(self, native_status):
        """Map a native status onto a :class:`SolveStatus` (None if the
        status is not in the :attr:`status_map`)"""
        try:
            return self.status_map.get(native_status, None)
        except TypeError:
            # unhashable native status
            return None


class NLPSolverModel(abc.ABC):
    """
    The solver-side problem created by
    :meth:`NLPSolverBase.create_model_instance`.

    The orchestrator calls, in order, :meth:`load_problem`,
    :meth:`set_warm_start` and :meth:`optimize`, and then queries
    :meth:`native_status`, :meth:`objective_value` and
    :meth:`solution_vector`.
    """

    @abc.abstractmethod
    def load_problem(
        self,
        num_vars: int,
        num_constraints: int,
        var_lb: Sequence[float],
        var_ub: Sequence[float],
        constr_lb: Sequence[float],
        constr_ub: Sequence[float],
        sense,
        evaluator,
    ) -> None:
        """
        Load the problem description.

        Parameters
        ----------
        num_vars: int
            Number of variables
        num_constraints: int
            Number of constraints
        var_lb, var_ub: numpy.ndarray
            Variable bounds ordered by variable index (+/-inf when unbounded)
        constr_lb, constr_ub: numpy.ndarray
            Constraint bounds ordered by constraint index
        sense: ObjectiveSense
            The objective sense
        evaluator: NLPEvaluator
            The (uninitialized) evaluator; the adapter calls
            ``evaluator.initialize()`` with the features it needs.
        """

    @abc.abstractmethod
    def set_warm_start(self, values: Sequence[float]) -> None:
        """Set the starting point (ordered by variable index)"""

    @abc.abstractmethod
    def optimize(self) -> None:
        """Run the solver"""

    @abc.abstractmethod
    def native_status(self):
        """The termination status, in the solver's own terms"""

    @abc.abstractmethod
    def objective_value(self) -> float:
        """The objective value of the returned point (in the sense of the
        original problem)"""

    @abc.abstractmethod
    def solution_vector(self) -> Sequence[float]:
        """The returned point, ordered by variable index"""

    def message(self) -> str:
        """A human-readable termination message (empty if the solver
        provides none)"""
        return ''
