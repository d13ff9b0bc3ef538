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

from nlpbridge.common.enums import minimize
from nlpbridge.common.errors import EvaluationError
from nlpbridge.common.log import is_debug_set
from nlpbridge.core.base.transformation import Transformation, TransformationFactory
from nlpbridge.core.expr.visitor import evaluate_expression, identify_variables

logger = logging.getLogger('nlpbridge.core')


#
# This transformation moves a nonlinear objective into the constraints:
#
#   min f(x)
#
# becomes
#
#   min t
#   s.t. t - f(x) >= 0
#
# (and for maximization, max t  s.t.  t - f(x) <= 0).  The epigraph
# variable t is free and is appended after every existing variable, so
# no original variable or constraint index changes.
#
@TransformationFactory.register('core.epigraph')
class EpigraphTransformation(Transformation):
    """Move a nonlinear objective into an epigraph constraint"""

    def __init__(self):
        super(EpigraphTransformation, self).__init__(name='core.epigraph')

    def _apply_to(self, model, **kwds):
        """Reformulate the objective of `model` in place.

        Returns the index of the new epigraph variable, or None if the
        objective was linear and the model was left untouched.

        """
        var_name = kwds.pop('var_name', 't')
        if kwds:
            raise ValueError(
                "Unexpected keyword arguments for %s: %s"
                % (self.name, ', '.join(sorted(kwds)))
            )
        obj = model.objective
        if obj.is_linear():
            logger.info(
                "Model '%s' has a linear objective; the epigraph "
                "reformulation is not needed and the model was not modified."
                % (model.name,)
            )
            return None

        f = obj.expr
        start = self._initial_value(model, f)
        t_index = model.add_variable(value=start, name=var_name)
        t = model.var(t_index)
        if obj.sense == minimize:
            model.add_constraint(t - f, '>=', 0)
        else:
            model.add_constraint(t - f, '<=', 0)
        model.set_objective(t, obj.sense)
        return t_index

    @staticmethod
    def _initial_value(model, f):
        point = {}
        for v in identify_variables(f):
            val = model.variable(v.index).value
            if val is None:
                return None
            point[v.index] = val
        try:
            return evaluate_expression(f, point)
        except EvaluationError as e:
            if is_debug_set(logger):
                logger.debug(
                    "Could not evaluate the objective at the starting point "
                    "(%s); the epigraph variable has no initial value" % (e,)
                )
            return None
