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

from nlpbridge.common.enums import ObjectiveSense, minimize, maximize
from nlpbridge.core.expr import (
    VarRef,
    exp,
    log,
    log10,
    sqrt,
    sin,
    cos,
    tan,
    asin,
    acos,
    atan,
    sinh,
    cosh,
    tanh,
    expression_to_string,
    evaluate_expression,
    identify_variables,
    replace_expressions,
    sizeof_expression,
)
from nlpbridge.core.expr.calculus import reverse_sd
from nlpbridge.core.model import Model, Variable, Constraint, Objective
from nlpbridge.core.base.transformation import Transformation, TransformationFactory

import nlpbridge.core.plugins.transform
from nlpbridge.core.plugins.transform import EpigraphTransformation
