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

from .numeric_expr import (
    NumericValue,
    VarRef,
    NumericExpression,
    NegationExpression,
    UnaryFunctionExpression,
    DivisionExpression,
    PowExpression,
    ProductExpression,
    SumExpression,
    OperatorAssociativity,
    native_numeric_types,
    unary_functions,
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
)
from .relational_expr import (
    RelationalExpression,
    EqualityExpression,
    InequalityExpression,
    RangedExpression,
)
from .visitor import (
    StreamBasedExpressionVisitor,
    expression_to_string,
    evaluate_expression,
    identify_variables,
    replace_expressions,
    sizeof_expression,
)
