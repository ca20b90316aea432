"""
Exceptions raised by the curve evaluation.
"""


class NurbsError(Exception):
    pass


class ParamError(NurbsError):
    """
    Wrong shape or type of an argument.
    """
    pass


class MalformedCurveError(ParamError):
    """
    Inconsistent curve data: knot count, degree or weights.
    """
    pass


class ParameterOutOfDomainError(ParamError):
    pass


class DegenerateWeightError(NurbsError):
    pass
