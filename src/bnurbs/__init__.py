__version__ = '0.1.0'

from .exceptions import NurbsError, ParamError, MalformedCurveError, ParameterOutOfDomainError, DegenerateWeightError
