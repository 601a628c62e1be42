"""
Error Taxonomy
==============

Exceptions raised by the Kepler propagation engine.

Hierarchy:
----------
KeplerPropagatorError
├── SolverError
│   ├── ConvergenceFailure      : iteration cap exceeded
│   ├── SingularDerivative      : zero derivative during a Newton step
│   └── NumericalInstability    : non-finite intermediate value
├── DegenerateOrbit             : state/elements cannot be represented (parabolic, rectilinear)
├── InvalidState                : state is not 6 finite components
├── IncompleteConfiguration     : body registry or driver is missing required input
├── NotYetPropagated            : history requested before propagate() completed
└── BodyPropagationError        : a single body's propagation aborted (carries body and time)

Each class also derives from the closest built-in exception so callers that
already catch ValueError / RuntimeError keep working.
"""
from typing import Any, Optional


class KeplerPropagatorError(Exception):
  """
  Base class for all propagation engine errors.
  """


class SolverError(KeplerPropagatorError):
  """
  Base class for Newton-Raphson failures.
  """


class ConvergenceFailure(SolverError, RuntimeError):
  def __init__(
    self,
    message    : str,
    iterations : int,
    estimate   : float,
    residual   : float,
  ):
    super().__init__(message)
    self.iterations = iterations
    self.estimate   = estimate
    self.residual   = residual


class SingularDerivative(SolverError, ZeroDivisionError):
  pass


class NumericalInstability(SolverError, ArithmeticError):
  pass


class DegenerateOrbit(KeplerPropagatorError, ValueError):
  pass


class InvalidState(KeplerPropagatorError, ValueError):
  pass


class IncompleteConfiguration(KeplerPropagatorError, ValueError):
  pass


class NotYetPropagated(KeplerPropagatorError, RuntimeError):
  pass


class BodyPropagationError(KeplerPropagatorError, RuntimeError):
  """
  Propagation of one body aborted. The original conversion or solver error is
  kept as `cause` (and chained as __cause__ when raised).
  """
  def __init__(
    self,
    body  : Any,
    time  : Optional[float],
    cause : Exception,
  ):
    body_name = getattr(body, 'name', repr(body))
    if time is None:
      where = "during initial state conversion"
    else:
      where = f"at t = {time:.6f} s"
    super().__init__(f"Propagation of body '{body_name}' failed {where}: {type(cause).__name__}: {cause}")
    self.body  = body
    self.time  = time
    self.cause = cause
