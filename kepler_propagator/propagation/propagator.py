"""
Kepler Propagator
=================

Multi-body analytic propagation driver.

Summary:
--------
Each registered body orbits its own central body. The driver converts every
body's initial state to orbital elements once, advances the elements to each
output time with the two-body Kepler solution, converts back to Cartesian, and
stores the sample in that body's PropagationHistory.

Lifecycle:
----------
  UNCONFIGURED -> CONFIGURED -> RUNNING -> COMPLETED

  - CONFIGURED  : interval start/end, output interval and at least one body
                  with a central body and an initial state are set.
  - RUNNING     : inside propagate().
  - COMPLETED   : histories can be read. Any configuration change sends the
                  driver back to CONFIGURED (or UNCONFIGURED) and discards them.

Failures:
---------
A conversion or solver error aborts only the affected body. It is wrapped in a
BodyPropagationError (body, time, cause), stored in that body's result and
raised again when the body's history is requested. The other bodies complete.
"""
import math
import numpy as np

from concurrent.futures import ThreadPoolExecutor
from enum               import Enum
from typing             import Optional

from kepler_propagator.model.bodies          import Body, CentralBody
from kepler_propagator.model.errors          import KeplerPropagatorError, BodyPropagationError, IncompleteConfiguration, NotYetPropagated
from kepler_propagator.model.orbit_converter import OrbitConverter
from kepler_propagator.model.root_solvers    import NewtonRaphson
from kepler_propagator.model.two_body        import propagate_keplerian_elements
from kepler_propagator.propagation.history   import PropagationHistory
from kepler_propagator.propagation.registry  import BodyRegistry
from kepler_propagator.utility.printer       import print_propagation_summary


# Relative allowance on the last output time, in units of the output interval
OUTPUT_TIME_ROUNDOFF = 1e-9


class PropagatorStatus(Enum):
  UNCONFIGURED = 'unconfigured'
  CONFIGURED   = 'configured'
  RUNNING      = 'running'
  COMPLETED    = 'completed'


def _validate_time(
  value : float,
  label : str,
) -> float:
  value = float(value)
  if not math.isfinite(value):
    raise ValueError(f"{label} must be finite, received {value}")
  return value


class KeplerPropagator:
  """
  Analytic two-body propagator for any number of bodies, sampled at a fixed
  output interval.
  """

  def __init__(
    self,
    newton_raphson : Optional[NewtonRaphson] = None,
    max_workers    : int                     = 1,
    verbose        : bool                    = False,
  ):
    """
    Input:
    ------
      newton_raphson : NewtonRaphson, optional
        Solver used for Kepler's equation. Defaults to NewtonRaphson().
      max_workers : int
        Number of threads used to propagate bodies. 1 propagates sequentially.
      verbose : bool
        Print a propagation summary after propagate().
    """
    self._time_o          : Optional[float] = None
    self._time_f          : Optional[float] = None
    self._output_interval : Optional[float] = None
    self._registry        = BodyRegistry()
    self._results         : dict = {}
    self._status          = PropagatorStatus.UNCONFIGURED
    self._newton_raphson  = NewtonRaphson()
    self.verbose          = verbose

    if newton_raphson is not None:
      self.set_newton_raphson(newton_raphson)
    self.max_workers = max_workers

  def __repr__(self) -> str:
    return (
      f"KeplerPropagator(status={self._status.value}, bodies={len(self._registry)}, "
      f"interval=[{self._time_o}, {self._time_f}] s, output_interval={self._output_interval} s)"
    )

  # ----------------------------------------------------------------------------
  # Lifecycle
  # ----------------------------------------------------------------------------

  @property
  def status(self) -> PropagatorStatus:
    return self._status

  @property
  def max_workers(self) -> int:
    return self._max_workers

  @max_workers.setter
  def max_workers(
    self,
    max_workers : int,
  ) -> None:
    if int(max_workers) != max_workers or max_workers < 1:
      raise ValueError(f"max_workers must be a positive integer, received {max_workers}")
    self._max_workers = int(max_workers)

  def _missing_configuration(self) -> list:
    problems = []
    if self._time_o is None:
      problems.append("propagation interval start is not set")
    if self._time_f is None:
      problems.append("propagation interval end is not set")
    if self._output_interval is None:
      problems.append("fixed output interval is not set")
    if len(self._registry) == 0:
      problems.append("no bodies registered")
    problems.extend(self._registry.missing())
    return problems

  def _configuration_changed(self) -> None:
    if self._status is PropagatorStatus.RUNNING:
      raise RuntimeError("Cannot change the configuration while propagating")
    self._results = {}
    if self._missing_configuration():
      self._status = PropagatorStatus.UNCONFIGURED
    else:
      self._status = PropagatorStatus.CONFIGURED

  # ----------------------------------------------------------------------------
  # Configuration
  # ----------------------------------------------------------------------------

  def set_propagation_interval_start(
    self,
    time_o : float,
  ) -> None:
    time_o = _validate_time(time_o, "Propagation interval start")
    if self._time_f is not None and not self._time_f > time_o:
      raise ValueError(f"Propagation interval start {time_o} must precede the interval end {self._time_f}")
    self._time_o = time_o
    self._configuration_changed()

  def set_propagation_interval_end(
    self,
    time_f : float,
  ) -> None:
    time_f = _validate_time(time_f, "Propagation interval end")
    if self._time_o is not None and not time_f > self._time_o:
      raise ValueError(f"Propagation interval end {time_f} must follow the interval start {self._time_o}")
    self._time_f = time_f
    self._configuration_changed()

  def set_fixed_output_interval(
    self,
    output_interval : float,
  ) -> None:
    output_interval = _validate_time(output_interval, "Fixed output interval")
    if not output_interval > 0:
      raise ValueError(f"Fixed output interval must be positive, received {output_interval}")
    self._output_interval = output_interval
    self._configuration_changed()

  def set_newton_raphson(
    self,
    newton_raphson : NewtonRaphson,
  ) -> None:
    if not isinstance(newton_raphson, NewtonRaphson):
      raise TypeError(f"Expected a NewtonRaphson, received {type(newton_raphson).__name__}")
    self._newton_raphson = newton_raphson
    self._configuration_changed()

  def add_body(
    self,
    body : Body,
  ) -> None:
    """
    Register a body. Body names must be unique within one propagator because
    propagate() reports results by name.
    """
    if isinstance(body, Body) and any(other.name == body.name for other in self._registry.bodies() if other is not body):
      raise IncompleteConfiguration(f"A different body named '{body.name}' is already registered")
    self._registry.add_body(body)
    self._configuration_changed()

  def set_central_body(
    self,
    body         : Body,
    central_body : CentralBody,
  ) -> None:
    self._registry.set_central_body(body, central_body)
    self._configuration_changed()

  def set_initial_state(
    self,
    body  : Body,
    state : np.ndarray,
    epoch : Optional[float] = None,
  ) -> None:
    """
    Set the Cartesian state of a body at `epoch` (default: the interval start).
    """
    self._registry.set_initial_state(body, state, epoch)
    self._configuration_changed()

  # ----------------------------------------------------------------------------
  # Getters
  # ----------------------------------------------------------------------------

  def get_propagation_interval_start(self) -> Optional[float]:
    return self._time_o

  def get_propagation_interval_end(self) -> Optional[float]:
    return self._time_f

  def get_fixed_output_interval(self) -> Optional[float]:
    return self._output_interval

  def get_newton_raphson(self) -> NewtonRaphson:
    return self._newton_raphson

  def get_bodies(self) -> list:
    return self._registry.bodies()

  def get_central_body(
    self,
    body : Body,
  ) -> Optional[CentralBody]:
    return self._registry.get_central_body(body)

  def get_initial_state(
    self,
    body : Body,
  ) -> Optional[np.ndarray]:
    return self._registry.get_initial_state(body)

  def get_epoch(
    self,
    body : Body,
  ) -> Optional[float]:
    """
    Epoch of the body's initial state. Falls back to the interval start.
    """
    epoch = self._registry.get_epoch(body)
    return self._time_o if epoch is None else epoch

  def get_output_times(self) -> np.ndarray:
    """
    Output times t_k = time_o + k * output_interval, k = 0, 1, ..., up to and
    including time_f.

    Notes:
    ------
      A sample that lands on time_f up to round-off (1e-9 output intervals) is
      kept and snapped to time_f, so the last key never exceeds time_f.
    """
    if self._time_o is None or self._time_f is None or self._output_interval is None:
      raise IncompleteConfiguration("Propagation interval and fixed output interval must be set")
    num_steps = int(math.floor((self._time_f - self._time_o) / self._output_interval + OUTPUT_TIME_ROUNDOFF))
    times     = self._time_o + np.arange(num_steps + 1) * self._output_interval
    if times[-1] > self._time_f:
      times[-1] = self._time_f
    return times

  # ----------------------------------------------------------------------------
  # Propagation
  # ----------------------------------------------------------------------------

  def _propagate_body(
    self,
    body  : Body,
    times : np.ndarray,
  ) -> dict:
    """
    Propagate one body over the output times.

    Output:
    -------
      result : dict
        - success      : bool
        - message      : str
        - body         : Body
        - central_body : CentralBody
        - epoch        : float - epoch of the initial state [s]
        - coe          : KeplerianElements at the epoch (None if conversion failed)
        - history      : PropagationHistory - samples up to the failure, if any
        - error        : BodyPropagationError or None
    """
    central_body   = self._registry.get_central_body(body)
    initial_state  = self._registry.get_initial_state(body)
    epoch          = self.get_epoch(body)
    newton_raphson = self._newton_raphson
    history        = PropagationHistory()

    coe_o = None
    time  = None
    try:
      coe_o = OrbitConverter.state_to_coe(initial_state, central_body.gp)
      for time in times:
        coe = propagate_keplerian_elements(coe_o, central_body.gp, time - epoch, newton_raphson)
        history.append(time, OrbitConverter.coe_to_state(coe, central_body.gp))
    except (KeplerPropagatorError, ValueError, ArithmeticError) as exc:
      error = BodyPropagationError(body, None if time is None else float(time), exc)
      error.__cause__ = exc
      history.freeze()
      return {
        'success'      : False,
        'message'      : str(error),
        'body'         : body,
        'central_body' : central_body,
        'epoch'        : epoch,
        'coe'          : coe_o,
        'history'      : history,
        'error'        : error,
      }

    history.freeze()
    return {
      'success'      : True,
      'message'      : 'Kepler propagation successful',
      'body'         : body,
      'central_body' : central_body,
      'epoch'        : epoch,
      'coe'          : coe_o,
      'history'      : history,
      'error'        : None,
    }

  def propagate(self) -> dict:
    """
    Propagate every registered body over the configured interval.

    Output:
    -------
      results : dict
        Result dict (see _propagate_body) keyed by body name.

    Raises:
    -------
      IncompleteConfiguration
        If the driver is not configured.
    """
    if self._status is PropagatorStatus.RUNNING:
      raise RuntimeError("propagate() is already running")
    problems = self._missing_configuration()
    if problems:
      raise IncompleteConfiguration("Propagator is not configured: " + "; ".join(problems))

    bodies = self._registry.bodies()
    times  = self.get_output_times()

    self._status  = PropagatorStatus.RUNNING
    self._results = {}
    try:
      if self._max_workers > 1 and len(bodies) > 1:
        with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
          futures = [executor.submit(self._propagate_body, body, times) for body in bodies]
          results = [future.result() for future in futures]
      else:
        results = [self._propagate_body(body, times) for body in bodies]
    except BaseException:
      self._status = PropagatorStatus.CONFIGURED
      raise

    self._results = {id(result['body']): result for result in results}
    self._status  = PropagatorStatus.COMPLETED

    named_results = {result['body'].name: result for result in results}
    if self.verbose:
      print_propagation_summary(named_results, times)
    return named_results

  def _completed_result(
    self,
    body : Body,
  ) -> dict:
    if not self._registry.contains(body):
      raise IncompleteConfiguration(f"Body {body!r} has not been added to the propagator")
    if self._status is not PropagatorStatus.COMPLETED:
      raise NotYetPropagated(f"No history for {body!r}: propagator status is '{self._status.value}'")
    return self._results[id(body)]

  def get_propagation_result(
    self,
    body : Body,
  ) -> dict:
    """
    Result dict of one body, including failed ones.
    """
    return self._completed_result(body)

  def get_propagation_results(self) -> dict:
    if self._status is not PropagatorStatus.COMPLETED:
      raise NotYetPropagated(f"No results: propagator status is '{self._status.value}'")
    return {result['body'].name: result for result in self._results.values()}

  def get_propagation_history_at_fixed_output_intervals(
    self,
    body : Body,
  ) -> PropagationHistory:
    """
    Sampled history of a body, keyed by output time [s].

    Notes:
    ------
      Keys are absolute times on the propagation clock, t_k = time_o + k *
      output_interval, not seconds elapsed since time_o. With time_o = 1000 s,
      time_f = 8200 s and a 3600 s interval the keys are 1000, 4600 and 8200.
      The epoch of each initial state is on the same clock.

    Raises:
    -------
      IncompleteConfiguration
        If the body is not registered.
      NotYetPropagated
        If propagate() has not completed.
      BodyPropagationError
        If the propagation of this body failed.
    """
    result = self._completed_result(body)
    if not result['success']:
      error = result['error']
      raise error from error.cause
    return result['history']
