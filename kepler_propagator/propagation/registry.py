import numpy as np

from types  import SimpleNamespace
from typing import Optional

from kepler_propagator.model.bodies          import Body, CentralBody
from kepler_propagator.model.errors          import IncompleteConfiguration
from kepler_propagator.model.orbit_converter import validate_state


class BodyRegistry:
  """
  Bookkeeping of propagated bodies.

  For each registered body the registry holds its central body, its initial
  state and the epoch of that state. Bodies are looked up by identity and kept
  in registration order. No physics happens here.
  """

  def __init__(self):
    self._records : dict = {}

  def _record(
    self,
    body : Body,
  ) -> SimpleNamespace:
    try:
      return self._records[id(body)]
    except KeyError:
      raise IncompleteConfiguration(f"Body {body!r} has not been added to the registry") from None

  def add_body(
    self,
    body : Body,
  ) -> None:
    if not isinstance(body, Body):
      raise TypeError(f"Expected a Body, received {type(body).__name__}")
    if id(body) in self._records:
      raise IncompleteConfiguration(f"Body {body!r} is already registered")
    self._records[id(body)] = SimpleNamespace(
      body          = body,
      central_body  = None,
      initial_state = None,
      epoch         = None,
    )

  def set_central_body(
    self,
    body         : Body,
    central_body : CentralBody,
  ) -> None:
    if not isinstance(central_body, CentralBody):
      raise TypeError(f"Expected a CentralBody, received {type(central_body).__name__}")
    self._record(body).central_body = central_body

  def set_initial_state(
    self,
    body  : Body,
    state : np.ndarray,
    epoch : Optional[float] = None,
  ) -> None:
    """
    Input:
    ------
      body : Body
        Registered body.
      state : np.ndarray
        Initial state [x, y, z, vx, vy, vz].
      epoch : float, optional
        Time [s] at which the state holds. None means the start of the
        propagation interval.
    """
    record = self._record(body)
    state  = validate_state(state)
    if epoch is not None:
      epoch = float(epoch)
      if not np.isfinite(epoch):
        raise ValueError(f"Epoch of {body!r} must be finite, received epoch = {epoch}")
    record.initial_state = state
    record.epoch         = epoch

  def contains(
    self,
    body : Body,
  ) -> bool:
    return id(body) in self._records

  def bodies(self) -> list:
    return [record.body for record in self._records.values()]

  def get_central_body(
    self,
    body : Body,
  ) -> Optional[CentralBody]:
    return self._record(body).central_body

  def get_initial_state(
    self,
    body : Body,
  ) -> Optional[np.ndarray]:
    state = self._record(body).initial_state
    return None if state is None else state.copy()

  def get_epoch(
    self,
    body : Body,
  ) -> Optional[float]:
    return self._record(body).epoch

  def missing(self) -> list:
    """
    Descriptions of every registered body lacking a central body or an initial state.
    """
    problems = []
    for record in self._records.values():
      absent = []
      if record.central_body is None:
        absent.append("central body")
      if record.initial_state is None:
        absent.append("initial state")
      if absent:
        problems.append(f"'{record.body.name}' has no {' and no '.join(absent)}")
    return problems

  def is_complete(self) -> bool:
    return bool(self._records) and not self.missing()

  def check_complete(self) -> None:
    if not self._records:
      raise IncompleteConfiguration("No bodies registered")
    problems = self.missing()
    if problems:
      raise IncompleteConfiguration("Incomplete body registry: " + "; ".join(problems))

  def __len__(self) -> int:
    return len(self._records)
