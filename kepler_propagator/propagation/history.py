import numpy as np

from collections.abc import Mapping
from typing          import Iterator


class PropagationHistory(Mapping):
  """
  Time-ordered record of one body's sampled states.

  Maps sample time [s] to a copy of the state [x, y, z, vx, vy, vz]. Keys are
  unique and strictly increasing. The driver appends samples while
  propagating and freezes the history once the body is done; after that the
  history is read-only.
  """

  def __init__(self):
    self._times  : list = []
    self._states : list = []
    self._frozen = False

  def append(
    self,
    time  : float,
    state : np.ndarray,
  ) -> None:
    if self._frozen:
      raise RuntimeError("PropagationHistory is frozen and cannot be appended to")
    time = float(time)
    if self._times and time <= self._times[-1]:
      raise ValueError(f"Sample times must be strictly increasing: {time} follows {self._times[-1]}")
    state = np.array(state, dtype=float)
    state.setflags(write=False)
    self._times.append(time)
    self._states.append(state)

  def freeze(self) -> None:
    self._frozen = True

  @property
  def frozen(self) -> bool:
    return self._frozen

  def __getitem__(
    self,
    time : float,
  ) -> np.ndarray:
    index = int(np.searchsorted(self._times, time))
    if index < len(self._times) and self._times[index] == time:
      return self._states[index]
    raise KeyError(time)

  def __iter__(self) -> Iterator[float]:
    return iter(self._times)

  def __len__(self) -> int:
    return len(self._times)

  def __repr__(self) -> str:
    if not self._times:
      return "PropagationHistory(empty)"
    return f"PropagationHistory({len(self)} samples, t = [{self._times[0]}, {self._times[-1]}] s)"

  @property
  def times(self) -> np.ndarray:
    """
    Sample times [s], shape (N,).
    """
    return np.array(self._times)

  @property
  def states(self) -> np.ndarray:
    """
    Sampled states stacked column-wise, shape (6, N).
    """
    if not self._states:
      return np.zeros((6, 0))
    return np.column_stack(self._states)

  @property
  def final_state(self) -> np.ndarray:
    if not self._states:
      raise IndexError("PropagationHistory is empty")
    return self._states[-1]

  @classmethod
  def from_arrays(
    cls,
    times  : np.ndarray,
    states : np.ndarray,
  ) -> 'PropagationHistory':
    """
    Build a frozen history from a time array (N,) and a state array (6, N).
    """
    times  = np.asarray(times, dtype=float).flatten()
    states = np.asarray(states, dtype=float)
    if states.ndim != 2 or states.shape[0] != 6 or states.shape[1] != times.size:
      raise ValueError(f"States must have shape (6, {times.size}), received {states.shape}")
    history = cls()
    for idx, time in enumerate(times):
      history.append(time, states[:, idx])
    history.freeze()
    return history
