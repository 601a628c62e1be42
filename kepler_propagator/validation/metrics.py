"""
Validation Metrics Module
=========================

Utilities for computing validation metrics and comparing propagation results.

Notes:
------
For an unperturbed two-body orbit, specific energy and angular momentum are
constants of motion; their drift along a history measures the numerical error
of the propagator that produced it.
"""
import numpy as np

from kepler_propagator.propagation.history import PropagationHistory


def compute_error_statistics(
  error : np.ndarray,
) -> dict:
  """
  Compute statistics for a vector error history.

  Input:
  ------
    error : np.ndarray
      Error array, shape (3, N), or (N,) for magnitudes.

  Output:
  -------
    stats : dict
      Dictionary containing mean, rms, max, min and std of error magnitudes.
  """
  error = np.asarray(error, dtype=float)
  if error.ndim == 2:
    error_mag = np.linalg.norm(error, axis=0)
  else:
    error_mag = np.abs(error)

  return {
    'mean' : float(np.mean(error_mag)),
    'rms'  : float(np.sqrt(np.mean(error_mag**2))),
    'max'  : float(np.max(error_mag)),
    'min'  : float(np.min(error_mag)),
    'std'  : float(np.std(error_mag)),
  }


def compute_specific_energy(
  states : np.ndarray,
  gp     : float,
) -> np.ndarray:
  """
  Compute specific orbital energy at each sample.

  Input:
  ------
    states : np.ndarray
      State vectors, shape (6, N).
    gp : float
      Gravitational parameter [m³/s²].

  Output:
  -------
    energy : np.ndarray
      Specific energy at each sample [m²/s²].
  """
  pos_mag = np.linalg.norm(states[0:3, :], axis=0)
  vel_mag = np.linalg.norm(states[3:6, :], axis=0)

  return 0.5 * vel_mag**2 - gp / pos_mag


def compute_angular_momentum(
  states : np.ndarray,
) -> np.ndarray:
  """
  Compute angular momentum magnitude at each sample [m²/s]. Input shape (6, N).
  """
  ang_mom = np.cross(states[0:3, :].T, states[3:6, :].T).T
  return np.linalg.norm(ang_mom, axis=0)


def compute_relative_drift(
  values : np.ndarray,
) -> float:
  """
  Maximum relative departure of a series from its first value.
  """
  values = np.asarray(values, dtype=float)
  return float(np.max(np.abs((values - values[0]) / values[0])))


def compare_histories(
  computed  : PropagationHistory,
  reference : PropagationHistory,
) -> dict:
  """
  Compare two histories sampled at the same times.

  Input:
  ------
    computed : PropagationHistory
      History under test.
    reference : PropagationHistory
      Reference history.

  Output:
  -------
    result : dict
      - times              : np.ndarray - sample times [s]
      - pos_error          : dict - position error statistics
      - vel_error          : dict - velocity error statistics
      - component_abs_sum  : np.ndarray - sum over the six components of
                             |computed - reference| at each sample
      - max_component_abs_sum : float

  Raises:
  -------
    ValueError
      If the two histories are not sampled at the same times.
  """
  times = computed.times
  if len(times) != len(reference) or not np.allclose(times, reference.times, rtol=0.0, atol=1e-9):
    raise ValueError("Histories must be sampled at the same times to be compared")

  state_error       = computed.states - reference.states
  component_abs_sum = np.sum(np.abs(state_error), axis=0)

  return {
    'times'                 : times,
    'pos_error'             : compute_error_statistics(state_error[0:3, :]),
    'vel_error'             : compute_error_statistics(state_error[3:6, :]),
    'component_abs_sum'     : component_abs_sum,
    'max_component_abs_sum' : float(np.max(component_abs_sum)),
  }
