"""
Numerical Two-Body Reference
============================

Point-mass two-body propagation by numerical integration. Used only as an
independent check of the analytic Kepler propagator.
"""
import numpy as np

from scipy.integrate import solve_ivp
from typing          import Optional

from kepler_propagator.model.constants       import SOLARSYSTEMCONSTANTS
from kepler_propagator.model.orbit_converter import validate_gp, validate_state


class TwoBodyPointMass:
  """
  Equations of motion d/dt [r, v] = [v, -gp r / |r|^3].
  """

  def __init__(
    self,
    gp : float = SOLARSYSTEMCONSTANTS.EARTH.GP,
  ):
    self.gp = validate_gp(gp)

  def state_time_derivative(
    self,
    time  : float,
    state : np.ndarray,
  ) -> np.ndarray:
    pos_vec = state[0:3]
    vel_vec = state[3:6]

    pos_mag = np.sqrt(pos_vec[0]**2 + pos_vec[1]**2 + pos_vec[2]**2)
    acc_vec = -self.gp * pos_vec / pos_mag**3

    return np.concatenate([vel_vec, acc_vec])


def propagate_state_numerical_integration(
  initial_state : np.ndarray,
  gp            : float,
  time_eval     : np.ndarray,
  time_o        : Optional[float] = None,
  method        : str             = 'DOP853',
  rtol          : float           = 1e-12,
  atol          : float           = 1e-12,
) -> dict:
  """
  Propagate a state with scipy's solve_ivp under point-mass gravity.

  Input:
  ------
    initial_state : np.ndarray
      Initial state [x, y, z, vx, vy, vz] [m, m/s] at time_o.
    gp : float
      Gravitational parameter [m³/s²].
    time_eval : np.ndarray
      Increasing times at which to store the solution [s].
    time_o : float, optional
      Time of the initial state [s]. Defaults to time_eval[0].
    method : str
      Integration method for scipy.solve_ivp (default: 'DOP853').
    rtol : float
      Relative tolerance for integration.
    atol : float
      Absolute tolerance for integration.

  Output:
  -------
    result : dict
      Dictionary containing:
      - success : bool - Integration success flag
      - message : str - Status message
      - time : np.ndarray - Time array [s]
      - state : np.ndarray - State history [6 x N]
      - state_f : np.ndarray - Final state vector
  """
  initial_state = validate_state(initial_state)
  time_eval     = np.asarray(time_eval, dtype=float).flatten()
  if time_eval.size == 0:
    raise ValueError("time_eval must contain at least one time")
  if time_o is None:
    time_o = float(time_eval[0])

  # A single requested time equal to time_o needs no integration
  if time_eval.size == 1 and time_eval[0] == time_o:
    state = initial_state.reshape(6, 1)
    return {
      'success' : True,
      'message' : 'No integration required',
      'time'    : time_eval,
      'state'   : state,
      'state_f' : state[:, -1],
    }

  # Solve initial value problem
  solution = solve_ivp(
    fun    = TwoBodyPointMass(gp).state_time_derivative,
    t_span = (time_o, float(time_eval[-1])),
    y0     = initial_state,
    method = method,
    rtol   = rtol,
    atol   = atol,
    t_eval = time_eval,
  )

  return {
    'success' : solution.success,
    'message' : solution.message,
    'time'    : solution.t,
    'state'   : solution.y,
    'state_f' : solution.y[:, -1],
  }
