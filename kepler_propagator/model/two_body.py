"""
Analytic Two-Body Propagation
=============================

Time propagation of an unperturbed Keplerian orbit.

Summary:
--------
The five shape/orientation elements (sma, ecc, inc, raan, aop) are constant
for a two-body orbit; only the anomaly advances. The mean anomaly advances
linearly at the mean motion n = sqrt(gp / |a|^3), and the eccentric (or
hyperbolic) anomaly is recovered from it by solving Kepler's equation with
the shared Newton-Raphson solver:

  elliptic   (0 <= e < 1) : M = E - e sin(E)
  hyperbolic (e > 1)      : M = e sinh(H) - H

Parabolic orbits are not represented and raise DegenerateOrbit.
"""
import numpy as np

from typing import Optional

from kepler_propagator.model.constants       import NUMERICS
from kepler_propagator.model.orbit_converter import OrbitConverter, KeplerianElements, validate_gp, validate_state, wrap_to_two_pi
from kepler_propagator.model.root_solvers    import NewtonRaphson


def _default_solver(
  newton_raphson : Optional[NewtonRaphson],
) -> NewtonRaphson:
  return newton_raphson if newton_raphson is not None else NewtonRaphson()


def solve_kepler_elliptic(
  ma             : float,
  ecc            : float,
  newton_raphson : Optional[NewtonRaphson] = None,
) -> float:
  """
  Solve Kepler's equation ma = ea - ecc*sin(ea) for eccentric anomaly ea.

  Input:
  ------
    ma : float
      Mean anomaly [rad]
    ecc : float
      Eccentricity (0 <= ecc < 1)
    newton_raphson : NewtonRaphson, optional
      Solver settings. A default NewtonRaphson() is used when omitted.

  Output:
  -------
    ea : float
      Eccentric anomaly [rad] in [0, 2 pi)

  Notes:
  ------
    The mean anomaly is first wrapped into [0, 2 pi). The initial guess is
    ea = ma for ecc < 0.8 and ea = pi otherwise. For high eccentricity, ea = pi
    starts Newton on the convex side of the root so the iteration cannot cycle.
  """
  if not 0 <= ecc < 1:
    raise ValueError(f"solve_kepler_elliptic() requires 0 <= ecc < 1, received ecc = {ecc}")

  ma = wrap_to_two_pi(ma)

  # Initial guess
  if ecc < NUMERICS.HIGH_ECCENTRICITY:
    ea_o = ma
  else:
    ea_o = np.pi

  ea = _default_solver(newton_raphson).find_root(
    func          = lambda ea: ea - ecc * np.sin(ea) - ma,
    func_prime    = lambda ea: 1.0 - ecc * np.cos(ea),
    initial_guess = ea_o,
  )
  return wrap_to_two_pi(ea)


def solve_kepler_hyperbolic(
  mha            : float,
  ecc            : float,
  newton_raphson : Optional[NewtonRaphson] = None,
) -> float:
  """
  Solve the hyperbolic Kepler equation mha = ecc*sinh(ha) - ha for hyperbolic
  anomaly ha.

  Input:
  ------
    mha : float
      Mean hyperbolic anomaly [rad] (unbounded)
    ecc : float
      Eccentricity (ecc > 1)
    newton_raphson : NewtonRaphson, optional
      Solver settings. A default NewtonRaphson() is used when omitted.

  Output:
  -------
    ha : float
      Hyperbolic anomaly [rad]

  Notes:
  ------
    The initial guess ha = asinh(mha / ecc) keeps sinh(ha) of the same order
    as mha, so the first Newton steps cannot overflow for large |mha|.
  """
  if not ecc > 1:
    raise ValueError(f"solve_kepler_hyperbolic() requires ecc > 1, received ecc = {ecc}")

  mha  = float(mha)
  ha_o = np.arcsinh(mha / ecc)

  return _default_solver(newton_raphson).find_root(
    func          = lambda ha: ecc * np.sinh(ha) - ha - mha,
    func_prime    = lambda ha: ecc * np.cosh(ha) - 1.0,
    initial_guess = ha_o,
  )


def propagate_keplerian_elements(
  coe            : KeplerianElements,
  gp             : float,
  delta_time     : float,
  newton_raphson : Optional[NewtonRaphson] = None,
) -> KeplerianElements:
  """
  Advance a set of orbital elements by delta_time along the unperturbed orbit.

  Input:
  ------
    coe : KeplerianElements
      Elements at the reference time (true anomaly as the anomaly).
    gp : float
      Gravitational parameter of the central body [m³/s²]
    delta_time : float
      Elapsed time since the reference time [s]. May be negative.
    newton_raphson : NewtonRaphson, optional
      Solver used for Kepler's equation.

  Output:
  -------
    coe : KeplerianElements
      Elements at the reference time plus delta_time. sma, ecc, inc, raan and
      aop are returned unchanged; only ta differs.

  Raises:
  -------
    DegenerateOrbit
      For parabolic or otherwise unrepresentable elements.
    SolverError
      If Kepler's equation cannot be solved.
  """
  gp  = validate_gp(gp)
  coe = OrbitConverter.validate_coe(coe)
  delta_time = float(delta_time)
  if not np.isfinite(delta_time):
    raise ValueError(f"Elapsed time must be finite, received delta_time = {delta_time}")

  mean_motion = OrbitConverter.coe_to_mean_motion(coe, gp)
  ma_o        = OrbitConverter.ta_to_ma(coe.ta, coe.ecc)

  if coe.ecc < 1.0:
    ma = wrap_to_two_pi(ma_o + mean_motion * delta_time)
    ea = solve_kepler_elliptic(ma, coe.ecc, newton_raphson)
    ta = OrbitConverter.ea_to_ta(ea, coe.ecc)
  else:
    mha = ma_o + mean_motion * delta_time
    ha  = solve_kepler_hyperbolic(mha, coe.ecc, newton_raphson)
    ta  = OrbitConverter.ha_to_ta(ha, coe.ecc)

  return coe._replace(ta=ta)


def propagate_state(
  state          : np.ndarray,
  gp             : float,
  delta_time     : float,
  newton_raphson : Optional[NewtonRaphson] = None,
) -> np.ndarray:
  """
  Cartesian to Cartesian two-body propagation.

  Input:
  ------
    state : np.ndarray
      Initial state [x, y, z, vx, vy, vz] [m, m/s]
    gp : float
      Gravitational parameter [m³/s²]
    delta_time : float
      Elapsed time [s]

  Output:
  -------
    state : np.ndarray
      State after delta_time [m, m/s]
  """
  state = validate_state(state)
  coe_o = OrbitConverter.state_to_coe(state, gp)
  coe   = propagate_keplerian_elements(coe_o, gp, delta_time, newton_raphson)
  return OrbitConverter.coe_to_state(coe, gp)
