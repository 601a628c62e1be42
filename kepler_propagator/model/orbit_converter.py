import numpy as np

from typing import NamedTuple

from kepler_propagator.model.constants import SOLARSYSTEMCONSTANTS, NUMERICS
from kepler_propagator.model.errors    import DegenerateOrbit, InvalidState


TWO_PI = 2.0 * np.pi


class KeplerianElements(NamedTuple):
  """
  Classical orbital elements of an unperturbed two-body orbit.

  The anomaly stored here is always the true anomaly. Mean, eccentric and
  hyperbolic anomalies are derived on demand with the OrbitConverter helpers.

  Attributes:
  -----------
    sma  : semi-major axis [m] (negative for hyperbolic orbits, never zero)
    ecc  : eccentricity [-] (>= 0, != 1)
    inc  : inclination [rad] in [0, pi]
    raan : right ascension of the ascending node [rad] in [0, 2 pi)
    aop  : argument of periapsis [rad] in [0, 2 pi)
    ta   : true anomaly [rad] in [0, 2 pi)
  """
  sma  : float
  ecc  : float
  inc  : float
  raan : float
  aop  : float
  ta   : float


def wrap_to_two_pi(
  angle : float,
) -> float:
  """
  Wrap an angle into [0, 2 pi).
  """
  wrapped = float(angle) % TWO_PI
  if wrapped >= TWO_PI:
    # -tiny % 2pi rounds up to exactly 2pi
    wrapped = 0.0
  return wrapped


def validate_gp(
  gp : float,
) -> float:
  gp = float(gp)
  if not (np.isfinite(gp) and gp > 0.0):
    raise ValueError(f"Gravitational parameter must be positive and finite, received gp = {gp}")
  return gp


def validate_state(
  state : np.ndarray,
) -> np.ndarray:
  """
  Return the state as a float array of shape (6,).

  Raises:
  -------
    InvalidState
      If the state does not hold exactly 6 finite values.
  """
  try:
    state = np.array(state, dtype=float).flatten()
  except (TypeError, ValueError) as exc:
    raise InvalidState(f"State is not numeric: {state!r}") from exc
  if state.shape != (6,):
    raise InvalidState(f"State must have exactly 6 components, received {state.shape[0]}")
  if not np.all(np.isfinite(state)):
    raise InvalidState(f"State components must be finite, received {state}")
  return state


class OrbitConverter:
  """
  Conversion between position/velocity and classical orbital elements.

  Supports circular, elliptical and hyperbolic orbits. Parabolic and
  rectilinear motion cannot be represented by semi-major axis and true
  anomaly, and raise DegenerateOrbit.
  """

  @staticmethod
  def pv_to_coe(
    pos_vec : np.ndarray,
    vel_vec : np.ndarray,
    gp      : float = SOLARSYSTEMCONSTANTS.EARTH.GP,
  ) -> KeplerianElements:
    """
    Convert Cartesian position and velocity vectors to classical orbital elements.

    Input:
    ------
      pos_vec : np.ndarray
        Position vector [m].
      vel_vec : np.ndarray
        Velocity vector [m/s].
      gp : float
        Gravitational parameter [m³/s²].

    Output:
    -------
      coe : KeplerianElements
        Orbital elements with the true anomaly as the anomaly.

    Notes:
    ------
      - Equatorial orbits (node line undefined): raan = 0 and the node line is
        taken along the inertial +x axis.
      - Circular orbits (periapsis undefined): aop = 0 and periapsis is taken
        on the node line, so ta is the argument of latitude (or the true
        longitude when the orbit is also equatorial).

    Source:
    -------
      Modified from
      Analytical Mechanics of Space Systems, Fourth Edition
      Hanspeter Schaub and John L. Junkins
      DOI: https://doi.org/10.2514/4.105210
    """
    gp = validate_gp(gp)
    if np.size(pos_vec) != 3 or np.size(vel_vec) != 3:
      raise InvalidState(f"Position and velocity must have 3 components each, received {np.size(pos_vec)} and {np.size(vel_vec)}")
    state   = validate_state(np.concatenate([np.ravel(pos_vec), np.ravel(vel_vec)]))
    pos_vec = state[0:3]
    vel_vec = state[3:6]

    # Orbit radius
    pos_mag = np.linalg.norm(pos_vec)
    vel_mag = np.linalg.norm(vel_vec)
    if pos_mag == 0.0:
      raise DegenerateOrbit("Position vector has zero magnitude")
    pos_dir = pos_vec / pos_mag

    # Angular momentum vector
    ang_mom_vec = np.cross(pos_vec, vel_vec)
    ang_mom_mag = np.linalg.norm(ang_mom_vec)
    if ang_mom_mag <= NUMERICS.EPS_ANGULAR_MOMENTUM * pos_mag * vel_mag or ang_mom_mag == 0.0:
      raise DegenerateOrbit("Rectilinear motion (zero angular momentum) has no orbital plane")
    ang_mom_dir = ang_mom_vec / ang_mom_mag

    # Eccentricity vector
    ecc_vec = np.cross(vel_vec, ang_mom_vec) / gp - pos_dir
    ecc_mag = np.linalg.norm(ecc_vec)
    if abs(ecc_mag - 1.0) < NUMERICS.EPS_PARABOLIC:
      raise DegenerateOrbit(f"Parabolic orbit (ecc = {ecc_mag!r}) has an infinite semi-major axis")

    # Semi-major axis from the vis-viva equation
    sma_inv = 2.0 / pos_mag - vel_mag**2 / gp
    if sma_inv == 0.0:
      raise DegenerateOrbit("Parabolic orbit (zero specific energy) has an infinite semi-major axis")
    sma = 1.0 / sma_inv

    # Inclination
    inc = float(np.arccos(np.clip(ang_mom_dir[2], -1.0, 1.0)))

    # Node line and right ascension of the ascending node
    node_vec = np.array([-ang_mom_dir[1], ang_mom_dir[0], 0.0])
    node_mag = np.linalg.norm(node_vec)
    if node_mag < NUMERICS.EPS_INCLINATION:
      raan     = 0.0
      node_dir = np.array([1.0, 0.0, 0.0])
    else:
      node_dir = node_vec / node_mag
      raan     = wrap_to_two_pi(np.arctan2(node_dir[1], node_dir[0]))

    # In-plane direction 90 deg ahead of the node line
    node_normal_dir = np.cross(ang_mom_dir, node_dir)

    # Argument of periapsis
    if ecc_mag < NUMERICS.EPS_ECCENTRICITY:
      aop           = 0.0
      periapsis_dir = node_dir
    else:
      periapsis_dir = ecc_vec / ecc_mag
      aop           = wrap_to_two_pi(np.arctan2(np.dot(periapsis_dir, node_normal_dir), np.dot(periapsis_dir, node_dir)))

    # True anomaly
    periapsis_normal_dir = np.cross(ang_mom_dir, periapsis_dir)
    ta = wrap_to_two_pi(np.arctan2(np.dot(pos_dir, periapsis_normal_dir), np.dot(pos_dir, periapsis_dir)))

    return KeplerianElements(
      sma  = float(sma),
      ecc  = float(ecc_mag),
      inc  = inc,
      raan = raan,
      aop  = aop,
      ta   = ta,
    )

  @staticmethod
  def validate_coe(
    coe : KeplerianElements,
  ) -> KeplerianElements:
    """
    Check that a set of elements describes a representable orbit.

    Raises:
    -------
      DegenerateOrbit
        For parabolic eccentricity, zero semi-major axis, or a semi-major axis
        whose sign does not match the conic (a > 0 for e < 1, a < 0 for e > 1).
      ValueError
        For non-finite values or a negative eccentricity.
    """
    coe = KeplerianElements(*(float(value) for value in coe))
    if not all(np.isfinite(value) for value in coe):
      raise ValueError(f"Orbital elements must be finite, received {coe}")
    if coe.ecc < 0.0:
      raise ValueError(f"Eccentricity must be non-negative, received ecc = {coe.ecc}")
    if coe.ecc == 1.0 or abs(coe.ecc - 1.0) < NUMERICS.EPS_PARABOLIC:
      raise DegenerateOrbit(f"Parabolic orbit (ecc = {coe.ecc!r}) cannot be represented with a finite semi-major axis")
    if coe.sma == 0.0:
      raise DegenerateOrbit("Semi-major axis must be non-zero")
    if coe.ecc < 1.0 and coe.sma < 0.0:
      raise DegenerateOrbit(f"Elliptic orbit (ecc = {coe.ecc}) requires sma > 0, received sma = {coe.sma}")
    if coe.ecc > 1.0 and coe.sma > 0.0:
      raise DegenerateOrbit(f"Hyperbolic orbit (ecc = {coe.ecc}) requires sma < 0, received sma = {coe.sma}")
    return coe

  @staticmethod
  def perifocal_to_inertial(
    raan : float,
    inc  : float,
    aop  : float,
  ) -> np.ndarray:
    """
    Rotation matrix from the perifocal frame to the inertial frame for the
    3-1-3 sequence (raan, inc, aop).

    Output:
    -------
      rot_mat : np.ndarray
        3x3 rotation matrix such that: inertial_vec = rot_mat @ perifocal_vec
    """
    cos_raan, sin_raan = np.cos(raan), np.sin(raan)
    cos_inc,  sin_inc  = np.cos(inc),  np.sin(inc)
    cos_aop,  sin_aop  = np.cos(aop),  np.sin(aop)

    return np.array([
      [ cos_raan * cos_aop - sin_raan * sin_aop * cos_inc, -cos_raan * sin_aop - sin_raan * cos_aop * cos_inc,  sin_raan * sin_inc],
      [ sin_raan * cos_aop + cos_raan * sin_aop * cos_inc, -sin_raan * sin_aop + cos_raan * cos_aop * cos_inc, -cos_raan * sin_inc],
      [                                 sin_aop * sin_inc,                                  cos_aop * sin_inc,             cos_inc],
    ])

  @staticmethod
  def coe_to_pv(
    coe : KeplerianElements,
    gp  : float = SOLARSYSTEMCONSTANTS.EARTH.GP,
  ) -> tuple[np.ndarray, np.ndarray]:
    """
    Convert classical orbital elements to position and velocity vectors.

    Input:
    ------
      coe : KeplerianElements
        sma  : semi-major axis [m]
        ecc  : eccentricity [-]
        inc  : inclination [rad]
        raan : RAAN [rad]
        aop  : argument of periapsis [rad]
        ta   : true anomaly [rad]
      gp : float
        Gravitational parameter [m³/s²]

    Output:
    -------
      pos_vec : np.ndarray
        Position vector [m]
      vel_vec : np.ndarray
        Velocity vector [m/s]

    Notes:
    ------
      Position and velocity are built in the perifocal frame and rotated to
      the inertial frame by perifocal_to_inertial().
    """
    gp  = validate_gp(gp)
    coe = OrbitConverter.validate_coe(coe)
    sma, ecc, inc, raan, aop, ta = coe

    # Semi-latus rectum (positive for both ellipses and hyperbolas)
    slr = sma * (1.0 - ecc**2)

    # Orbit radius
    denom = 1.0 + ecc * np.cos(ta)
    if denom <= 0.0:
      raise DegenerateOrbit(f"True anomaly ta = {ta} lies beyond the asymptote of the hyperbola (ecc = {ecc})")
    pos_mag = slr / denom

    # Perifocal position and velocity
    pos_vec_pf = np.array([pos_mag * np.cos(ta), pos_mag * np.sin(ta), 0.0])
    vel_vec_pf = np.sqrt(gp / slr) * np.array([-np.sin(ta), ecc + np.cos(ta), 0.0])

    # Rotate to inertial
    rot_mat = OrbitConverter.perifocal_to_inertial(raan, inc, aop)
    return rot_mat @ pos_vec_pf, rot_mat @ vel_vec_pf

  @staticmethod
  def state_to_coe(
    state : np.ndarray,
    gp    : float = SOLARSYSTEMCONSTANTS.EARTH.GP,
  ) -> KeplerianElements:
    """
    Convert a state [x, y, z, vx, vy, vz] to classical orbital elements.
    """
    state = validate_state(state)
    return OrbitConverter.pv_to_coe(state[0:3], state[3:6], gp)

  @staticmethod
  def coe_to_state(
    coe : KeplerianElements,
    gp  : float = SOLARSYSTEMCONSTANTS.EARTH.GP,
  ) -> np.ndarray:
    """
    Convert classical orbital elements to a state [x, y, z, vx, vy, vz].
    """
    pos_vec, vel_vec = OrbitConverter.coe_to_pv(coe, gp)
    return np.concatenate([pos_vec, vel_vec])

  @staticmethod
  def pv_to_specific_energy(
    pos_vec : np.ndarray,
    vel_vec : np.ndarray,
    gp      : float = SOLARSYSTEMCONSTANTS.EARTH.GP,
  ) -> float:
    """
    Calculate specific mechanical energy from Cartesian state vectors.

    Input:
    ------
      pos_vec : np.ndarray
        Position vector [m].
      vel_vec : np.ndarray
        Velocity vector [m/s].
      gp : float
        Gravitational parameter [m³/s²].

    Output:
    -------
      specific_energy : float
        Specific mechanical energy [m²/s²].
    """
    pos_vec = np.asarray(pos_vec).flatten()
    vel_vec = np.asarray(vel_vec).flatten()

    pos_mag = np.linalg.norm(pos_vec)
    vel_mag = np.linalg.norm(vel_vec)

    specific_energy = vel_mag**2 / 2.0 - gp / pos_mag
    return float(specific_energy)

  @staticmethod
  def specific_energy_to_period(
    specific_energy : float,
    gp              : float = SOLARSYSTEMCONSTANTS.EARTH.GP,
  ) -> float:
    """
    Orbital period [s] from specific mechanical energy [m²/s²].
    Returns np.inf for parabolic/hyperbolic orbits.
    """
    if specific_energy < 0:
      sma    = -gp / (2.0 * specific_energy)
      period = 2.0 * np.pi * np.sqrt(sma**3 / gp)
      return float(period)
    else:
      return np.inf

  @staticmethod
  def pv_to_period(
    pos_vec : np.ndarray,
    vel_vec : np.ndarray,
    gp      : float = SOLARSYSTEMCONSTANTS.EARTH.GP,
  ) -> float:
    """
    Orbital period [s] from Cartesian state vectors.
    Returns np.inf for parabolic/hyperbolic orbits.
    """
    specific_energy = OrbitConverter.pv_to_specific_energy(pos_vec, vel_vec, gp)
    return OrbitConverter.specific_energy_to_period(specific_energy, gp)

  @staticmethod
  def coe_to_mean_motion(
    coe : KeplerianElements,
    gp  : float = SOLARSYSTEMCONSTANTS.EARTH.GP,
  ) -> float:
    """
    Mean motion n = sqrt(gp / |a|^3) [rad/s]. Valid for ellipses and hyperbolas.
    """
    return float(np.sqrt(gp / abs(coe.sma)**3))

  @staticmethod
  def coe_to_period(
    coe : KeplerianElements,
    gp  : float = SOLARSYSTEMCONSTANTS.EARTH.GP,
  ) -> float:
    """
    Orbital period T = 2 pi sqrt(a^3 / gp) [s]. Returns np.inf for hyperbolic orbits.
    """
    if coe.ecc >= 1.0:
      return np.inf
    return float(2.0 * np.pi * np.sqrt(coe.sma**3 / gp))

  @staticmethod
  def ea_to_ta(
    ea  : float,
    ecc : float,
  ) -> float:
    """
    Maps eccentric anomaly to true anomaly for circular or elliptic orbits.

    Input:
    ------
      ea : float
        Eccentric anomaly [rad]
      ecc : float
        Eccentricity (0 <= ecc < 1)

    Output:
    -------
      ta : float
        True anomaly [rad] in [0, 2 pi)
    """
    if 0 <= ecc < 1:
      ta = 2 * np.arctan2(
        np.sqrt(1 + ecc) * np.sin(ea / 2),
        np.sqrt(1 - ecc) * np.cos(ea / 2)
      )
    else:
      raise ValueError(f"ea_to_ta() requires 0 <= ecc < 1, received ecc = {ecc}")

    return wrap_to_two_pi(ta)

  @staticmethod
  def ta_to_ea(
    ta  : float,
    ecc : float,
  ) -> float:
    """
    Maps true anomaly to eccentric anomaly for circular or elliptic orbits.

    Input:
    ------
      ta : float
        True anomaly [rad]
      ecc : float
        Eccentricity (0 <= ecc < 1)

    Output:
    -------
      ea : float
        Eccentric anomaly [rad] in [0, 2 pi)
    """
    if 0 <= ecc < 1:
      ea = 2 * np.arctan2(
        np.sqrt(1 - ecc) * np.sin(ta / 2),
        np.sqrt(1 + ecc) * np.cos(ta / 2)
      )
    else:
      raise ValueError(f"ta_to_ea() requires 0 <= ecc < 1, received ecc = {ecc}")

    return wrap_to_two_pi(ea)

  @staticmethod
  def ea_to_ma(
    ea  : float,
    ecc : float,
  ) -> float:
    """
    Maps eccentric anomaly to mean anomaly (Kepler's equation).
    """
    if 0 <= ecc < 1:
      ma = ea - ecc * np.sin(ea)
    else:
      raise ValueError(f"ea_to_ma() requires 0 <= ecc < 1, received ecc = {ecc}")

    return float(ma)

  @staticmethod
  def ma_to_ea(
    ma             : float,
    ecc            : float,
    newton_raphson = None,
  ) -> float:
    """
    Maps mean anomaly to eccentric anomaly by solving Kepler's equation.
    Alias for two_body.solve_kepler_elliptic().
    """
    from kepler_propagator.model.two_body import solve_kepler_elliptic
    return solve_kepler_elliptic(ma, ecc, newton_raphson)

  @staticmethod
  def ta_to_ha(
    ta  : float,
    ecc : float,
  ) -> float:
    """
    Maps true anomaly to hyperbolic anomaly for hyperbolic orbits.

    Input:
    ------
      ta : float
        True anomaly [rad]
      ecc : float
        Eccentricity (ecc > 1)

    Output:
    -------
      ha : float
        Hyperbolic anomaly [rad]
    """
    if ecc > 1:
      arg = np.sqrt((ecc - 1) / (ecc + 1)) * np.tan(ta / 2)
      if not abs(arg) < 1.0:
        raise DegenerateOrbit(f"True anomaly ta = {ta} lies beyond the asymptote of the hyperbola (ecc = {ecc})")
      ha = 2 * np.arctanh(arg)
    else:
      raise ValueError(f"ta_to_ha() requires ecc > 1, received ecc = {ecc}")

    return float(ha)

  @staticmethod
  def ha_to_ta(
    ha  : float,
    ecc : float,
  ) -> float:
    """
    Maps hyperbolic anomaly to true anomaly for hyperbolic orbits.

    Output:
    -------
      ta : float
        True anomaly [rad] in [0, 2 pi)
    """
    if ecc > 1:
      ta = 2 * np.arctan(
        np.sqrt((ecc + 1) / (ecc - 1)) * np.tanh(ha / 2)
      )
    else:
      raise ValueError(f"ha_to_ta() requires ecc > 1, received ecc = {ecc}")

    return wrap_to_two_pi(ta)

  @staticmethod
  def ha_to_mha(
    ha  : float,
    ecc : float,
  ) -> float:
    """
    Maps hyperbolic anomaly to mean hyperbolic anomaly (hyperbolic Kepler's equation).
    """
    if ecc > 1:
      mha = ecc * np.sinh(ha) - ha
    else:
      raise ValueError(f"ha_to_mha() requires ecc > 1, received ecc = {ecc}")

    return float(mha)

  @staticmethod
  def mha_to_ha(
    mha            : float,
    ecc            : float,
    newton_raphson = None,
  ) -> float:
    """
    Maps mean hyperbolic anomaly to hyperbolic anomaly.
    Alias for two_body.solve_kepler_hyperbolic().
    """
    from kepler_propagator.model.two_body import solve_kepler_hyperbolic
    return solve_kepler_hyperbolic(mha, ecc, newton_raphson)

  @staticmethod
  def ta_to_ma(
    ta  : float,
    ecc : float,
  ) -> float:
    """
    Maps true anomaly to mean anomaly, picking the elliptic or hyperbolic form from ecc.
    Elliptic results are wrapped into [0, 2 pi); hyperbolic results are unbounded.
    """
    if 0 <= ecc < 1:
      ea = OrbitConverter.ta_to_ea(ta, ecc)
      return wrap_to_two_pi(OrbitConverter.ea_to_ma(ea, ecc))
    elif ecc > 1:
      ha = OrbitConverter.ta_to_ha(ta, ecc)
      return OrbitConverter.ha_to_mha(ha, ecc)
    else:
      raise DegenerateOrbit(f"Mean anomaly is not defined here for parabolic orbits (ecc = {ecc})")
