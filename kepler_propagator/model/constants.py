import numpy as np


class CONVERTER:
  # Angle Conversions
  RAD_PER_DEG = 3.141592653589793 / 180.0  # [radian] per [degree]
  DEG_PER_RAD = 180.0 / 3.141592653589793  # [degree] per [radian]

  # Time Conversions
  SEC_PER_HOUR = 3600                      # [seconds] per [hour]

  # Distance Conversions
  M_PER_KM = 1000.0                        # [meters] per [kilometer]
  KM_PER_M = 1.0 / 1000.0                  # [kilometers] per [meter]


class NUMERICS:
  """
  Thresholds shared by the element conversions and the Kepler solvers.
  """
  EPS_ANGULAR_MOMENTUM = 1e-12  # relative to |r||v|, below this the motion is rectilinear
  EPS_ECCENTRICITY     = 1e-11  # below this the orbit is treated as circular
  EPS_INCLINATION      = 1e-11  # node-line magnitude relative to |h|, below this the orbit is equatorial
  EPS_PARABOLIC        = 1e-10  # |ecc - 1| below this is parabolic
  HIGH_ECCENTRICITY    = 0.8    # initial guess for Kepler's equation switches from M to pi

  KEPLER_TOLERANCE      = 1e-12
  KEPLER_MAX_ITERATIONS = 50


class SOLARSYSTEMCONSTANTS:
  """
  Gravitational parameters [m³/s²] and equatorial radii [m] of the bodies
  that can be used as predefined central bodies.
  """

  class SUN:
    class RADIUS:
      EQUATOR = 696340000.0                 # Sun's equatorial radius [m]
    GP = 1.32712440018e20                   # Sun's gravitational parameter [m³/s²]

  class MERCURY:
    class RADIUS:
      EQUATOR = 2439700.0                   # Mercury's equatorial radius [m]
    GP = 2.2032e13                          # Mercury's gravitational parameter [m³/s²]

  class VENUS:
    class RADIUS:
      EQUATOR = 6051800.0                   # Venus's equatorial radius [m]
    GP = 3.2485859e14                       # Venus's gravitational parameter [m³/s²]

  class EARTH:
    class RADIUS:
      EQUATOR = 6378137.0                   # Earth's WGS84 equatorial radius [m]
    GP = 3.986004418e14                     # Earth's gravitational parameter [m³/s²]

  class MOON:
    class RADIUS:
      EQUATOR = 1737400.0                   # Moon's equatorial radius [m]
    GP = 4.9048695e12                       # Moon's gravitational parameter [m³/s²]

  class MARS:
    class RADIUS:
      EQUATOR = 3397200.0                   # Mars's equatorial radius [m]
    GP = 4.28283e13                         # Mars's gravitational parameter [m³/s²]

  class JUPITER:
    class RADIUS:
      EQUATOR = 71492000.0                  # Jupiter's equatorial radius [m]
    GP = 1.2671277e17                       # Jupiter's gravitational parameter [m³/s²]

  class SATURN:
    class RADIUS:
      EQUATOR = 60268000.0                  # Saturn's equatorial radius [m]
    GP = 3.79406e16                         # Saturn's gravitational parameter [m³/s²]

  class URANUS:
    class RADIUS:
      EQUATOR = 25559000.0                  # Uranus's equatorial radius [m]
    GP = 5.79455e15                         # Uranus's gravitational parameter [m³/s²]

  class NEPTUNE:
    class RADIUS:
      EQUATOR = 24746000.0                  # Neptune's equatorial radius [m]
    GP = 6.83653e15                         # Neptune's gravitational parameter [m³/s²]

  class PLUTO:
    class RADIUS:
      EQUATOR = 1137000.0                   # Pluto's equatorial radius [m]
    GP = 9.830e11                           # Pluto's gravitational parameter [m³/s²]

  NAMES = (
    'SUN', 'MERCURY', 'VENUS', 'EARTH', 'MOON', 'MARS',
    'JUPITER', 'SATURN', 'URANUS', 'NEPTUNE', 'PLUTO',
  )


def convert_state_km_to_m(
  state : np.ndarray,
) -> np.ndarray:
  """
  Convert a state [x, y, z, vx, vy, vz] from km, km/s to m, m/s.
  """
  return np.asarray(state, dtype=float) * CONVERTER.M_PER_KM


def convert_state_m_to_km(
  state : np.ndarray,
) -> np.ndarray:
  """
  Convert a state [x, y, z, vx, vy, vz] from m, m/s to km, km/s.
  """
  return np.asarray(state, dtype=float) * CONVERTER.KM_PER_M
