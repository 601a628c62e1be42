"""
Pytest Configuration and Fixtures
=================================

Shared fixtures for all validation tests.
"""
import pytest
import numpy as np

from pathlib import Path

from kepler_propagator.model.bodies         import Body, CentralBody
from kepler_propagator.model.constants      import SOLARSYSTEMCONSTANTS, convert_state_km_to_m
from kepler_propagator.propagation          import KeplerPropagator


@pytest.fixture(scope="session")
def project_root():
  """Return the project root directory."""
  return Path(__file__).parent.parent.parent


@pytest.fixture(scope="session")
def scenarios_path(project_root):
  """Return path to the scenario files."""
  return project_root / "data" / "scenarios"


@pytest.fixture
def output_root(tmp_path, monkeypatch):
  """Redirect run output (logs, histories, figures) to a temporary folder."""
  output_folderpath = tmp_path / "output"
  monkeypatch.setenv("ORBIT_PROPAGATOR_OUTPUT", str(output_folderpath))
  return output_folderpath


@pytest.fixture
def earth():
  """Predefined Earth central body."""
  return CentralBody.predefined('earth')


@pytest.fixture
def earth_gp():
  return SOLARSYSTEMCONSTANTS.EARTH.GP


@pytest.fixture
def benchmark_initial_state():
  """Eccentric (e = 0.1, a = 7500 km) equatorial orbit at periapsis [m, m/s]."""
  return convert_state_km_to_m(np.array([
    6750.0,          # x [km]
    0.0,             # y [km]
    0.0,             # z [km]
    0.0,             # vx [km/s]
    8.0595973215,    # vy [km/s]
    0.0,             # vz [km/s]
  ]))


@pytest.fixture
def leo_initial_state():
  """Typical LEO initial state for testing."""
  return np.array([
    7000.0e3,    # x [m]
    0.0,         # y [m]
    0.0,         # z [m]
    0.0,         # vx [m/s]
    7.5e3,       # vy [m/s]
    0.0,         # vz [m/s]
  ])


@pytest.fixture
def inclined_initial_state():
  """Generic inclined, eccentric orbit with no special symmetry."""
  return np.array([
    6524.834e3,   # x [m]
    6862.875e3,   # y [m]
    6448.296e3,   # z [m]
    4.901327e3,   # vx [m/s]
    5.533756e3,   # vy [m/s]
    -1.976341e3,  # vz [m/s]
  ])


@pytest.fixture
def hyperbolic_initial_state():
  """Earth departure hyperbola at periapsis (v_inf about 4.4 km/s)."""
  return np.array([
    7000.0e3,     # x [m]
    0.0,          # y [m]
    0.0,          # z [m]
    0.0,          # vx [m/s]
    11.5e3,       # vy [m/s]
    1.0e3,        # vz [m/s]
  ])


@pytest.fixture
def benchmark_propagator(earth, benchmark_initial_state):
  """Propagator configured with the benchmark body: 0 to 86400 s, 3600 s output."""
  propagator = KeplerPropagator()
  propagator.set_propagation_interval_start(0.0)
  propagator.set_propagation_interval_end(86400.0)
  propagator.set_fixed_output_interval(3600.0)

  body = Body('asterix')
  propagator.add_body(body)
  propagator.set_central_body(body, earth)
  propagator.set_initial_state(body, benchmark_initial_state)
  return propagator, body
