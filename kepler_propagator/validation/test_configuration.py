"""
Unit Tests for Input, Output and Logging
========================================

Tests for scenario loading, configuration building, history files, the
PropagationHistory container and the terminal logger.

Tests:
------
TestScenarioLoader
  - test_parse_vec3_formats               : verify list and string vectors
  - test_parse_vec3_invalid               : verify malformed vectors raise ValueError
  - test_parse_body_units                 : verify km, m and full-state inputs in SI
  - test_state_unit_conversion           : verify m to km and km to m state conversion
  - test_parse_body_missing_state         : verify a body without a state raises
  - test_parse_central_body               : verify predefined and custom central bodies
  - test_load_scenario_errors             : verify missing files and malformed content
  - test_scenario_name_defaults_to_file_stem : verify an unnamed scenario takes the file name

TestConfiguration
  - test_build_config_from_scenario       : verify values taken from the scenario file
  - test_build_config_unknown_central_body : verify bodies must refer to a known central body
  - test_build_config_case_colliding_names : verify body names differing only by case raise
  - test_invalid_scenario_creates_no_folders : verify no output folder is left by a rejected scenario
  - test_build_config_invalid_overrides   : verify timespan/output interval validation
  - test_build_propagator                 : verify the propagator is configured from the config
  - test_print_configuration              : verify the configuration report

TestPropagationHistory
  - test_mapping_interface                : verify keys, lookup, iteration and length
  - test_keys_strictly_increasing         : verify out-of-order samples raise
  - test_states_are_copies                : verify stored states are read-only copies
  - test_from_arrays_shape_check          : verify shape validation
  - test_file_round_trip                  : verify write/read of history files

TestLogger
  - test_log_captures_stdout_and_stderr   : verify both streams reach the log file
  - test_stop_logging_restores_streams    : verify original streams restored, twice-safe
  - test_context_manager                  : verify with-statement usage

Usage:
------
  python -m pytest kepler_propagator/validation/test_configuration.py -v
"""
import sys
import pytest
import numpy as np

from kepler_propagator.input.configuration  import build_config, build_propagator, print_configuration
from kepler_propagator.input.loader         import parse_vec3, parse_body, parse_central_body, load_scenario, write_propagation_history, read_propagation_history
from kepler_propagator.model.bodies         import CentralBody
from kepler_propagator.model.constants      import SOLARSYSTEMCONSTANTS, convert_state_km_to_m, convert_state_m_to_km
from kepler_propagator.propagation          import PropagationHistory, PropagatorStatus
from kepler_propagator.utility.logger       import start_logging, stop_logging


SCENARIO_TEMPLATE = """
name: {name}
timespan__s: [0.0, 3600.0]
output_interval__s: 600.0
central_bodies:
  earth:
    predefined: earth
bodies:
  sat:
    central_body: {central_body}
    pos_vec__km: [7000.0, 0.0, 0.0]
    vel_vec__km_per_s: [0.0, 7.5, 0.0]
"""


@pytest.fixture
def scenario_file(tmp_path):
  """Write a one-body scenario file and return its path."""
  def _write(name='custom', central_body='earth'):
    filepath = tmp_path / f"{name}.yaml"
    filepath.write_text(SCENARIO_TEMPLATE.format(name=name, central_body=central_body))
    return filepath
  return _write


class TestScenarioLoader:
  """
  Tests for the YAML scenario parsing helpers.
  """

  def test_parse_vec3_formats(self):
    """
    Test vectors given as lists and as comma-separated strings.
    """
    assert np.array_equal(parse_vec3([1, 2, 3]),        [1.0, 2.0, 3.0])
    assert np.array_equal(parse_vec3("1.5, -2, 3e3"),    [1.5, -2.0, 3000.0])
    assert np.array_equal(parse_vec3("[1.0, 2.0, 3.0]"), [1.0, 2.0, 3.0])

  @pytest.mark.parametrize("raw_val", [[1.0, 2.0], "1.0, 2.0, 3.0, 4.0", "a, b, c", 42])
  def test_parse_vec3_invalid(self, raw_val):
    """
    Test that malformed vectors raise ValueError.
    """
    with pytest.raises(ValueError):
      parse_vec3(raw_val, 'pos_vec__m')

  def test_parse_body_units(self):
    """
    Test that every supported state format is returned in SI units.
    """
    expected = np.array([7000e3, 0.0, 0.0, 0.0, 7.5e3, 0.0])

    body_km = parse_body('a', {'central_body': 'earth', 'pos_vec__km': [7000.0, 0.0, 0.0], 'vel_vec__km_per_s': [0.0, 7.5, 0.0]})
    body_m  = parse_body('b', {'central_body': 'earth', 'pos_vec__m': [7000e3, 0.0, 0.0], 'vel_vec__m_per_s': "0.0, 7500.0, 0.0"})
    body_sv = parse_body('c', {'central_body': 'earth', 'state__m_m_per_s': list(expected), 'epoch__s': 60})

    assert np.allclose(body_km['state'], expected)
    assert np.array_equal(body_m['state'], expected)
    assert np.array_equal(body_sv['state'], expected)
    assert body_km['epoch'] is None
    assert body_sv['epoch'] == 60.0
    assert body_sv['central_body'] == 'earth'

  def test_state_unit_conversion(self):
    """
    Test the km and m state conversions on a single state and on a 6xN array.
    """
    state_m  = np.array([7000e3, 0.0, -1000e3, 0.0, 7.5e3, 1.2e3])
    state_km = np.array([7000.0, 0.0, -1000.0, 0.0, 7.5, 1.2])

    assert np.allclose(convert_state_m_to_km(state_m), state_km)
    assert np.allclose(convert_state_km_to_m(state_km), state_m)

    states_m = np.column_stack([state_m, 2 * state_m])
    assert np.allclose(convert_state_m_to_km(states_m), np.column_stack([state_km, 2 * state_km]))

  def test_parse_body_missing_state(self):
    """
    Test that a body needs a central body and a complete state.
    """
    with pytest.raises(ValueError, match="central_body"):
      parse_body('a', {'pos_vec__m': [1.0, 0.0, 0.0], 'vel_vec__m_per_s': [0.0, 1.0, 0.0]})
    with pytest.raises(ValueError):
      parse_body('a', {'central_body': 'earth', 'pos_vec__m': [1.0, 0.0, 0.0]})
    with pytest.raises(ValueError):
      parse_body('a', {'central_body': 'earth', 'state__m_m_per_s': [1.0, 0.0, 0.0, 0.0, 1.0]})

  def test_parse_central_body(self):
    """
    Test predefined and custom central bodies in both unit systems.
    """
    assert parse_central_body('earth', {'predefined': 'earth'}) == {'name': 'earth', 'predefined': 'earth'}

    custom_m = parse_central_body('mars', {'gp__m3_per_s2': 4.28283e13, 'radius__m': 3397200.0})
    assert custom_m['gp']     == 4.28283e13
    assert custom_m['radius'] == 3397200.0

    custom_km = parse_central_body('mars', {'gp__km3_per_s2': 42828.3})
    assert np.isclose(custom_km['gp'], 4.28283e13, rtol=1e-12)
    assert custom_km['radius'] is None

    with pytest.raises(ValueError):
      parse_central_body('mystery', {'mass__kg': 1.0})

  def test_load_scenario_errors(self, tmp_path):
    """
    Test missing files and files without the required sections.
    """
    with pytest.raises(FileNotFoundError):
      load_scenario(tmp_path / 'missing.yaml')

    not_mapping = tmp_path / 'list.yaml'
    not_mapping.write_text("- 1\n- 2\n")
    with pytest.raises(ValueError):
      load_scenario(not_mapping)

    no_bodies = tmp_path / 'no_bodies.yaml'
    no_bodies.write_text("central_bodies:\n  earth:\n    predefined: earth\n")
    with pytest.raises(ValueError, match="bodies"):
      load_scenario(no_bodies)

  def test_scenario_name_defaults_to_file_stem(self, tmp_path):
    """
    Test that a scenario without a name is named after its file.
    """
    filepath = tmp_path / 'unnamed.yaml'
    filepath.write_text(SCENARIO_TEMPLATE.replace("name: {name}\n", "").format(central_body='earth'))
    assert load_scenario(filepath)['name'] == 'unnamed'


class TestConfiguration:
  """
  Tests for build_config() and build_propagator().
  """

  def test_build_config_from_scenario(self, output_root, scenario_file):
    """
    Test that the configuration holds the scenario values in SI units.
    """
    config = build_config(str(scenario_file('custom')))

    assert config.scenario_name == 'custom'
    assert config.time_o == 0.0
    assert config.time_f == 3600.0
    assert config.output_interval == 600.0
    assert not config.timespan_overridden
    assert not config.output_interval_overridden
    assert config.central_bodies['earth'] == CentralBody.predefined('earth')
    assert np.allclose(config.bodies[0]['state'], [7000e3, 0.0, 0.0, 0.0, 7.5e3, 0.0])
    assert config.files_folderpath.is_dir()
    assert config.figures_folderpath.is_dir()
    assert config.log_filepath.parent == config.files_folderpath

  def test_build_config_unknown_central_body(self, output_root, scenario_file):
    """
    Test that a body must refer to a central body of the scenario.
    """
    with pytest.raises(ValueError, match="unknown central body"):
      build_config(str(scenario_file('bad', central_body='jupiter')))

  def test_build_config_case_colliding_names(self, output_root, tmp_path):
    """
    Test that two bodies whose names differ only by case are rejected.
    """
    filepath = tmp_path / 'twins.yaml'
    filepath.write_text(SCENARIO_TEMPLATE.format(name='twins', central_body='earth') + (
      "  Sat:\n"
      "    central_body: earth\n"
      "    pos_vec__km: [8000.0, 0.0, 0.0]\n"
      "    vel_vec__km_per_s: [0.0, 7.0, 0.0]\n"
    ))
    with pytest.raises(ValueError, match="differ only by case"):
      build_config(str(filepath))

  def test_invalid_scenario_creates_no_folders(self, output_root, scenario_file):
    """
    Test that a scenario rejected during validation leaves no output folders behind.
    """
    with pytest.raises(ValueError):
      build_config(str(scenario_file('bad', central_body='jupiter')))
    with pytest.raises(ValueError):
      build_config(str(scenario_file('custom')), output_interval=0.0)
    assert not output_root.exists() or not any(output_root.iterdir())

  @pytest.mark.parametrize("overrides", [
    {'timespan': [100.0, 100.0]},
    {'timespan': [100.0, 0.0]},
    {'output_interval': 0.0},
    {'output_interval': -10.0},
    {'max_workers': 0},
  ])
  def test_build_config_invalid_overrides(self, output_root, scenario_file, overrides):
    """
    Test that invalid command-line overrides raise ValueError.
    """
    with pytest.raises(ValueError):
      build_config(str(scenario_file('custom')), **overrides)

  def test_build_propagator(self, output_root, scenario_file):
    """
    Test that build_propagator() returns a configured driver.
    """
    config = build_config(str(scenario_file('custom')), output_interval=300.0, tolerance=1e-10, max_iterations=20)
    propagator, bodies = build_propagator(config)

    assert propagator.status is PropagatorStatus.CONFIGURED
    assert list(bodies) == ['sat']
    assert propagator.get_fixed_output_interval() == 300.0
    assert propagator.get_newton_raphson().tol      == 1e-10
    assert propagator.get_newton_raphson().max_iter == 20
    assert propagator.get_central_body(bodies['sat']).gp == SOLARSYSTEMCONSTANTS.EARTH.GP

  def test_print_configuration(self, output_root, scenario_file, capsys):
    """
    Test that the configuration report lists arguments, paths and bodies.
    """
    config = build_config(str(scenario_file('custom')), max_workers=3)
    print_configuration(config)

    out = capsys.readouterr().out
    assert "Input Configuration" in out
    assert "max_workers"         in out
    assert "Paths and Files Setup" in out
    assert "sat"                 in out


class TestPropagationHistory:
  """
  Tests for the PropagationHistory mapping.
  """

  def test_mapping_interface(self):
    """
    Test the read-only mapping behaviour.
    """
    history = PropagationHistory()
    for k in range(4):
      history.append(60.0 * k, np.full(6, float(k)))

    assert len(history) == 4
    assert list(history) == [0.0, 60.0, 120.0, 180.0]
    assert 120.0 in history
    assert 90.0 not in history
    assert np.array_equal(history[120.0], np.full(6, 2.0))
    assert history.states.shape == (6, 4)
    assert np.array_equal(history.final_state, np.full(6, 3.0))
    with pytest.raises(KeyError):
      history[90.0]

  def test_keys_strictly_increasing(self):
    """
    Test that samples must be appended in increasing time order.
    """
    history = PropagationHistory()
    history.append(10.0, np.zeros(6))
    with pytest.raises(ValueError):
      history.append(10.0, np.zeros(6))
    with pytest.raises(ValueError):
      history.append(5.0, np.zeros(6))

  def test_states_are_copies(self):
    """
    Test that stored states do not alias the appended arrays.
    """
    state   = np.arange(6, dtype=float)
    history = PropagationHistory()
    history.append(0.0, state)
    state[0] = 100.0

    assert history[0.0][0] == 0.0
    with pytest.raises(ValueError):
      history[0.0][1] = 5.0

  def test_from_arrays_shape_check(self):
    """
    Test shape validation of from_arrays().
    """
    with pytest.raises(ValueError):
      PropagationHistory.from_arrays(np.arange(3.0), np.zeros((6, 4)))
    with pytest.raises(ValueError):
      PropagationHistory.from_arrays(np.arange(3.0), np.zeros((3, 3)))

    empty = PropagationHistory()
    assert empty.states.shape == (6, 0)
    with pytest.raises(IndexError):
      empty.final_state

  def test_file_round_trip(self, tmp_path, benchmark_propagator):
    """
    Test that a written history is read back exactly.
    """
    propagator, body = benchmark_propagator
    propagator.propagate()
    history = propagator.get_propagation_history_at_fixed_output_intervals(body)

    filepath = write_propagation_history(history, tmp_path / 'asterix_history.txt', header="body: asterix")
    assert filepath.read_text().startswith("# body: asterix")

    restored = read_propagation_history(filepath)
    assert restored.frozen
    assert np.array_equal(restored.times,  history.times)
    assert np.array_equal(restored.states, history.states)

    with pytest.raises(FileNotFoundError):
      read_propagation_history(tmp_path / 'missing.txt')


class TestLogger:
  """
  Tests for the terminal output logger.
  """

  def test_log_captures_stdout_and_stderr(self, tmp_path):
    """
    Test that both streams are written to the log file.
    """
    log_filepath = tmp_path / 'output.log'
    context = start_logging(log_filepath)
    try:
      print("to stdout")
      print("to stderr", file=sys.stderr)
    finally:
      stop_logging(context)

    log_text = log_filepath.read_text()
    assert "to stdout" in log_text
    assert "to stderr" in log_text

  def test_stop_logging_restores_streams(self, tmp_path):
    """
    Test that the original streams are restored and that stopping twice is safe.
    """
    original_stdout = sys.stdout
    original_stderr = sys.stderr

    context = start_logging(tmp_path / 'output.log')
    assert sys.stdout is not original_stdout
    stop_logging(context)
    stop_logging(context)
    stop_logging(None)

    assert sys.stdout is original_stdout
    assert sys.stderr is original_stderr
    assert context.log_file.closed

  def test_context_manager(self, tmp_path):
    """
    Test the logger as a context manager.
    """
    original_stdout = sys.stdout
    log_filepath    = tmp_path / 'output.log'
    with start_logging(log_filepath) as context:
      print("inside")
      assert context.log_filepath == log_filepath

    assert sys.stdout is original_stdout
    assert "inside" in log_filepath.read_text()
