import yaml
import numpy as np

from pathlib import Path
from typing  import Optional

from kepler_propagator.model.constants      import CONVERTER
from kepler_propagator.propagation.history  import PropagationHistory


def parse_vec3(
  raw_val,
  key : str = 'vector',
) -> np.ndarray:
  """
  Parse a 3-vector given as a list [x, y, z] or a string "x, y, z".

  Input:
  ------
    raw_val : list | tuple | str
      Raw YAML value.
    key : str
      YAML key, used in error messages.

  Output:
  -------
    vec : np.ndarray
      Vector of shape (3,).
  """
  if isinstance(raw_val, str):
    clean = raw_val.replace('[', '').replace(']', '')
    try:
      vec = np.array([float(x.strip()) for x in clean.split(',')])
    except ValueError as exc:
      raise ValueError(f"Could not parse '{key}': {raw_val!r}") from exc
  elif isinstance(raw_val, (list, tuple)):
    vec = np.array([float(x) for x in raw_val])
  else:
    raise ValueError(f"Unknown format for '{key}': {raw_val!r}")

  if vec.shape != (3,):
    raise ValueError(f"'{key}' must have 3 components, received {vec.size}")
  return vec


def load_scenario(
  scenario_filepath : Path,
) -> dict:
  """
  Load a scenario YAML file.

  Input:
  ------
    scenario_filepath : Path
      Path to the scenario file.

  Output:
  -------
    scenario : dict
      Raw scenario mapping.

  Raises:
  -------
    FileNotFoundError
      If the file does not exist.
    ValueError
      If the file does not hold a mapping with 'central_bodies' and 'bodies'.
  """
  scenario_filepath = Path(scenario_filepath)
  if not scenario_filepath.exists():
    raise FileNotFoundError(f"Scenario file not found: {scenario_filepath}")

  with open(scenario_filepath, 'r') as f:
    scenario = yaml.safe_load(f)

  if not isinstance(scenario, dict):
    raise ValueError(f"Scenario file {scenario_filepath} must contain a mapping")
  for key in ('central_bodies', 'bodies'):
    if not isinstance(scenario.get(key), dict) or not scenario[key]:
      raise ValueError(f"Scenario file {scenario_filepath} must contain a non-empty '{key}' mapping")

  scenario.setdefault('name', scenario_filepath.stem)
  return scenario


def parse_central_body(
  name     : str,
  raw_body : dict,
) -> dict:
  """
  Normalize one 'central_bodies' entry to {'name', 'predefined'} or {'name', 'gp', 'radius'}.
  """
  if not isinstance(raw_body, dict):
    raise ValueError(f"Central body '{name}' must be a mapping")

  if 'predefined' in raw_body:
    return {'name': name, 'predefined': str(raw_body['predefined'])}
  if 'gp__m3_per_s2' in raw_body:
    radius = raw_body.get('radius__m')
    return {
      'name'   : name,
      'gp'     : float(raw_body['gp__m3_per_s2']),
      'radius' : None if radius is None else float(radius),
    }
  if 'gp__km3_per_s2' in raw_body:
    radius = raw_body.get('radius__km')
    return {
      'name'   : name,
      'gp'     : float(raw_body['gp__km3_per_s2']) * CONVERTER.M_PER_KM**3,
      'radius' : None if radius is None else float(radius) * CONVERTER.M_PER_KM,
    }
  raise ValueError(f"Central body '{name}' must define 'predefined', 'gp__m3_per_s2' or 'gp__km3_per_s2'")


def parse_body(
  name     : str,
  raw_body : dict,
) -> dict:
  """
  Normalize one 'bodies' entry.

  Input:
  ------
    name : str
      Body name.
    raw_body : dict
      Mapping with 'central_body' and one of:
        - 'state__m_m_per_s'                      : 6 values [m, m/s]
        - 'pos_vec__m'  and 'vel_vec__m_per_s'    : [m], [m/s]
        - 'pos_vec__km' and 'vel_vec__km_per_s'   : [km], [km/s]
      plus an optional 'epoch__s'.

  Output:
  -------
    body : dict
      {'name', 'central_body', 'state' (SI, shape (6,)), 'epoch'}
  """
  if not isinstance(raw_body, dict):
    raise ValueError(f"Body '{name}' must be a mapping")
  if 'central_body' not in raw_body:
    raise ValueError(f"Body '{name}' must define 'central_body'")

  if 'state__m_m_per_s' in raw_body:
    raw_state = raw_body['state__m_m_per_s']
    if isinstance(raw_state, str):
      raw_state = raw_state.replace('[', '').replace(']', '').split(',')
    state = np.array([float(x) for x in raw_state])
    if state.shape != (6,):
      raise ValueError(f"'state__m_m_per_s' of body '{name}' must have 6 components, received {state.size}")
  elif 'pos_vec__m' in raw_body and 'vel_vec__m_per_s' in raw_body:
    state = np.concatenate((
      parse_vec3(raw_body['pos_vec__m'],       'pos_vec__m'),
      parse_vec3(raw_body['vel_vec__m_per_s'], 'vel_vec__m_per_s'),
    ))
  elif 'pos_vec__km' in raw_body and 'vel_vec__km_per_s' in raw_body:
    state = np.concatenate((
      parse_vec3(raw_body['pos_vec__km'],       'pos_vec__km'),
      parse_vec3(raw_body['vel_vec__km_per_s'], 'vel_vec__km_per_s'),
    )) * CONVERTER.M_PER_KM
  else:
    raise ValueError(
      f"Body '{name}' must contain 'state__m_m_per_s', 'pos_vec__m'/'vel_vec__m_per_s' "
      f"or 'pos_vec__km'/'vel_vec__km_per_s'"
    )

  epoch = raw_body.get('epoch__s')
  return {
    'name'         : name,
    'central_body' : str(raw_body['central_body']),
    'state'        : state,
    'epoch'        : None if epoch is None else float(epoch),
  }


def write_propagation_history(
  history  : PropagationHistory,
  filepath : Path,
  header   : Optional[str] = None,
) -> Path:
  """
  Write a history as whitespace-separated columns: time x y z vx vy vz.

  Input:
  ------
    history : PropagationHistory
      History to write.
    filepath : Path
      Output file.
    header : str, optional
      Extra header line placed above the column names.

  Output:
  -------
    filepath : Path
      Path of the written file.
  """
  filepath = Path(filepath)
  columns  = "time__s x__m y__m z__m vx__m_per_s vy__m_per_s vz__m_per_s"
  header   = columns if header is None else f"{header}\n{columns}"
  data     = np.column_stack((history.times, history.states.T)) if len(history) else np.zeros((0, 7))
  np.savetxt(filepath, data, fmt='%.17e', header=header)
  return filepath


def read_propagation_history(
  filepath : Path,
) -> PropagationHistory:
  """
  Read a history written by write_propagation_history().
  """
  filepath = Path(filepath)
  if not filepath.exists():
    raise FileNotFoundError(f"History file not found: {filepath}")
  data = np.loadtxt(filepath, ndmin=2)
  if data.size == 0:
    history = PropagationHistory()
    history.freeze()
    return history
  if data.shape[1] != 7:
    raise ValueError(f"History file {filepath} must have 7 columns, found {data.shape[1]}")
  return PropagationHistory.from_arrays(data[:, 0], data[:, 1:7].T)
