import os
import numpy as np

from pathlib  import Path
from datetime import datetime
from types    import SimpleNamespace
from typing   import Optional

from kepler_propagator.input.loader            import load_scenario, parse_body, parse_central_body
from kepler_propagator.model.bodies            import Body, CentralBody
from kepler_propagator.model.constants         import NUMERICS
from kepler_propagator.model.root_solvers      import NewtonRaphson
from kepler_propagator.propagation.propagator  import KeplerPropagator


def print_input_configuration(
  config : SimpleNamespace,
) -> None:
  """
  Print the input configuration in a formatted table.

  Input:
  ------
    config : SimpleNamespace
      Configuration object from build_config().
  """
  defaults = {
    'scenario'          : None,
    'timespan'          : None,
    'output_interval'   : None,
    'max_workers'       : 1,
    'tolerance'         : NUMERICS.KEPLER_TOLERANCE,
    'max_iterations'    : NUMERICS.KEPLER_MAX_ITERATIONS,
    'compare_numerical' : False,
    'plot'              : False,
  }

  timespan_str = f"{config.time_o} {config.time_f}"

  # Build configuration entries: (name, value, default, user_set)
  entries = [
    ('scenario',          config.scenario_name,     defaults['scenario'],          True),
    ('timespan',          timespan_str,             defaults['timespan'],          config.timespan_overridden),
    ('output_interval',   config.output_interval,   defaults['output_interval'],   config.output_interval_overridden),
    ('max_workers',       config.max_workers,       defaults['max_workers'],       config.max_workers       != defaults['max_workers']),
    ('tolerance',         config.tolerance,         defaults['tolerance'],         config.tolerance         != defaults['tolerance']),
    ('max_iterations',    config.max_iterations,    defaults['max_iterations'],    config.max_iterations    != defaults['max_iterations']),
    ('compare_numerical', config.compare_numerical, defaults['compare_numerical'], config.compare_numerical != defaults['compare_numerical']),
    ('plot',              config.plot,              defaults['plot'],              config.plot              != defaults['plot']),
  ]

  headers = ['Argument', 'Value', 'Default', 'User Set']
  rows = []
  for name, value, default, user_set in entries:
    rows.append([
      name,
      str(value) if value is not None else "None",
      str(default) if default is not None else "(scenario)",
      str(user_set),
    ])

  # Column widths: max of header and all values, plus 4 for spacing
  min_spacing = 4
  col_widths = []
  for col_idx in range(len(headers)):
    max_len = len(headers[col_idx])
    for row in rows:
      max_len = max(max_len, len(row[col_idx]))
    col_widths.append(max_len + min_spacing)

  print("\nInput Configuration")
  print("  " + "".join(h.ljust(col_widths[i]) for i, h in enumerate(headers)))
  print("  " + "".join(("-" * (col_widths[i] - min_spacing)).ljust(col_widths[i]) for i in range(len(headers))))
  for row in rows:
    print("  " + "".join(row[col_idx].ljust(col_widths[col_idx]) for col_idx in range(len(row))))


def print_paths(
  config : SimpleNamespace,
) -> None:
  print("\nPaths and Files Setup")
  print(f"  Output Folderpath          : {config.output_folderpath}")
  print(f"    Timestamp Folderpath     : <output_folderpath>/{config.timestamp_folderpath.relative_to(config.output_folderpath)}")
  print(f"    Figures Folderpath       : <output_folderpath>/{config.figures_folderpath.relative_to(config.output_folderpath)}")
  print(f"    Files Folderpath         : <output_folderpath>/{config.files_folderpath.relative_to(config.output_folderpath)}")
  print(f"    Log Filepath             : <output_folderpath>/{config.log_filepath.relative_to(config.output_folderpath)}")
  print(f"  Scenario Filepath          : {config.scenario_filepath}")


def print_bodies(
  config : SimpleNamespace,
) -> None:
  print("\nBodies")
  for body in config.bodies:
    central_body = config.central_bodies[body['central_body']]
    state        = body['state']
    epoch_str    = "interval start" if body['epoch'] is None else f"{body['epoch']:.6f} s"
    print(f"  {body['name']}")
    print(f"    Central Body : {central_body.name} (gp = {central_body.gp:.12e} m³/s²)")
    print(f"    Epoch        : {epoch_str}")
    print(f"    Position     : {state[0]:>19.12e}  {state[1]:>19.12e}  {state[2]:>19.12e} m")
    print(f"    Velocity     : {state[3]:>19.12e}  {state[4]:>19.12e}  {state[5]:>19.12e} m/s")


def print_configuration(
  config : SimpleNamespace,
) -> None:
  """
  Print the complete configuration (input arguments, paths and bodies).
  """
  print_input_configuration(config)
  print_paths(config)
  print_bodies(config)


def resolve_scenario_filepath(
  scenario : str,
  scenarios_folderpath : Path,
) -> Path:
  """
  Resolve a scenario argument: an existing path is used as is; otherwise the
  name is looked up in data/scenarios, with '.yaml' appended if missing.
  """
  candidate = Path(scenario)
  if candidate.exists():
    return candidate

  filename = candidate.name if candidate.suffix in ('.yaml', '.yml') else f"{candidate.name}.yaml"
  filepath = scenarios_folderpath / filename
  if not filepath.exists():
    raise FileNotFoundError(f"Scenario file not found: {scenario} (also looked in {scenarios_folderpath})")
  return filepath


def setup_paths(
  scenario : str,
) -> dict:
  """
  Set up all required folder paths and file names for the propagation.

  Input:
  ------
    scenario : str
      Scenario file path or name of a file in data/scenarios.

  Output:
  -------
    paths : dict
      Paths to the scenario file and to the timestamped output folders.

  Notes:
  ------
    The ORBIT_PROPAGATOR_OUTPUT environment variable, when set, replaces the
    default <project_root>/output folder (used by pytest fixtures). No folder
    is created here; see create_output_folders().
  """
  project_root         = Path(__file__).parent.parent.parent
  scenarios_folderpath = project_root / 'data' / 'scenarios'
  scenario_filepath    = resolve_scenario_filepath(scenario, scenarios_folderpath)

  output_override = os.environ.get('ORBIT_PROPAGATOR_OUTPUT')
  if output_override:
    output_folderpath = Path(output_override)
  else:
    output_folderpath = project_root / 'output'

  timestamp_str        = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
  timestamp_folderpath = output_folderpath / timestamp_str
  figures_folderpath   = timestamp_folderpath / 'figures'
  files_folderpath     = timestamp_folderpath / 'files'
  log_filepath         = files_folderpath / 'output.log'

  return {
    'scenarios_folderpath' : scenarios_folderpath,
    'scenario_filepath'    : scenario_filepath,
    'output_folderpath'    : output_folderpath,
    'timestamp_folderpath' : timestamp_folderpath,
    'figures_folderpath'   : figures_folderpath,
    'files_folderpath'     : files_folderpath,
    'log_filepath'         : log_filepath,
  }


def create_output_folders(
  paths : dict,
) -> None:
  """
  Create the timestamped figures and files folders returned by setup_paths().
  """
  paths['figures_folderpath'].mkdir(parents=True, exist_ok=True)
  paths['files_folderpath'].mkdir(parents=True, exist_ok=True)


def build_config(
  scenario          : str,
  timespan          : Optional[list] = None,
  output_interval   : Optional[float] = None,
  max_workers       : int             = 1,
  tolerance         : float           = NUMERICS.KEPLER_TOLERANCE,
  max_iterations    : int             = NUMERICS.KEPLER_MAX_ITERATIONS,
  compare_numerical : bool            = False,
  plot              : bool            = False,
) -> SimpleNamespace:
  """
  Parse, validate, and set up input parameters for a propagation run.

  Input:
  ------
    scenario : str
      Scenario file path or name of a file in data/scenarios.
    timespan : list, optional
      [time_o, time_f] in seconds. Overrides the scenario 'timespan__s'.
    output_interval : float, optional
      Output interval in seconds. Overrides the scenario 'output_interval__s'.
    max_workers : int
      Number of threads used to propagate bodies.
    tolerance : float
      Newton-Raphson tolerance for Kepler's equation.
    max_iterations : int
      Newton-Raphson iteration cap.
    compare_numerical : bool
      Also integrate every body numerically and report the differences.
    plot : bool
      Save trajectory plots.

  Output:
  -------
    config : SimpleNamespace
      Configuration object with the run settings, the parsed central bodies
      and bodies, and the output paths.

  Raises:
  -------
    FileNotFoundError
      If the scenario file cannot be found.
    ValueError
      If the scenario or an override is invalid.
  """
  paths          = setup_paths(scenario)
  scenario_data  = load_scenario(paths['scenario_filepath'])
  scenario_label = str(scenario_data['name'])

  # Timespan
  timespan_overridden = timespan is not None
  if timespan is None:
    timespan = scenario_data.get('timespan__s')
  if timespan is None or len(timespan) != 2:
    raise ValueError(f"Scenario '{scenario_label}' needs 'timespan__s: [start, end]' or a --timespan override")
  time_o, time_f = float(timespan[0]), float(timespan[1])
  if not (np.isfinite(time_o) and np.isfinite(time_f)) or time_f <= time_o:
    raise ValueError(f"Timespan end must follow start, received [{time_o}, {time_f}]")

  # Output interval
  output_interval_overridden = output_interval is not None
  if output_interval is None:
    output_interval = scenario_data.get('output_interval__s')
  if output_interval is None:
    raise ValueError(f"Scenario '{scenario_label}' needs 'output_interval__s' or an --output-interval override")
  output_interval = float(output_interval)
  if not (np.isfinite(output_interval) and output_interval > 0):
    raise ValueError(f"Output interval must be positive, received {output_interval}")

  if int(max_workers) != max_workers or max_workers < 1:
    raise ValueError(f"max_workers must be a positive integer, received {max_workers}")

  # Central bodies
  central_bodies = {}
  for name, raw_body in scenario_data['central_bodies'].items():
    entry = parse_central_body(str(name), raw_body)
    if 'predefined' in entry:
      central_bodies[entry['name']] = CentralBody.predefined(entry['predefined'])
    else:
      central_bodies[entry['name']] = CentralBody(
        name   = entry['name'],
        gp     = entry['gp'],
        radius = entry['radius'],
      )

  # Bodies (names unique up to case)
  bodies      = []
  name_by_key = {}
  for name, raw_body in scenario_data['bodies'].items():
    body = parse_body(str(name), raw_body)
    key  = body['name'].casefold()
    if key in name_by_key:
      raise ValueError(f"Body names '{name_by_key[key]}' and '{body['name']}' differ only by case")
    name_by_key[key] = body['name']
    if body['central_body'] not in central_bodies:
      raise ValueError(f"Body '{body['name']}' refers to unknown central body '{body['central_body']}'")
    bodies.append(body)

  create_output_folders(paths)

  return SimpleNamespace(
    scenario_name              = scenario_label,
    time_o                     = time_o,
    time_f                     = time_f,
    timespan_overridden        = timespan_overridden,
    output_interval            = output_interval,
    output_interval_overridden = output_interval_overridden,
    max_workers                = int(max_workers),
    tolerance                  = float(tolerance),
    max_iterations             = int(max_iterations),
    compare_numerical          = compare_numerical,
    plot                       = plot,
    central_bodies             = central_bodies,
    bodies                     = bodies,
    **paths,
  )


def build_propagator(
  config  : SimpleNamespace,
  verbose : bool = False,
) -> tuple[KeplerPropagator, dict]:
  """
  Turn a configuration into a configured KeplerPropagator.

  Output:
  -------
    propagator : KeplerPropagator
      Driver in the CONFIGURED state.
    bodies : dict
      Body objects keyed by name.
  """
  propagator = KeplerPropagator(
    newton_raphson = NewtonRaphson(tol=config.tolerance, max_iter=config.max_iterations),
    max_workers    = config.max_workers,
    verbose        = verbose,
  )
  propagator.set_propagation_interval_start(config.time_o)
  propagator.set_propagation_interval_end(config.time_f)
  propagator.set_fixed_output_interval(config.output_interval)

  bodies = {}
  for entry in config.bodies:
    body = Body(entry['name'])
    propagator.add_body(body)
    propagator.set_central_body(body, config.central_bodies[entry['central_body']])
    propagator.set_initial_state(body, entry['state'], entry['epoch'])
    bodies[entry['name']] = body

  return propagator, bodies
