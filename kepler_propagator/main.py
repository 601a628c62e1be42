"""
Kepler Orbit Propagator

Description:
  This script propagates any number of bodies, each on an unperturbed
  two-body orbit about its own central body, and samples their states at a
  fixed output interval. Every body's initial state is converted once to
  classical orbital elements, advanced in time with Kepler's equation, and
  converted back to Cartesian position and velocity.

  The script performs the following steps:
  1. Loads the scenario (central bodies, bodies, interval) from a YAML file.
  2. Propagates every body with the analytic Kepler propagator.
  3. Writes each body's history to the output files folder.
  4. Optionally integrates the two-body equations numerically for comparison.
  5. Optionally generates and saves plots.

Usage:

  Argument                     Required   Description
  ---------------------------  --------   --------------------------------------------------
  --scenario                   Yes        Scenario .yaml file or name in data/scenarios
  --timespan                   No         Start and end of the interval [s]
  --output-interval            No         Fixed output interval [s]
  --max-workers                No         Threads used to propagate bodies
  --tolerance                  No         Newton-Raphson tolerance
  --max-iterations             No         Newton-Raphson iteration cap
  --compare-numerical          No         Compare with numerical integration
  --plot                       No         Save plots
  --no-log                     No         Do not write output.log

  Example Commands:
    python -m kepler_propagator.main \
      --scenario asterix_earth

    python -m kepler_propagator.main \
      --scenario constellation \
      --timespan 0 172800 \
      --output-interval 600 \
      --max-workers 4 \
      --compare-numerical \
      --plot
"""
import sys

from pathlib import Path
from typing  import Optional

from kepler_propagator.input.cli               import parse_command_line_arguments
from kepler_propagator.input.configuration     import build_config, build_propagator, print_configuration
from kepler_propagator.input.loader            import write_propagation_history
from kepler_propagator.model.constants         import NUMERICS
from kepler_propagator.model.errors            import KeplerPropagatorError
from kepler_propagator.propagation.history     import PropagationHistory
from kepler_propagator.propagation.numerical   import propagate_state_numerical_integration
from kepler_propagator.utility.logger          import start_logging, stop_logging
from kepler_propagator.utility.printer         import print_results_summary, print_comparison_summary
from kepler_propagator.validation.metrics      import compare_histories


def compare_with_numerical_integration(
  results : dict,
) -> dict:
  """
  Integrate every successfully propagated body numerically from its first
  sample and compare the two histories.

  Output:
  -------
    comparisons : dict
      compare_histories() output keyed by body name.
  """
  comparisons = {}
  for name, result in results.items():
    history = result['history']
    if not result['success'] or len(history) < 2:
      continue
    result_numerical = propagate_state_numerical_integration(
      initial_state = history.states[:, 0],
      gp            = result['central_body'].gp,
      time_eval     = history.times,
    )
    if not result_numerical['success']:
      print(f"  [WARNING] Numerical integration of '{name}' failed: {result_numerical['message']}")
      continue
    reference = PropagationHistory.from_arrays(result_numerical['time'], result_numerical['state'])
    comparisons[name] = compare_histories(history, reference)
  return comparisons


def write_histories(
  results          : dict,
  files_folderpath : Path,
) -> dict:
  """
  Write the history of every body that produced samples.
  """
  print("\nWrite Propagation Histories")
  filepaths = {}
  for name, result in results.items():
    if len(result['history']) == 0:
      continue
    filepath = write_propagation_history(
      result['history'],
      files_folderpath / f"{name}_history.txt",
      header = f"body: {name}  central_body: {result['central_body'].name}",
    )
    filepaths[name] = filepath
    print(f"  {name} : <files_folderpath>/{filepath.name}")
  return filepaths


def main(
  scenario          : str,
  timespan          : Optional[list]  = None,
  output_interval   : Optional[float] = None,
  max_workers       : int             = 1,
  tolerance         : float           = NUMERICS.KEPLER_TOLERANCE,
  max_iterations    : int             = NUMERICS.KEPLER_MAX_ITERATIONS,
  compare_numerical : bool            = False,
  plot              : bool            = False,
  enable_logging    : bool            = True,
) -> dict:
  """
  Main function to run a Kepler propagation scenario.

  Input:
  ------
    scenario : str
      Scenario file path or name in data/scenarios.
    timespan : list, optional
      [time_o, time_f] override [s].
    output_interval : float, optional
      Output interval override [s].
    max_workers : int
      Threads used to propagate bodies.
    tolerance : float
      Newton-Raphson tolerance.
    max_iterations : int
      Newton-Raphson iteration cap.
    compare_numerical : bool
      Compare with numerical integration of the two-body equations.
    plot : bool
      Save plots to the figures folder.
    enable_logging : bool
      Write the terminal output to <files_folderpath>/output.log.

  Output:
  -------
    result : dict
      - success           : bool - True if every body propagated
      - message           : str
      - config            : SimpleNamespace
      - results           : dict - per-body result dicts
      - comparisons       : dict - numerical comparison per body (empty if disabled)
      - history_filepaths : dict - written history files per body
  """
  # Process inputs and setup
  config = build_config(
    scenario          = scenario,
    timespan          = timespan,
    output_interval   = output_interval,
    max_workers       = max_workers,
    tolerance         = tolerance,
    max_iterations    = max_iterations,
    compare_numerical = compare_numerical,
    plot              = plot,
  )

  # Start logging to file
  logger = start_logging(config.log_filepath) if enable_logging else None

  try:
    # Print input configuration and paths
    print_configuration(config)

    # Propagate
    propagator, _ = build_propagator(config, verbose=True)
    results = propagator.propagate()

    # Display results
    print_results_summary(results)

    # Write histories
    history_filepaths = write_histories(results, config.files_folderpath)

    # Compare with numerical integration
    comparisons = {}
    if config.compare_numerical:
      comparisons = compare_with_numerical_integration(results)
      print_comparison_summary(comparisons)

    # Generate plots
    if config.plot:
      from kepler_propagator.plot.trajectory import generate_plots
      generate_plots(results, config.figures_folderpath, config.scenario_name)
  finally:
    stop_logging(logger)

  failed = [name for name, result in results.items() if not result['success']]
  if failed:
    message = f"Propagation failed for {len(failed)} of {len(results)} bodies: {', '.join(failed)}"
  else:
    message = f"Propagated {len(results)} bodies"

  return {
    'success'           : not failed,
    'message'           : message,
    'config'            : config,
    'results'           : results,
    'comparisons'       : comparisons,
    'history_filepaths' : history_filepaths,
  }


def run(
  argv : Optional[list] = None,
) -> int:
  """
  Command-line entry point. Returns the process exit status.
  """
  args = parse_command_line_arguments(argv)

  try:
    result = main(
      scenario          = args.scenario,
      timespan          = args.timespan,
      output_interval   = args.output_interval,
      max_workers       = args.max_workers,
      tolerance         = args.tolerance,
      max_iterations    = args.max_iterations,
      compare_numerical = args.compare_numerical,
      plot              = args.plot,
      enable_logging    = args.enable_logging,
    )
  except (KeplerPropagatorError, FileNotFoundError, ValueError) as exc:
    print(f"\n[ERROR] {exc}", file=sys.stderr)
    return 1

  if not result['success']:
    print(f"\n[ERROR] {result['message']}", file=sys.stderr)
    return 1
  return 0


if __name__ == "__main__":
  sys.exit(run())
