import sys
import argparse

from typing import Optional

from kepler_propagator.model.constants import NUMERICS


def parse_command_line_arguments(
  argv : Optional[list] = None,
) -> argparse.Namespace:
  """
  Parse command-line arguments for the Kepler propagator.

  Input:
  ------
    argv : list, optional
      Arguments to parse. Defaults to sys.argv[1:].

  Output:
  -------
    args : argparse.Namespace
      Parsed command-line arguments.
  """
  parser = argparse.ArgumentParser(
    description     = 'Analytic two-body (Kepler) orbit propagator',
    formatter_class = argparse.RawDescriptionHelpFormatter,
  )

  if argv is None:
    argv = sys.argv[1:]

  # If no arguments provided, print help and exit
  if len(argv) == 0:
    parser.print_help(sys.stderr)
    sys.exit(1)

  parser.add_argument(
    '--scenario',
    dest     = 'scenario',
    type     = str,
    required = True,
    help     = "Scenario .yaml file, or the name of a file in data/scenarios (e.g. 'asterix_earth').",
  )
  parser.add_argument(
    '--timespan',
    dest     = 'timespan',
    type     = float,
    nargs    = 2,
    metavar  = ('TIME_START', 'TIME_END'),
    default  = None,
    help     = "Start and end of the propagation interval [s]. Overrides the scenario.",
  )
  parser.add_argument(
    '--output-interval',
    dest     = 'output_interval',
    type     = float,
    default  = None,
    help     = "Fixed output interval [s]. Overrides the scenario.",
  )
  parser.add_argument(
    '--max-workers',
    dest     = 'max_workers',
    type     = int,
    default  = 1,
    help     = "Number of threads used to propagate bodies (default: 1).",
  )
  parser.add_argument(
    '--tolerance',
    dest     = 'tolerance',
    type     = float,
    default  = NUMERICS.KEPLER_TOLERANCE,
    help     = f"Newton-Raphson tolerance for Kepler's equation (default: {NUMERICS.KEPLER_TOLERANCE}).",
  )
  parser.add_argument(
    '--max-iterations',
    dest     = 'max_iterations',
    type     = int,
    default  = NUMERICS.KEPLER_MAX_ITERATIONS,
    help     = f"Newton-Raphson iteration cap (default: {NUMERICS.KEPLER_MAX_ITERATIONS}).",
  )
  parser.add_argument(
    '--compare-numerical',
    dest     = 'compare_numerical',
    action   = 'store_true',
    default  = False,
    help     = "Compare with numerical integration of the two-body equations (disabled by default).",
  )
  parser.add_argument(
    '--plot',
    dest     = 'plot',
    action   = 'store_true',
    default  = False,
    help     = "Save trajectory plots to the figures folder (disabled by default).",
  )
  parser.add_argument(
    '--no-log',
    dest     = 'enable_logging',
    action   = 'store_false',
    default  = True,
    help     = "Do not write the terminal output to output.log.",
  )

  return parser.parse_args(argv)
