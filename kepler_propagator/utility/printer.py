import numpy as np

from kepler_propagator.model.constants       import CONVERTER
from kepler_propagator.model.orbit_converter import OrbitConverter


def print_coe(
  coe    : tuple,
  indent : str = "      ",
) -> None:
  """
  Print classical orbital elements (angles in degrees).
  """
  print(f"{indent}SMA  : {coe.sma:>19.12e} m")
  print(f"{indent}ECC  : {coe.ecc:>19.12e}")
  print(f"{indent}INC  : {coe.inc  * CONVERTER.DEG_PER_RAD:>19.12e} deg")
  print(f"{indent}RAAN : {coe.raan * CONVERTER.DEG_PER_RAD:>19.12e} deg")
  print(f"{indent}AOP  : {coe.aop  * CONVERTER.DEG_PER_RAD:>19.12e} deg")
  print(f"{indent}TA   : {coe.ta   * CONVERTER.DEG_PER_RAD:>19.12e} deg")


def print_propagation_summary(
  results : dict,
  times   : np.ndarray,
) -> None:
  """
  Print one status line per body after a propagation.

  Input:
  ------
    results : dict
      Result dicts keyed by body name, as returned by KeplerPropagator.propagate().
    times : np.ndarray
      Output times [s].
  """
  num_succeeded = sum(1 for result in results.values() if result['success'])

  print("\nPropagation Summary")
  print(f"  Output Times : {len(times)} samples, {times[0]:.6f} s to {times[-1]:.6f} s")
  print(f"  Bodies       : {num_succeeded} of {len(results)} succeeded")
  name_width = max(len(name) for name in results) if results else 0
  for name, result in results.items():
    central_body = result['central_body']
    if result['success']:
      print(f"    {name:<{name_width}} : OK     ({len(result['history'])} samples about {central_body.name})")
    else:
      print(f"    {name:<{name_width}} : FAILED ({result['message']})")


def print_results_summary(
  results : dict,
) -> None:
  """
  Print the final Cartesian state and the initial/final classical orbital
  elements of every successfully propagated body.

  Input:
  ------
    results : dict
      Result dicts keyed by body name.
  """
  print("\nResults Summary")

  for name, result in results.items():
    print(f"  {name}")
    if not result['success']:
      print(f"    [ERROR] {result['message']}")
      continue

    central_body = result['central_body']
    history      = result['history']
    time_f       = history.times[-1]
    state_f      = history.final_state
    pos_vec_f    = state_f[0:3]
    vel_vec_f    = state_f[3:6]

    print(f"    Central Body : {central_body.name} (gp = {central_body.gp:.12e} m³/s²)")
    print(f"    Epoch        : {result['epoch']:.6f} s")
    print(f"    Initial Classical Orbital Elements")
    print_coe(result['coe'])
    print(f"    Final State (t = {time_f:.6f} s)")
    print(f"      Position : {pos_vec_f[0]:>19.12e}  {pos_vec_f[1]:>19.12e}  {pos_vec_f[2]:>19.12e} m")
    print(f"      Velocity : {vel_vec_f[0]:>19.12e}  {vel_vec_f[1]:>19.12e}  {vel_vec_f[2]:>19.12e} m/s")
    print(f"    Final Classical Orbital Elements")
    print_coe(OrbitConverter.state_to_coe(state_f, central_body.gp))


def print_comparison_summary(
  comparisons : dict,
) -> None:
  """
  Print analytic vs. numerical integration differences per body.

  Input:
  ------
    comparisons : dict
      Output of compare_histories() keyed by body name.
  """
  print("\nNumerical Integration Comparison")
  for name, comparison in comparisons.items():
    print(f"  {name}")
    print(f"    Position Error : max {comparison['pos_error']['max']:>19.12e} m    rms {comparison['pos_error']['rms']:>19.12e} m")
    print(f"    Velocity Error : max {comparison['vel_error']['max']:>19.12e} m/s  rms {comparison['vel_error']['rms']:>19.12e} m/s")
