import matplotlib
matplotlib.use('Agg')

import matplotlib.pyplot as plt
import numpy             as np

from pathlib           import Path
from typing            import Any, Optional
from matplotlib.figure import Figure
from matplotlib.lines  import Line2D

from kepler_propagator.model.constants import CONVERTER


def set_equal_limits(
  ax : Any,
) -> None:
  """
  Give the three axes of a 3D plot a common range so the orbit is not distorted.
  """
  all_limits = np.array([ax.get_xlim3d(), ax.get_ylim3d(), ax.get_zlim3d()])
  min_limit  = np.min(all_limits[:, 0])
  max_limit  = np.max(all_limits[:, 1])
  ax.set_xlim([min_limit, max_limit])
  ax.set_ylim([min_limit, max_limit])
  ax.set_zlim([min_limit, max_limit])
  ax.set_box_aspect([1, 1, 1])


def plot_3d_trajectories(
  results : dict,
) -> Figure:
  """
  Plot the 3D position trajectory of every successfully propagated body.

  Input:
  ------
    results : dict
      Result dicts keyed by body name, as returned by KeplerPropagator.propagate().

  Output:
  -------
    matplotlib.figure.Figure
      Figure object containing the 3D plot. Positions in km.
  """
  fig = plt.figure(figsize=(12, 10))
  ax  = fig.add_subplot(111, projection='3d')

  # Central bodies as spheres
  drawn_central_bodies = set()
  u = np.linspace(0, 2 * np.pi, 50)
  v = np.linspace(0, np.pi, 50)
  for result in results.values():
    central_body = result['central_body']
    if central_body.radius is None or central_body.name in drawn_central_bodies:
      continue
    drawn_central_bodies.add(central_body.name)
    radius = central_body.radius * CONVERTER.KM_PER_M
    ax.plot_surface(
      radius * np.outer(np.cos(u), np.sin(v)),
      radius * np.outer(np.sin(u), np.sin(v)),
      radius * np.outer(np.ones(np.size(u)), np.cos(v)),
      color='lightblue', alpha=0.3, edgecolor='none',
    )

  # Body trajectories
  for name, result in results.items():
    if not result['success'] or len(result['history']) == 0:
      continue
    pos = result['history'].states[0:3, :] * CONVERTER.KM_PER_M
    line, = ax.plot(pos[0], pos[1], pos[2], '-', linewidth=1, label=name)
    color = line.get_color()
    ax.scatter([pos[0, 0]],  [pos[1, 0]],  [pos[2, 0]],  s=60, marker='>', facecolors='white', edgecolors=color, linewidths=2)
    ax.scatter([pos[0, -1]], [pos[1, -1]], [pos[2, -1]], s=60, marker='s', facecolors='white', edgecolors=color, linewidths=2)

  ax.set_xlabel('Pos-X [km]')
  ax.set_ylabel('Pos-Y [km]')
  ax.set_zlabel('Pos-Z [km]')
  ax.grid(True)
  set_equal_limits(ax)

  # Legend: bodies plus start/end markers with black edges
  handles, _ = ax.get_legend_handles_labels()
  handles += [
    Line2D([0], [0], marker='>', color='w', markerfacecolor='white', markeredgecolor='black',
           markersize=10, markeredgewidth=2, linestyle='None', label='Start'),
    Line2D([0], [0], marker='s', color='w', markerfacecolor='white', markeredgecolor='black',
           markersize=10, markeredgewidth=2, linestyle='None', label='End'),
  ]
  fig.legend(handles=handles, loc='upper right', fontsize=11, framealpha=0.9)

  fig.tight_layout()
  return fig


def plot_time_series(
  result : dict,
  name   : str,
) -> Figure:
  """
  Plot position and velocity magnitudes of one body vs time in a 2x1 grid.

  Input:
  ------
    result : dict
      Result dict of one body.
    name : str
      Body name for the title.

  Output:
  -------
    matplotlib.figure.Figure
  """
  history = result['history']
  time_hr = (history.times - history.times[0]) / CONVERTER.SEC_PER_HOUR
  states  = history.states

  pos_mag = np.linalg.norm(states[0:3, :], axis=0) * CONVERTER.KM_PER_M
  vel_mag = np.linalg.norm(states[3:6, :], axis=0) * CONVERTER.KM_PER_M

  fig, (ax_pos, ax_vel) = plt.subplots(2, 1, figsize=(12, 8), sharex=True)

  ax_pos.plot(time_hr, pos_mag, 'b.-', linewidth=1)
  ax_pos.set_ylabel('Pos-Mag [km]')
  ax_pos.grid(True)

  ax_vel.plot(time_hr, vel_mag, 'r.-', linewidth=1)
  ax_vel.set_ylabel('Vel-Mag [km/s]')
  ax_vel.set_xlabel(f"Time [hr] from t = {history.times[0]:.1f} s")
  ax_vel.grid(True)

  fig.suptitle(f'{name} - Time Series', fontsize=16)
  fig.tight_layout()
  return fig


def generate_plots(
  results            : dict,
  figures_folderpath : Path,
  scenario_name      : Optional[str] = None,
) -> list:
  """
  Generate and save all plots of a run.

  Input:
  ------
    results : dict
      Result dicts keyed by body name.
    figures_folderpath : Path
      Directory to save plots.
    scenario_name : str, optional
      Used in the 3D plot title and filename.

  Output:
  -------
    filepaths : list[Path]
      Saved figure files.
  """
  figures_folderpath = Path(figures_folderpath)
  label              = scenario_name if scenario_name else 'scenario'
  filepaths          = []

  print("\nGenerate and Save Plots")
  print(f"  Figure Folderpath : {figures_folderpath}")

  fig = plot_3d_trajectories(results)
  fig.suptitle(f'{label} - 3D Trajectories', fontsize=16)
  filepath = figures_folderpath / f'3d_{label.lower()}.png'
  fig.savefig(filepath, dpi=150, bbox_inches='tight')
  plt.close(fig)
  filepaths.append(filepath)
  print(f"    3D                    : <figures_folderpath>/{filepath.name}")

  for name, result in results.items():
    if not result['success'] or len(result['history']) == 0:
      continue
    fig = plot_time_series(result, name)
    filepath = figures_folderpath / f'timeseries_{name}.png'
    fig.savefig(filepath, dpi=150, bbox_inches='tight')
    plt.close(fig)
    filepaths.append(filepath)
    print(f"    Time Series {name:<9} : <figures_folderpath>/{filepath.name}")

  return filepaths
