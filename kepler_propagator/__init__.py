"""
Kepler Orbit Propagator
=======================

Analytic two-body propagation of any number of bodies about their central
bodies, sampled at a fixed output interval.
"""

from .model.bodies          import Body, CentralBody
from .model.orbit_converter import KeplerianElements, OrbitConverter
from .model.root_solvers    import NewtonRaphson
from .model.two_body        import propagate_keplerian_elements, propagate_state
from .propagation           import KeplerPropagator, PropagatorStatus, PropagationHistory

__version__ = '0.1.0'

__all__ = [
  'Body',
  'CentralBody',
  'KeplerianElements',
  'OrbitConverter',
  'NewtonRaphson',
  'propagate_keplerian_elements',
  'propagate_state',
  'KeplerPropagator',
  'PropagatorStatus',
  'PropagationHistory',
]
