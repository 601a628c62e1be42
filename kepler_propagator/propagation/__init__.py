"""
Orbit Propagation Package
=========================

Provides the multi-body Kepler propagation driver, its body registry and
sampled histories, and a numerical two-body reference.
"""

from .history    import PropagationHistory
from .numerical  import propagate_state_numerical_integration
from .propagator import KeplerPropagator, PropagatorStatus
from .registry   import BodyRegistry

__all__ = [
  'KeplerPropagator',
  'PropagatorStatus',
  'PropagationHistory',
  'BodyRegistry',
  'propagate_state_numerical_integration',
]
