import numpy as np

from dataclasses import dataclass
from typing      import Optional

from kepler_propagator.model.constants import SOLARSYSTEMCONSTANTS


@dataclass(frozen=True)
class CentralBody:
  """
  Gravitating body that other bodies orbit.

  Attributes:
  -----------
    name : str
      Body name, e.g. 'EARTH'
    gp : float
      Gravitational parameter [m³/s²]
    radius : float, optional
      Equatorial radius [m], used only for plots and reports
  """
  name   : str
  gp     : float
  radius : Optional[float] = None

  def __post_init__(self):
    if not (np.isfinite(self.gp) and self.gp > 0):
      raise ValueError(f"Gravitational parameter of '{self.name}' must be positive and finite, received gp = {self.gp}")
    if self.radius is not None and not (np.isfinite(self.radius) and self.radius > 0):
      raise ValueError(f"Radius of '{self.name}' must be positive and finite, received radius = {self.radius}")

  @classmethod
  def predefined(
    cls,
    name : str,
  ) -> 'CentralBody':
    """
    Central body built from the solar-system constants.

    Input:
    ------
      name : str
        One of SOLARSYSTEMCONSTANTS.NAMES, case-insensitive (e.g. 'earth').

    Raises:
    -------
      ValueError
        If the name is not a predefined body.
    """
    key = name.strip().upper()
    if key not in SOLARSYSTEMCONSTANTS.NAMES:
      raise ValueError(f"Unknown predefined central body '{name}'. Supported: {', '.join(SOLARSYSTEMCONSTANTS.NAMES)}")
    constants = getattr(SOLARSYSTEMCONSTANTS, key)
    return cls(
      name   = key,
      gp     = constants.GP,
      radius = constants.RADIUS.EQUATOR,
    )


class Body:
  """
  Propagated body. Carries only its identity; the registry holds its central
  body and initial state. Two bodies with the same name are still distinct.
  """

  def __init__(
    self,
    name : str,
  ):
    self.name = str(name)

  def __repr__(self) -> str:
    return f"Body({self.name!r})"
