import math

from types  import SimpleNamespace
from typing import Callable

from kepler_propagator.model.constants import NUMERICS
from kepler_propagator.model.errors    import ConvergenceFailure, SingularDerivative, NumericalInstability


class NewtonRaphson:
  """
  Newton-Raphson root finder.

  Used for every transcendental equation in the engine (elliptic and
  hyperbolic Kepler's equation). Holds only its settings, so one instance can
  be shared by any number of bodies.
  """

  def __init__(
    self,
    tol      : float = NUMERICS.KEPLER_TOLERANCE,
    max_iter : int   = NUMERICS.KEPLER_MAX_ITERATIONS,
  ):
    """
    Input:
    ------
      tol : float
        Convergence tolerance on |f(x)|.
      max_iter : int
        Maximum number of Newton steps.
    """
    self.set_tolerance(tol)
    self.set_maximum_iterations(max_iter)

  def __repr__(self) -> str:
    return f"NewtonRaphson(tol={self.tol!r}, max_iter={self.max_iter!r})"

  def set_tolerance(
    self,
    tol : float,
  ) -> None:
    if not (math.isfinite(tol) and tol > 0):
      raise ValueError(f"Newton-Raphson tolerance must be positive and finite, received tol = {tol}")
    self.tol = float(tol)

  def set_maximum_iterations(
    self,
    max_iter : int,
  ) -> None:
    if int(max_iter) != max_iter or max_iter < 1:
      raise ValueError(f"Newton-Raphson maximum iterations must be a positive integer, received max_iter = {max_iter}")
    self.max_iter = int(max_iter)

  def iterate(
    self,
    func          : Callable[[float], float],
    func_prime    : Callable[[float], float],
    initial_guess : float,
  ) -> SimpleNamespace:
    """
    Run the iteration x_{n+1} = x_n - f(x_n) / f'(x_n).

    Input:
    ------
      func : callable
        Function whose root is sought.
      func_prime : callable
        Derivative of func.
      initial_guess : float
        Starting point x_0.

    Output:
    -------
      result : SimpleNamespace
        - root       : float - converged root
        - iterations : int   - number of Newton steps taken
        - residual   : float - f(root)

    Raises:
    -------
      NumericalInstability
        If an iterate, f(x) or f'(x) is not finite.
      SingularDerivative
        If f'(x) is exactly zero.
      ConvergenceFailure
        If max_iter steps do not converge.

    Notes:
    ------
      Convergence is declared when |f(x)| < tol, or when the Newton step falls
      below tol * max(1, |x|). The second test covers arguments large enough
      that |f| cannot be driven below tol in double precision.
    """
    x = float(initial_guess)
    if not math.isfinite(x):
      raise NumericalInstability(f"Initial guess is not finite: {initial_guess}")

    func_value = self._evaluate(func, x, 'f')
    for iteration in range(self.max_iter + 1):
      if abs(func_value) < self.tol:
        return SimpleNamespace(root=x, iterations=iteration, residual=func_value)

      if iteration == self.max_iter:
        break

      func_prime_value = self._evaluate(func_prime, x, "f'")
      if func_prime_value == 0.0:
        raise SingularDerivative(f"Zero derivative at x = {x!r} (iteration {iteration})")

      delta_x = -func_value / func_prime_value
      x       = x + delta_x
      if not math.isfinite(x):
        raise NumericalInstability(f"Newton step produced a non-finite iterate (iteration {iteration})")

      func_value = self._evaluate(func, x, 'f')
      if abs(delta_x) <= self.tol * max(1.0, abs(x)):
        return SimpleNamespace(root=x, iterations=iteration + 1, residual=func_value)

    raise ConvergenceFailure(
      f"Newton-Raphson did not converge within {self.max_iter} iterations "
      f"(x = {x!r}, f(x) = {func_value!r}, tol = {self.tol!r})",
      iterations = self.max_iter,
      estimate   = x,
      residual   = func_value,
    )

  def find_root(
    self,
    func          : Callable[[float], float],
    func_prime    : Callable[[float], float],
    initial_guess : float,
  ) -> float:
    """
    Root of func near initial_guess. See iterate() for the failure modes.
    """
    return self.iterate(func, func_prime, initial_guess).root

  @staticmethod
  def _evaluate(
    func  : Callable[[float], float],
    x     : float,
    label : str,
  ) -> float:
    try:
      value = float(func(x))
    except OverflowError as exc:
      raise NumericalInstability(f"{label}(x) overflowed at x = {x!r}") from exc
    if not math.isfinite(value):
      raise NumericalInstability(f"{label}(x) is not finite at x = {x!r}: {value}")
    return value
