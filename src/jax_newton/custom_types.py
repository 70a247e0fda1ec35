"""Type aliases to improve type hint readability."""

from typing import Callable, TypeAlias
from jax import Array

VectorFunction: TypeAlias = Callable[[Array], Array]
LinearMap: TypeAlias = Callable[[Array], Array]
JacobianConstructor: TypeAlias = Callable[[Array], Array]
JVPConstructor: TypeAlias = Callable[[Array, Array], Array]
