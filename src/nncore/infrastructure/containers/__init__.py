from ._container import Container
from ._sequential import Sequential

__all__ = ["Container", "Sequential"]
