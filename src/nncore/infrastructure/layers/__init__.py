from ._activations import Identity, ReLU, Tanh
from ._linear import Linear

__all__ = ["Identity", "Linear", "ReLU", "Tanh"]
