"""
Error taxonomy for nncore.

All errors raised by the module core are local and deterministic: they signal
a caller mistake (a bad positional index, a checkpoint that does not match the
module it is being loaded into) rather than a transient condition. They are
raised synchronously, before any state is mutated, and are never retried or
swallowed inside the library.
"""


class ParameterIndexError(IndexError):
    """
    Raised when a parameter is addressed by a position outside
    ``[0, parameter_count)``.

    Negative positions are never interpreted Python-style; they are rejected
    like any other out-of-range index.

    Attributes
    ----------
    position : int
        The rejected position.
    size : int
        Number of parameters held by the module at the time of the call.
    """

    def __init__(self, position: int, size: int) -> None:
        """
        Initialize the ParameterIndexError.

        Parameters
        ----------
        position : int
            The invalid position that was requested.
        size : int
            Current number of parameters in the module.
        """
        super().__init__(
            f"parameter position {position} is out of range for module with "
            f"{size} parameter(s); valid range is [0, {size})"
        )
        self.position = position
        self.size = size


class ModuleIndexError(IndexError):
    """
    Raised when a container's child module is addressed by a position outside
    ``[0, child_count)``.
    """

    def __init__(self, position: int, size: int) -> None:
        super().__init__(
            f"module position {position} is out of range for container with "
            f"{size} module(s); valid range is [0, {size})"
        )
        self.position = position
        self.size = size


class CheckpointError(ValueError):
    """
    Raised when a checkpoint is malformed or does not match the module it is
    being restored into (format tag, parameter count, or parameter shape).
    """


class UnknownModuleTypeError(ValueError):
    """
    Raised when a serialized architecture names a module type that has not
    been registered via ``@register_module``.

    Attributes
    ----------
    type_name : str
        The unregistered type name found in the checkpoint.
    """

    def __init__(self, type_name: str) -> None:
        super().__init__(
            f"Unknown module type '{type_name}'. Register it via @register_module."
        )
        self.type_name = type_name
