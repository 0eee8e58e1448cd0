from ._checkpoint import CHECKPOINT_FORMAT, load_module, save_module
from ._serialization_core import (
    apply_modes_,
    module_from_config,
    module_to_config,
    register_module,
)
from ._serialization_weights import extract_state_payload, load_state_payload_

__all__ = [
    "CHECKPOINT_FORMAT",
    "apply_modes_",
    "extract_state_payload",
    "load_module",
    "load_state_payload_",
    "module_from_config",
    "module_to_config",
    "register_module",
    "save_module",
]
