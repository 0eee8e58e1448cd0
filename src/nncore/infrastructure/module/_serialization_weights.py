from __future__ import annotations

from typing import Any, Callable, Dict

from ...domain._errors import CheckpointError
from ..encoding._b64 import ndarray_to_payload, payload_to_ndarray

# One encoder per persisted field, keyed by the names in Module.PERSISTED_STATE.
_ENCODERS: Dict[str, Callable[[Any], Any]] = {
    "params": lambda params: [ndarray_to_payload(p.to_numpy()) for p in params],
    "train": bool,
}


def extract_state_payload(model: Any) -> Dict[str, Any]:
    """
    Encode a module's persisted state into a JSON-safe mapping.

    Fields are emitted in `model.PERSISTED_STATE` order:

        {"params": [<array payload>, ...], "train": true}

    Raises
    ------
    CheckpointError
        If the module declares a persisted field this codec cannot encode.
    """
    state = model.state()
    out: dict[str, Any] = {}
    for field in model.PERSISTED_STATE:
        encode = _ENCODERS.get(field)
        if encode is None:
            raise CheckpointError(f"No encoder for persisted field '{field}'")
        out[field] = encode(state[field])
    return out


def load_state_payload_(model: Any, payload: Dict[str, Any]) -> None:
    """
    In-place restore of a module's persisted state from `extract_state_payload`
    output.

    Every array is decoded and validated before any parameter is written.
    Arrays whose shape or dtype differs from the rebuilt parameter replace it
    (see `Module.load_state_`).

    Raises
    ------
    CheckpointError
        If a persisted field is missing, an array payload is malformed, or the
        parameter count does not match the module.
    """
    missing = [f for f in model.PERSISTED_STATE if f not in payload]
    if missing:
        raise CheckpointError(f"Checkpoint state is missing field(s): {missing}")

    arrays = [payload_to_ndarray(p) for p in payload["params"]]
    model.load_state_(arrays, bool(payload["train"]))
