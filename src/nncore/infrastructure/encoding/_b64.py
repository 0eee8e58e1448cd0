from __future__ import annotations

import base64
from typing import Any, Dict

import numpy as np

from ...domain._errors import CheckpointError

_PAYLOAD_KEYS = ("b64", "dtype", "shape", "order")


def ndarray_to_payload(arr: np.ndarray) -> Dict[str, Any]:
    """
    Serialize a NumPy array into a JSON-safe payload.

    Returns
    -------
    dict
        {
          "b64": "<base64 of the C-order bytes>",
          "dtype": "<numpy dtype str, e.g. '<f4'>",
          "shape": [...],
          "order": "C"
        }
    """
    a = np.asarray(arr)
    return {
        "b64": base64.b64encode(a.tobytes(order="C")).decode("ascii"),
        "dtype": a.dtype.str,
        "shape": list(a.shape),
        "order": "C",
    }


def payload_to_ndarray(payload: Dict[str, Any]) -> np.ndarray:
    """
    Deserialize a payload produced by `ndarray_to_payload`.

    The result owns its memory (it is not a view on the decoded bytes), so it
    is writable and safe to keep.

    Raises
    ------
    CheckpointError
        If keys are missing, the order is not "C", or the byte count does not
        match dtype and shape.
    """
    missing = [k for k in _PAYLOAD_KEYS if k not in payload]
    if missing:
        raise CheckpointError(f"Array payload is missing key(s): {missing}")
    if payload["order"] != "C":
        raise CheckpointError(f"Unsupported array order: {payload['order']!r}")

    raw = base64.b64decode(str(payload["b64"]).encode("ascii"))
    dtype = np.dtype(str(payload["dtype"]))
    shape = tuple(int(x) for x in payload["shape"])

    expected = int(np.prod(shape, dtype=np.int64)) * dtype.itemsize
    if len(raw) != expected:
        raise CheckpointError(
            f"Array payload holds {len(raw)} byte(s), expected {expected} "
            f"for dtype {dtype.str} and shape {shape}"
        )

    return np.frombuffer(raw, dtype=dtype).reshape(shape).copy(order="C")
