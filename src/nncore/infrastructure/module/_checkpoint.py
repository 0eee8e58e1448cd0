"""
Single-file JSON checkpoints.

Format
------
{
  "format": "nncore.json.ckpt.v1",
  "arch": <architecture tree from module_to_config>,
  "state": {"params": [<array payload>, ...], "train": true}
}

Notes
-----
- Avoids pickle; the file is plain JSON with base64 array payloads (about
  33% size overhead).
- Parameter values round-trip bit-for-bit, including dtype.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from ...domain._errors import CheckpointError
from ._serialization_core import apply_modes_, module_from_config, module_to_config
from ._serialization_weights import extract_state_payload, load_state_payload_

logger = logging.getLogger(__name__)

CHECKPOINT_FORMAT = "nncore.json.ckpt.v1"


def save_module(module: Any, path: str | Path) -> None:
    """
    Write `module`'s architecture and persisted state to `path`.

    Parent directories are created as needed.
    """
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    payload = {
        "format": CHECKPOINT_FORMAT,
        "arch": module_to_config(module),
        "state": extract_state_payload(module),
    }
    p.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
    logger.debug(
        "saved %s with %d parameter(s) to %s",
        type(module).__name__,
        len(payload["state"]["params"]),
        p,
    )


def load_module(path: str | Path) -> Any:
    """
    Rebuild a module from a checkpoint written by `save_module`.

    Raises
    ------
    CheckpointError
        If the format tag is unsupported or the state does not match the
        rebuilt architecture.
    UnknownModuleTypeError
        If the architecture names an unregistered module type.
    """
    p = Path(path)
    payload = json.loads(p.read_text(encoding="utf-8"))

    fmt = payload.get("format")
    if fmt != CHECKPOINT_FORMAT:
        raise CheckpointError(f"Unsupported checkpoint format: {fmt!r}")

    module = module_from_config(payload["arch"])
    load_state_payload_(module, payload["state"])
    apply_modes_(module, payload["arch"])

    logger.debug(
        "loaded %s with %d parameter(s) from %s",
        type(module).__name__,
        module.num_parameters(),
        p,
    )
    return module
