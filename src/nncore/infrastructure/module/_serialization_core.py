from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Type

from ...domain._errors import CheckpointError, UnknownModuleTypeError

_MODULE_REGISTRY: Dict[str, Type[Any]] = {}


def register_module(name: Optional[str] = None) -> Callable[[Type[Any]], Type[Any]]:
    """
    Decorator to register a Module class for JSON deserialization.
    """

    def deco(cls: Type[Any]) -> Type[Any]:
        key = name or cls.__name__
        _MODULE_REGISTRY[key] = cls
        return cls

    return deco


def registered_module(name: str) -> Type[Any]:
    """
    Look up a registered Module class by name.

    Raises
    ------
    UnknownModuleTypeError
        If nothing was registered under `name`.
    """
    try:
        return _MODULE_REGISTRY[name]
    except KeyError:
        raise UnknownModuleTypeError(name) from None


def module_to_config(m: Any) -> dict[str, Any]:
    """
    Convert a Module into a JSON-serializable architecture tree.

    Node format
    -----------
    {
      "type": "Linear",
      "config": {...},
      "train": true,
      "children": [<node>, ...]
    }

    `children` is empty for leaf modules and lists a container's children in
    order otherwise.
    """
    children = []
    get_children = getattr(m, "modules", None)
    if callable(get_children):
        children = [module_to_config(child) for child in get_children()]

    return {
        "type": m.__class__.__name__,
        "config": m.get_config(),
        "train": bool(m.training),
        "children": children,
    }


def module_from_config(node: dict[str, Any]) -> Any:
    """
    Rebuild a Module tree from an architecture tree.

    Children are re-added through `add()` in their saved order so that a
    container's aggregated parameter positions match the saved ones. Modes
    are not applied here; see `apply_modes_`.
    """
    cls = registered_module(str(node["type"]))
    m = cls.from_config(node.get("config", {}) or {})

    children = node.get("children", []) or []
    if children:
        add = getattr(m, "add", None)
        if not callable(add):
            raise CheckpointError(
                f"Module '{node['type']}' cannot accept children (no add())."
            )
        for child_node in children:
            add(module_from_config(child_node))

    return m


def apply_modes_(m: Any, node: dict[str, Any]) -> None:
    """
    Restore saved train/eval modes top-down.

    A parent's switch recurses into its children, so each child's own saved
    mode is applied after its parent's.
    """
    if node.get("train", True):
        m.train()
    else:
        m.eval()

    children = node.get("children", []) or []
    if children:
        for child, child_node in zip(m.modules(), children):
            apply_modes_(child, child_node)
