"""
Assigns - the variables shared between a controller and its class action.

A class action keeps its own working copy of the controller's template-visible
variables. Both directions of the copy go through the two primitives below so
that the same exclusion rules apply everywhere.
"""

from typing import Any, Dict, Mapping
import inspect


# Controller and action plumbing that is never mirrored.
PROTECTED_ASSIGNS = frozenset({
    "action_name",
    "content_type",
    "controller",
    "format",
    "helpers",
    "location",
    "logger",
    "params",
    "phase",
    "request",
    "response_body",
    "status",
    "template_engine",
})


def is_assign(name: str) -> bool:
    """Whether an attribute name takes part in assigns mirroring."""
    return not name.startswith("_") and name not in PROTECTED_ASSIGNS


def collect_assigns(obj: Any) -> Dict[str, Any]:
    """
    Snapshot the mirrored attributes of ``obj``.

    Only instance attributes are considered; class attributes, properties and
    methods never take part.
    """
    return {
        name: value
        for name, value in vars(obj).items()
        if is_assign(name)
    }


def _is_data_descriptor(owner: type, name: str) -> bool:
    attr = inspect.getattr_static(owner, name, None)
    return hasattr(type(attr), "__set__") or hasattr(type(attr), "__delete__")


def copy_assigns(assigns: Mapping[str, Any], target: Any) -> None:
    """
    Set every mirrored entry of ``assigns`` as an attribute on ``target``.

    Names the target's class defines as properties (or other data
    descriptors) are skipped; the class attribute owns them.
    """
    for name, value in assigns.items():
        if is_assign(name) and not _is_data_descriptor(type(target), name):
            setattr(target, name, value)
