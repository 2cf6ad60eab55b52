"""
ClassAction Controller System

Host controller, format negotiation and class action dispatch.

Key Features:
- Per-request Controller with view assigns and render/redirect/respond
- Class-level format restrictions (``mimes_for_respond_to``)
- ClassActionSupport mixin binding action names to Action classes
- Pluggable action class resolution
"""

from .base import Controller, Request
from .collector import FormatCollector, Responder
from .dispatcher import ClassActionSupport, inject_mimes
from .negotiation import (
    MIME_TYPES,
    media_type_for,
    parse_accept,
    requested_formats,
    select_format,
)
from .resolver import (
    ActionResolver,
    ModuleResolver,
    action_class_name,
    controller_path,
)

__all__ = [
    # Base
    "Controller",
    "Request",

    # Responding
    "FormatCollector",
    "Responder",

    # Dispatch
    "ClassActionSupport",
    "inject_mimes",

    # Negotiation
    "MIME_TYPES",
    "media_type_for",
    "parse_accept",
    "requested_formats",
    "select_format",

    # Resolution
    "ActionResolver",
    "ModuleResolver",
    "action_class_name",
    "controller_path",
]
