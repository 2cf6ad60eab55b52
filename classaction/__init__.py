"""
ClassAction - Class-based controller actions

Instead of defining actions as controller methods, each action is a class with
its own lifecycle:
- Availability check before running
- Public step methods executed in order
- Guarded response and per-format rules
- Helper methods exposed to templates
- Assigns mirrored between action and controller
"""

__version__ = "0.3.0"

# ============================================================================
# Core
# ============================================================================

from .action import (
    Action,
    ActionHelpers,
    ActionState,
    ControllerAttribute,
    ControllerMethod,
)
from .decorators import (
    responds_with,
    responds_to,
    responds_to_any,
    helper_method,
)
from .registry import (
    WILDCARD_FORMAT,
    ResponseRule,
    FormatRule,
    RuleList,
    ResponseRegistry,
)
from .assigns import PROTECTED_ASSIGNS, collect_assigns, copy_assigns

# ============================================================================
# Controller System
# ============================================================================

from .controller import (
    Controller,
    Request,
    ClassActionSupport,
    FormatCollector,
    Responder,
    ModuleResolver,
    inject_mimes,
)
from .templates import TemplateEngine, ViewContext

# ============================================================================
# Config & Faults
# ============================================================================

from .config import ClassActionConfig, ConfigLoader, get_config, set_config
from .faults import (
    Fault,
    FaultDomain,
    Severity,
    RegistrationFault,
    AnonymousActionClassFault,
    InvalidActionClassFault,
    ActionClassNotFoundFault,
    ActionLoadFault,
    ActionNotAvailableFault,
    NoActiveActionFault,
    UnknownFormatFault,
    DoubleRenderFault,
)


__all__ = [
    # Core
    "Action",
    "ActionHelpers",
    "ActionState",
    "ControllerAttribute",
    "ControllerMethod",
    "responds_with",
    "responds_to",
    "responds_to_any",
    "helper_method",
    "WILDCARD_FORMAT",
    "ResponseRule",
    "FormatRule",
    "RuleList",
    "ResponseRegistry",
    "PROTECTED_ASSIGNS",
    "collect_assigns",
    "copy_assigns",

    # Controller
    "Controller",
    "Request",
    "ClassActionSupport",
    "FormatCollector",
    "Responder",
    "ModuleResolver",
    "inject_mimes",
    "TemplateEngine",
    "ViewContext",

    # Config
    "ClassActionConfig",
    "ConfigLoader",
    "get_config",
    "set_config",

    # Faults
    "Fault",
    "FaultDomain",
    "Severity",
    "RegistrationFault",
    "AnonymousActionClassFault",
    "InvalidActionClassFault",
    "ActionClassNotFoundFault",
    "ActionLoadFault",
    "ActionNotAvailableFault",
    "NoActiveActionFault",
    "UnknownFormatFault",
    "DoubleRenderFault",
]
