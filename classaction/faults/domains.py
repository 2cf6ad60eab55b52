"""
ClassAction faults - Domain-specific fault types.

Provides concrete fault classes for each domain:
- CONFIG faults
- REGISTRATION faults
- DISPATCH faults
- RESPONSE faults
"""

from typing import Any, Optional
from .core import Fault, FaultDomain, Severity


def _describe(obj: Any) -> str:
    return getattr(obj, "__qualname__", None) or getattr(obj, "__name__", None) or repr(obj)


# ============================================================================
# CONFIG Faults
# ============================================================================

class ConfigFault(Fault):
    """Base class for configuration faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.CONFIG,
            severity=Severity.FATAL,
            retryable=False,
            metadata=metadata,
        )


class ConfigInvalidFault(ConfigFault):
    """Configuration value is invalid."""

    def __init__(self, key: str, reason: str):
        super().__init__(
            code="CONFIG_INVALID",
            message=f"Configuration key '{key}' is invalid: {reason}",
            metadata={"key": key, "reason": reason},
        )


# ============================================================================
# REGISTRATION Faults
# ============================================================================

class RegistrationFault(Fault):
    """Base class for faults raised while binding actions to a controller."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.REGISTRATION,
            severity=Severity.FATAL,
            retryable=False,
            metadata=metadata,
        )


class AnonymousActionClassFault(RegistrationFault):
    """Action classes must carry a name."""

    def __init__(self, action_name: str, action_class: Any = None):
        super().__init__(
            code="ANONYMOUS_ACTION_CLASS",
            message=f"Cannot use an anonymous class for action '{action_name}'",
            metadata={"action": action_name, "class": repr(action_class)},
        )


class InvalidActionClassFault(RegistrationFault):
    """The class bound to an action is not an Action subclass."""

    def __init__(self, action_name: str, action_class: Any):
        super().__init__(
            code="INVALID_ACTION_CLASS",
            message=f"{_describe(action_class)} bound to action '{action_name}' is not an Action class",
            metadata={"action": action_name, "class": _describe(action_class)},
        )


class ActionClassNotFoundFault(RegistrationFault):
    """No action class could be found and no resolver is configured."""

    def __init__(self, controller: Any, action_name: str, class_name: str):
        super().__init__(
            code="ACTION_CLASS_NOT_FOUND",
            message=(
                f"Action class {class_name} for {_describe(controller)}#{action_name} "
                f"not found and no action resolver is configured"
            ),
            metadata={
                "controller": _describe(controller),
                "action": action_name,
                "class_name": class_name,
            },
        )


class ActionLoadFault(RegistrationFault):
    """A resolver could not load the expected action class."""

    def __init__(self, class_name: str, reason: str, *, modules: Optional[list[str]] = None):
        super().__init__(
            code="ACTION_LOAD_FAILED",
            message=f"Could not load action class {class_name}: {reason}",
            metadata={"class_name": class_name, "reason": reason, "modules": modules or []},
        )


# ============================================================================
# DISPATCH Faults
# ============================================================================

class DispatchFault(Fault):
    """Base class for faults raised while executing an action."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.ERROR,
        public: bool = False,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.DISPATCH,
            severity=severity,
            retryable=False,
            public=public,
            metadata=metadata,
        )


class ActionNotAvailableFault(DispatchFault):
    """The action reported itself unavailable."""

    def __init__(self, action_class: Any):
        super().__init__(
            code="ACTION_NOT_AVAILABLE",
            message=f"Action {_describe(action_class)} is not available",
            severity=Severity.FATAL,
            public=True,
            metadata={"action_class": _describe(action_class)},
        )


class NoActiveActionFault(DispatchFault):
    """A delegated or helper call was made while no class action is active."""

    def __init__(self, controller: Any, method: str):
        super().__init__(
            code="NO_ACTIVE_ACTION",
            message=f"Cannot call '{method}': {_describe(type(controller))} has no active class action",
            metadata={"controller": _describe(type(controller)), "method": method},
        )


# ============================================================================
# RESPONSE Faults
# ============================================================================

class ResponseFault(Fault):
    """Base class for response faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        public: bool = True,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.RESPONSE,
            severity=Severity.ERROR,
            retryable=False,
            public=public,
            metadata=metadata,
        )


class UnknownFormatFault(ResponseFault):
    """The requested format is not one the action responds to."""

    status = 406

    def __init__(self, format: Optional[str], available: list[str], action: Optional[str] = None):
        super().__init__(
            code="UNKNOWN_FORMAT",
            message=(
                f"Action '{action}' cannot respond with format '{format}' "
                f"(available: {', '.join(available) or 'none'})"
            ),
            metadata={"format": format, "available": available, "action": action},
        )


class DoubleRenderFault(ResponseFault):
    """A response body was produced twice within one request."""

    def __init__(self, action: Optional[str] = None):
        super().__init__(
            code="DOUBLE_RENDER",
            message=(
                f"Render and/or redirect were called multiple times in action '{action}'"
            ),
            public=False,
            metadata={"action": action},
        )
