"""
ClassAction faults.

Exceptions raised by the class-action core are typed fault signals
carrying a stable code, a domain and a severity.

Core exports:
- Fault: Base fault class
- FaultDomain: Domain taxonomy
- Severity: Severity levels
"""

from .core import (
    Fault,
    FaultDomain,
    Severity,
)

from .domains import (
    ConfigFault,
    ConfigInvalidFault,
    RegistrationFault,
    AnonymousActionClassFault,
    InvalidActionClassFault,
    ActionClassNotFoundFault,
    ActionLoadFault,
    DispatchFault,
    ActionNotAvailableFault,
    NoActiveActionFault,
    ResponseFault,
    UnknownFormatFault,
    DoubleRenderFault,
)

__all__ = [
    # Core types
    "Fault",
    "FaultDomain",
    "Severity",
    # Config
    "ConfigFault",
    "ConfigInvalidFault",
    # Registration
    "RegistrationFault",
    "AnonymousActionClassFault",
    "InvalidActionClassFault",
    "ActionClassNotFoundFault",
    "ActionLoadFault",
    # Dispatch
    "DispatchFault",
    "ActionNotAvailableFault",
    "NoActiveActionFault",
    # Response
    "ResponseFault",
    "UnknownFormatFault",
    "DoubleRenderFault",
]
