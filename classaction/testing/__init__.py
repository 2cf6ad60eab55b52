"""
ClassAction Testing.

- ClassActionAssertions: assertions over controller wiring and action responses
- ActionTestCase: unittest case for a single action class
- fixtures: pytest fixtures (``classaction_config``, ``make_controller``)
"""

from .assertions import ClassActionAssertions
from .cases import ActionTestCase, owning_controller_class

__all__ = [
    "ClassActionAssertions",
    "ActionTestCase",
    "owning_controller_class",
]
