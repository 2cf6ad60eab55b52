"""
Test doubles shared across the suite.
"""

from typing import Any, Dict, List, Optional

from classaction.assigns import collect_assigns
from classaction.controller.collector import FormatCollector


class FakeController:
    """
    Stand-in for a host controller.

    Records respond_with / respond_to calls instead of producing responses.
    """

    def __init__(self, **assigns: Any):
        self.response_body: Optional[str] = None
        self.params: Dict[str, Any] = {}
        self.request = object()
        self.format = "html"
        self._active = None
        self._calls: List[tuple] = []
        for name, value in assigns.items():
            setattr(self, name, value)

    @property
    def class_action(self):
        return self._active

    @class_action.setter
    def class_action(self, action):
        self._active = action

    @property
    def calls(self) -> List[tuple]:
        return self._calls

    def view_assigns(self) -> Dict[str, Any]:
        return collect_assigns(self)

    def respond_with(self, resource, block=None):
        self._calls.append(("respond_with", resource, block))

    def respond_to(self, block):
        self._calls.append(("respond_to", block))

    def render(self, text=None, **kwargs):
        self.response_body = text or ""


def run_respond_block(block) -> FormatCollector:
    """Feed a respond block a fresh collector and return it."""
    collector = FormatCollector()
    block(collector)
    return collector
