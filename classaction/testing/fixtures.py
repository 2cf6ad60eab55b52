"""
ClassAction Testing - Pytest Fixtures.

Import the fixtures in your ``conftest.py``::

    from classaction.testing.fixtures import classaction_config, make_controller  # noqa: F401
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import pytest

from ..config import ClassActionConfig, set_config
from ..controller.base import Request


@pytest.fixture
def classaction_config():
    """A fresh default :class:`ClassActionConfig`, active for the test."""
    config = ClassActionConfig()
    set_config(config)
    yield config
    set_config(None)


@pytest.fixture
def make_controller():
    """
    Factory building controllers with a request.

    Usage::

        def test_show(make_controller):
            controller = make_controller(PostsController, params={"id": 1}, accept="application/json")
    """
    def factory(
        controller_class: type,
        *,
        params: Optional[Dict[str, Any]] = None,
        method: str = "GET",
        path: str = "/",
        accept: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        request_headers = dict(headers or {})
        if accept is not None:
            request_headers["accept"] = accept
        request = Request(method=method, path=path, headers=request_headers)
        return controller_class(request=request, params=params)

    return factory
