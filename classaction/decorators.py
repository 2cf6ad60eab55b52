"""
Action Method Decorators

Mark action methods as response resolvers, format blocks or view helpers.
Decorators only attach metadata; the Action class collects it when the
subclass is created.
"""

from typing import Any, Callable, Dict, List, Optional, TypeVar

from .registry import WILDCARD_FORMAT


F = TypeVar('F', bound=Callable[..., Any])

METADATA_ATTR = "__action_metadata__"


def _attach(func: F, metadata: Dict[str, Any]) -> F:
    if not hasattr(func, METADATA_ATTR):
        setattr(func, METADATA_ATTR, [])
    getattr(func, METADATA_ATTR).append(metadata)
    return func


def action_metadata(func: Any) -> List[Dict[str, Any]]:
    """Metadata attached to ``func`` by the decorators in this module."""
    return getattr(func, METADATA_ATTR, [])


def responds_with(on: Optional[str] = None) -> Callable[[F], F]:
    """
    Use the decorated method's return value as the response object.

    Args:
        on: Name of a guard; the rule only applies while it holds

    Example:
        class UpdateAction(Action):
            @responds_with()
            def post(self):
                return self.post_record

            @responds_with(on="invalid")
            def errors(self):
                return self.form.errors
    """
    def decorator(func: F) -> F:
        return _attach(func, {"kind": "response", "guard": on})
    return decorator


def responds_to(*formats: str, on: Optional[str] = None) -> Callable[[F], F]:
    """
    Run the decorated method when responding in one of ``formats``.

    Example:
        @responds_to("html", on="invalid")
        def rerender(self):
            self.render("posts/edit.html")
    """
    if not formats:
        raise TypeError("responds_to() requires at least one format")

    def decorator(func: F) -> F:
        return _attach(func, {"kind": "format", "formats": tuple(formats), "guard": on})
    return decorator


def responds_to_any(on: Optional[str] = None) -> Callable[[F], F]:
    """Run the decorated method for any format without a more specific block."""
    return responds_to(WILDCARD_FORMAT, on=on)


def helper_method(func: F) -> F:
    """
    Expose the decorated method to view templates.

    The method stays on the action; the action's ``helpers`` mixin gains a
    same-named method forwarding to the active class action.
    """
    return _attach(func, {"kind": "helper"})
