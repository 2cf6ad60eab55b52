"""
Action Base Class

A class action replaces a controller instance method with a dedicated class.
One instance serves one request: it mirrors the controller's assigns, runs its
public step methods in order, and resolves the response from its declared
response and format rules.

Example:
    class PostsController(ClassActionSupport, Controller):
        class_actions = ["update"]

        class UpdateAction(Action):
            def load_post(self):
                self.post = Post.get(self.params["id"])

            def save(self):
                self.saved = self.post.update(self.params)

            @property
            def invalid(self):
                return not self.saved

            @responds_to("html", on="invalid")
            def rerender(self):
                self.render("posts/edit.html", status=422)

        UpdateAction.add_response("post")
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple, Type
import inspect
import logging

from .assigns import collect_assigns, copy_assigns
from .decorators import action_metadata
from .faults import ActionNotAvailableFault, NoActiveActionFault
from .registry import WILDCARD_FORMAT, FormatRule, ResponseRegistry


logger = logging.getLogger("classaction.action")


class ActionState(str, Enum):
    """Execution phases of an action instance."""
    IDLE = "idle"
    RUNNING = "running"
    RESPONDED = "responded"
    DONE = "done"


# ============================================================================
# Controller capability proxies
# ============================================================================

class ControllerAttribute:
    """Read-only view of a controller attribute (no assigns syncing)."""

    def __init__(self, name: Optional[str] = None):
        self.name = name

    def __set_name__(self, owner: type, name: str) -> None:
        if self.name is None:
            self.name = name

    def __get__(self, action: Optional["Action"], owner: Optional[type] = None) -> Any:
        if action is None:
            return self
        return getattr(action.controller, self.name)


class ControllerMethod:
    """
    Forward a call to the same-named controller method.

    With ``sync_assigns`` the action's assigns are copied to the controller
    before the call and copied back afterwards, also when the call raises.
    """

    def __init__(self, name: Optional[str] = None, *, sync_assigns: bool = True):
        self.name = name
        self.sync_assigns = sync_assigns

    def __set_name__(self, owner: type, name: str) -> None:
        if self.name is None:
            self.name = name

    def __get__(self, action: Optional["Action"], owner: Optional[type] = None) -> Any:
        if action is None:
            return self

        name = self.name
        sync_assigns = self.sync_assigns

        def forward(*args, **kwargs):
            return action._call_controller(name, args, kwargs, sync_assigns=sync_assigns)

        forward.__name__ = name
        return forward

    def __repr__(self) -> str:
        return f"ControllerMethod({self.name!r}, sync_assigns={self.sync_assigns})"


# ============================================================================
# Helpers
# ============================================================================

class ActionHelpers:
    """
    Base of every action's ``helpers`` mixin.

    Mixed into a view context, which must expose ``controller``.
    """

    helper_names: Tuple[str, ...] = ()


def _helper_forwarder(name: str) -> Callable[..., Any]:
    def helper(self, *args, **kwargs):
        action = self.controller.class_action
        if action is None:
            raise NoActiveActionFault(self.controller, name)
        return getattr(action, name)(*args, **kwargs)

    helper.__name__ = name
    helper.__qualname__ = name
    return helper


@dataclass(frozen=True)
class MethodBlock:
    """Format block backed by an action method, looked up at call time."""

    method: str

    def __call__(self, action: "Action") -> Any:
        return getattr(action, self.method)()


# ============================================================================
# Action
# ============================================================================

# Public names that never run as steps.
_RESERVED_METHODS = frozenset({"available"})


class Action:
    """
    Base class for class actions.

    Class Attributes:
        helpers: Mixin class with view helpers forwarding to the active action

    Controller capabilities available on every action:
        params, request, format: read straight from the controller
        render, redirect_to, respond_to, respond_with: forwarded with assigns syncing
    """

    helpers: Type[ActionHelpers] = ActionHelpers
    _registry: ResponseRegistry = ResponseRegistry()

    params = ControllerAttribute()
    request = ControllerAttribute()
    format = ControllerAttribute()

    render = ControllerMethod()
    redirect_to = ControllerMethod()
    respond_to = ControllerMethod()
    respond_with = ControllerMethod()

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)

        parent_helpers = cls.helpers
        cls.helpers = type(
            f"{cls.__name__}Helpers",
            (parent_helpers,),
            {
                "__module__": cls.__module__,
                "__qualname__": f"{cls.__qualname__}.helpers",
                "helper_names": parent_helpers.helper_names,
            },
        )
        cls._registry = cls._registry.inherit()

        for name, attr in list(vars(cls).items()):
            for meta in action_metadata(attr):
                kind = meta["kind"]
                if kind == "response":
                    cls._registry.add_response(name, on=meta["guard"])
                elif kind == "format":
                    cls._registry.add_format(*meta["formats"], on=meta["guard"], block=MethodBlock(name))
                elif kind == "helper":
                    cls.helper_method(name)

    def __init__(self, controller: Any):
        self._controller = controller
        self._phase = ActionState.IDLE
        self._copy_assigns_from_controller()

    def __repr__(self) -> str:
        return f"<{type(self).__qualname__} phase={self._phase.value}>"

    # ------------------------------------------------------------------
    # Attributes
    # ------------------------------------------------------------------

    @property
    def controller(self) -> Any:
        return self._controller

    @property
    def phase(self) -> ActionState:
        return self._phase

    def available(self) -> bool:
        """Override to prevent the action from running."""
        return True

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    @classmethod
    def add_response(cls, resolver: str, *, on: Optional[str] = None) -> None:
        """
        Respond with ``resolver``, optionally only when guard ``on`` holds.

        ``resolver`` names either an assign (``self.post``) or a
        zero-argument method returning the response object.
        """
        cls._registry.add_response(resolver, on=on)

    @classmethod
    def add_format(
        cls,
        *formats: str,
        on: Optional[str] = None,
        block: Optional[Callable[["Action"], Any]] = None,
    ) -> None:
        """Respond to ``formats``, optionally only when ``on`` holds, running ``block(action)``."""
        cls._registry.add_format(*formats, on=on, block=block)

    @classmethod
    def add_any_format(
        cls,
        *,
        on: Optional[str] = None,
        block: Optional[Callable[["Action"], Any]] = None,
    ) -> None:
        cls._registry.add_format(WILDCARD_FORMAT, on=on, block=block)

    @classmethod
    def helper_method(cls, *names: str) -> None:
        """Expose action methods to templates through ``cls.helpers``."""
        for name in names:
            setattr(cls.helpers, name, _helper_forwarder(name))
            if name not in cls.helpers.helper_names:
                cls.helpers.helper_names = cls.helpers.helper_names + (name,)

    @classmethod
    def controller_method(cls, *names: str, sync_assigns: bool = True) -> None:
        """Expose further controller methods on the action."""
        for name in names:
            setattr(cls, name, ControllerMethod(name, sync_assigns=sync_assigns))

    @classmethod
    def responses(cls) -> ResponseRegistry:
        return cls._registry

    @classmethod
    def action_methods(cls) -> List[str]:
        """
        Names of the step methods, in execution order.

        Steps are public plain functions without parameters (besides ``self``)
        defined on Action subclasses. Ancestors come first; an override keeps
        the position of the method it overrides.
        """
        names: List[str] = []
        for klass in reversed(cls.__mro__):
            if klass is Action or not issubclass(klass, Action):
                continue
            for name in vars(klass):
                if name not in names:
                    names.append(name)

        return [name for name in names if cls._is_step(name)]

    @classmethod
    def _is_step(cls, name: str) -> bool:
        if name.startswith("_") or name in _RESERVED_METHODS:
            return False

        attr = inspect.getattr_static(cls, name)
        if not inspect.isfunction(attr):
            return False
        # Overrides of decorated methods keep their role.
        if any(action_metadata(vars(klass).get(name)) for klass in cls.__mro__):
            return False

        params = list(inspect.signature(attr).parameters.values())[1:]
        return not params

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def _execute(self) -> None:
        if not self.available():
            raise ActionNotAvailableFault(type(self))

        self._phase = ActionState.RUNNING

        for name in type(self).action_methods():
            logger.debug("Running step %s.%s", type(self).__qualname__, name)
            getattr(self, name)()

            # E.g. the action redirected halfway.
            if self._performed():
                break

        if not self._performed():
            self._respond()

        self._phase = ActionState.DONE

    def _performed(self) -> bool:
        return self.controller.response_body is not None

    def _respond(self) -> None:
        self._copy_assigns_to_controller()
        self._phase = ActionState.RESPONDED

        rule = type(self)._registry.resolve_response(self._guard_holds)
        if rule is not None:
            resource = self._resolve_response_object(rule.resolver)
            # Format guards see whatever the resolver set.
            self.controller.respond_with(resource, block=self._respond_block())
            return

        block = self._respond_block()
        if block is not None:
            self.controller.respond_to(block)

    def _respond_block(self) -> Optional[Callable[[Any], None]]:
        registry = type(self)._registry
        if not registry.has_blocks:
            return None

        selected = registry.select_formats(self._guard_holds)
        callbacks = {
            fmt: self._format_callback(rule)
            for fmt, rule in selected.items()
            if rule.block is not None
        }

        def respond_block(collector: Any) -> None:
            for fmt, callback in callbacks.items():
                collector.add(fmt, callback)

        return respond_block

    def _format_callback(self, rule: FormatRule) -> Callable[[], None]:
        block = rule.block

        def callback() -> None:
            block(self)
            self._copy_assigns_to_controller()

        return callback

    def _guard_holds(self, guard: str) -> bool:
        value = getattr(self, guard)
        return bool(value() if callable(value) else value)

    def _resolve_response_object(self, resolver: str) -> Any:
        if resolver in vars(self):
            return vars(self)[resolver]
        value = getattr(self, resolver)
        return value() if callable(value) else value

    # ------------------------------------------------------------------
    # Controller forwarding
    # ------------------------------------------------------------------

    def _call_controller(
        self,
        name: str,
        args: Tuple[Any, ...],
        kwargs: Dict[str, Any],
        *,
        sync_assigns: bool = True,
    ) -> Any:
        method = getattr(self.controller, name)
        if not sync_assigns:
            return method(*args, **kwargs)

        self._copy_assigns_to_controller()
        try:
            return method(*args, **kwargs)
        finally:
            self._copy_assigns_from_controller()

    # ------------------------------------------------------------------
    # Assigns
    # ------------------------------------------------------------------

    def _copy_assigns_from_controller(self) -> None:
        copy_assigns(self.controller.view_assigns(), self)

    def _copy_assigns_to_controller(self) -> None:
        copy_assigns(collect_assigns(self), self.controller)
