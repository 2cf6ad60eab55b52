"""
Class action dispatch.

:class:`ClassActionSupport` is a controller mixin binding action names to
Action classes. For every bound name the controller gets a public method of
the same name that runs the action, and the controller's format table is
updated with the formats the action declares (MIME injection).

Example:
    class PostsController(ClassActionSupport, Controller):
        mimes_for_respond_to = {"html": {}}
        class_actions = ["index", "show"]

        class IndexAction(Action):
            ...

        class ShowAction(Action):
            ...
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Type, Union
import logging
import sys

from ..action import Action
from ..config import get_config
from ..faults import (
    ActionClassNotFoundFault,
    AnonymousActionClassFault,
    InvalidActionClassFault,
    NoActiveActionFault,
)
from ..registry import ResponseRegistry
from .resolver import ActionResolver, ModuleResolver, action_class_name


logger = logging.getLogger("classaction.dispatcher")


MimeTable = Dict[str, Dict[str, List[str]]]


# ============================================================================
# MIME injection
# ============================================================================

def inject_mimes(
    table: MimeTable,
    action_name: str,
    registry: ResponseRegistry,
    *,
    log: Optional[logging.Logger] = None,
    warn: bool = True,
) -> None:
    """
    Restrict ``table`` so ``action_name`` responds with the declared formats only.

    - Formats already in the table that the action does not declare get the
      action added to their ``except`` list.
    - Declared formats get the action added to their ``only`` list (an entry
      is created when missing), unless the format already excludes the action.

    Nothing happens when the action declares no format rules or declares a
    wildcard rule. Both lists are append-only and never hold duplicates.
    """
    if not len(registry.formats) or registry.has_wildcard:
        return

    log = log or logger
    declared = registry.declared_formats()

    for fmt in list(table):
        if fmt in declared:
            continue
        restriction = table[fmt]
        if action_name in restriction.get("except", []):
            continue
        # An only-list without the action already excludes it; no except entry is added.
        if "only" in restriction and action_name not in restriction["only"]:
            continue
        restriction.setdefault("except", []).append(action_name)

    for fmt in declared:
        restriction = table.setdefault(fmt, {"only": []})
        if action_name in restriction.get("except", []):
            if warn:
                log.warning(
                    "Action '%s' responds to format '%s', which excludes it; leaving it excluded",
                    action_name, fmt,
                )
            continue
        only = restriction.setdefault("only", [])
        if action_name not in only:
            only.append(action_name)


# ============================================================================
# Helpers in the view context
# ============================================================================

_VIEW_CONTEXT_CLASSES: Dict[Tuple[type, type], type] = {}


def _view_context_with_helpers(base: type, helpers: type) -> type:
    key = (base, helpers)
    combined = _VIEW_CONTEXT_CLASSES.get(key)
    if combined is None:
        combined = type(f"{helpers.__name__}{base.__name__}", (helpers, base), {"__module__": base.__module__})
        _VIEW_CONTEXT_CLASSES[key] = combined
    return combined


# ============================================================================
# Controller mixin
# ============================================================================

def _action_method(name: str, owner: type):
    def action(self):
        return self._execute_class_action(name)

    action.__name__ = name
    action.__qualname__ = f"{owner.__qualname__}.{name}"
    action.__doc__ = f"Run the '{name}' class action."
    return action


def _delegator(name: str, owner: type):
    def delegated(self, *args, **kwargs):
        action = self.class_action
        if action is None:
            raise NoActiveActionFault(self, name)
        return getattr(action, name)(*args, **kwargs)

    delegated.__name__ = name
    delegated.__qualname__ = f"{owner.__qualname__}.{name}"
    return delegated


class ClassActionSupport:
    """
    Controller mixin adding class actions.

    Place it before the controller base class so its hooks run first.

    Class Attributes:
        class_actions: Names to bind at class creation; a mapping binds names
            to an Action class or class name explicitly
        action_delegates: Method names forwarded to the active class action
        action_resolver: Resolver used when no class is found by convention
    """

    class_actions: Union[Sequence[str], Mapping[str, Any]] = ()
    action_delegates: Sequence[str] = ()
    action_resolver: Optional[ActionResolver] = None

    _action_classes: Dict[str, Type[Action]] = {}

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        cls._action_classes = dict(cls._action_classes)

        declared = cls.__dict__.get("class_actions")
        if declared:
            if isinstance(declared, Mapping):
                for name, action_class in declared.items():
                    cls.register_actions(name, action_class=action_class)
            else:
                cls.register_actions(*declared)

        delegates = cls.__dict__.get("action_delegates")
        if delegates:
            cls.delegate(*delegates)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    @classmethod
    def register_actions(
        cls,
        *names: str,
        action_class: Union[Type[Action], str, None] = None,
        resolver: Optional[ActionResolver] = None,
    ) -> None:
        """
        Bind each of ``names`` to an Action class.

        Lookup order: ``action_class`` (a class, or a class name to look up),
        ``<Name>Action`` on the controller class, ``<Name>Action`` in the
        controller's module, then the resolver (``resolver``, the class's
        ``action_resolver``, or a :class:`ModuleResolver` over the configured
        ``action_packages``).

        Raises:
            AnonymousActionClassFault: The class has no usable name
            InvalidActionClassFault: The class is not an Action subclass
            ActionClassNotFoundFault: Nothing found and no resolver configured
            ActionLoadFault: The resolver failed to load the class
        """
        config = get_config()

        for name in names:
            klass = cls._resolve_action_class(name, action_class, resolver)
            cls._validate_action_class(name, klass)

            cls._action_classes[name] = klass
            setattr(cls, name, _action_method(name, cls))
            logger.debug("Bound %s#%s to %s", cls.__qualname__, name, klass.__qualname__)

            inject_mimes(
                cls.mimes_for_respond_to,
                name,
                klass.responses(),
                log=getattr(cls, "logger", None),
                warn=config.warn_on_mime_conflict,
            )

    @classmethod
    def _resolve_action_class(
        cls,
        name: str,
        action_class: Union[Type[Action], str, None],
        resolver: Optional[ActionResolver],
    ) -> Any:
        config = get_config()

        if action_class is not None and not isinstance(action_class, str):
            return action_class

        class_name = action_class or action_class_name(name, config.action_suffix)

        found = cls._lookup_action_class(class_name)
        if found is not None:
            return found

        resolver = resolver or cls.action_resolver
        if resolver is None and config.action_packages:
            resolver = ModuleResolver(config.action_packages)
        if resolver is None:
            raise ActionClassNotFoundFault(cls, name, class_name)

        found = resolver(cls, name, class_name)
        if found is None:
            raise ActionClassNotFoundFault(cls, name, class_name)
        return found

    @classmethod
    def _lookup_action_class(cls, class_name: str) -> Optional[type]:
        candidate = getattr(cls, class_name, None)
        if isinstance(candidate, type):
            return candidate

        module = sys.modules.get(cls.__module__)
        candidate = getattr(module, class_name, None)
        if isinstance(candidate, type):
            return candidate
        return None

    @staticmethod
    def _validate_action_class(name: str, klass: Any) -> None:
        if not isinstance(klass, type):
            raise InvalidActionClassFault(name, klass)
        if not klass.__name__ or klass.__name__.startswith("<"):
            raise AnonymousActionClassFault(name, klass)
        if not issubclass(klass, Action):
            raise InvalidActionClassFault(name, klass)

    @classmethod
    def delegate(cls, *names: str) -> None:
        """Define controller methods forwarding to the active class action."""
        for name in names:
            setattr(cls, name, _delegator(name, cls))

    @classmethod
    def action_class_for(cls, name: str) -> Optional[Type[Action]]:
        return cls._action_classes.get(name)

    @classmethod
    def class_action_names(cls) -> List[str]:
        return list(cls._action_classes)

    # ------------------------------------------------------------------
    # Per-request
    # ------------------------------------------------------------------

    def _class_action_for(self, name: str) -> Action:
        instances = self.__dict__.setdefault("_class_action_instances", {})
        action = instances.get(name)
        if action is None:
            action = instances[name] = type(self)._action_classes[name](self)
        return action

    @property
    def class_action(self) -> Optional[Action]:
        """The class action for the current ``action_name``, if it is one."""
        name = self.action_name
        if name is None or name not in type(self)._action_classes:
            return None
        return self._class_action_for(name)

    def _execute_class_action(self, name: str) -> None:
        self.action_name = name
        action = self._class_action_for(name)
        action._execute()
        action._copy_assigns_to_controller()

    def view_context(self):
        context = super().view_context()
        action = self.class_action
        if action is not None:
            context.__class__ = _view_context_with_helpers(type(context), type(action).helpers)
        return context
