"""
Action class resolution.

Naming conventions and the resolver interface used when an action class is
neither given explicitly nor found next to its controller.

A resolver is any callable ``(controller_class, action_name, class_name)``
returning the action class or ``None``. :class:`ModuleResolver` is the
stock implementation: it imports ``<package>.<controller_path>.<action>_action``
from a list of packages.
"""

from typing import Callable, List, Optional, Sequence, Type
import importlib
import logging
import re

from ..faults import ActionLoadFault


logger = logging.getLogger("classaction.resolver")


ActionResolver = Callable[[type, str, str], Optional[type]]


_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def camelize(name: str) -> str:
    """``edit_post`` -> ``EditPost``"""
    return "".join(part[:1].upper() + part[1:] for part in name.split("_") if part)


def underscore(name: str) -> str:
    """``PostComments`` -> ``post_comments``"""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def action_class_name(action_name: str, suffix: str = "Action") -> str:
    """``show`` -> ``ShowAction``"""
    return f"{camelize(action_name)}{suffix}"


def controller_path(controller_class: type) -> str:
    """``PostCommentsController`` -> ``post_comments``"""
    name = controller_class.__name__
    if name.endswith("Controller") and name != "Controller":
        name = name[: -len("Controller")]
    return underscore(name)


class ModuleResolver:
    """
    Import action classes from a list of packages.

    For ``PostsController#show`` and package ``app.actions`` the module
    ``app.actions.posts.show_action`` must define ``ShowAction``.

    Args:
        packages: Dotted package names, searched in order
    """

    def __init__(self, packages: Sequence[str]):
        self.packages: List[str] = list(packages)

    def module_names(self, controller_class: type, action_name: str) -> List[str]:
        base = f"{controller_path(controller_class)}.{action_name}_action"
        return [f"{package}.{base}" for package in self.packages]

    def __call__(self, controller_class: type, action_name: str, class_name: str) -> Type:
        candidates = self.module_names(controller_class, action_name)

        for module_name in candidates:
            try:
                module = importlib.import_module(module_name)
            except ModuleNotFoundError as exc:
                # Only a missing candidate is skipped; broken imports inside it propagate.
                if exc.name and (module_name == exc.name or module_name.startswith(exc.name + ".")):
                    continue
                raise

            logger.debug("Loaded %s for %s", module_name, class_name)
            action_class = getattr(module, class_name, None)
            if not isinstance(action_class, type):
                raise ActionLoadFault(
                    class_name,
                    f"module {module_name} did not define {class_name}",
                    modules=[module_name],
                )
            return action_class

        raise ActionLoadFault(
            class_name,
            "no matching module found",
            modules=candidates,
        )

    def __repr__(self) -> str:
        return f"ModuleResolver({self.packages!r})"
