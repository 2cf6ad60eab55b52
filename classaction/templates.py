"""
Templates - Jinja2 rendering for controllers.

Provides:
- TemplateEngine: thin Jinja2 environment wrapper
- ViewContext: the object templates see as ``view``; class actions mix
  their helper methods into it
"""

from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, TYPE_CHECKING

from jinja2 import BaseLoader, DictLoader, Environment, FileSystemLoader, Template, select_autoescape

if TYPE_CHECKING:
    from .config import ClassActionConfig
    from .controller.base import Controller


class TemplateEngine:
    """
    Jinja2 template engine.

    Args:
        search_paths: Template directories
        templates: In-memory ``name -> source`` mapping (used when given)
        autoescape: Enable HTML autoescaping
        globals: Custom global variables/functions
        filters: Custom filters

    Example:
        engine = TemplateEngine(templates={"posts/show.html": "{{ post.title }}"})
        html = engine.render("posts/show.html", {"post": post})
    """

    def __init__(
        self,
        search_paths: Optional[Sequence[str]] = None,
        *,
        templates: Optional[Mapping[str, str]] = None,
        autoescape: bool = True,
        globals: Optional[Dict[str, Any]] = None,
        filters: Optional[Dict[str, Any]] = None,
    ):
        loader: BaseLoader
        if templates is not None:
            loader = DictLoader(dict(templates))
        else:
            loader = FileSystemLoader([str(p) for p in (search_paths or [])])

        self.env = Environment(
            loader=loader,
            autoescape=select_autoescape(
                enabled_extensions=["html", "htm", "xml"],
                default_for_string=True,
            ) if autoescape else False,
        )

        if filters:
            self.env.filters.update(filters)
        if globals:
            self.env.globals.update(globals)

    @classmethod
    def from_config(cls, config: "ClassActionConfig") -> "TemplateEngine":
        return cls(config.template_dirs, autoescape=config.autoescape)

    def get_template(self, name: str) -> Template:
        return self.env.get_template(name)

    def render(self, template_name: str, context: Optional[Mapping[str, Any]] = None) -> str:
        """
        Render a template.

        Raises:
            TemplateNotFound: If template doesn't exist
        """
        return self.get_template(template_name).render(**dict(context or {}))


class ViewContext:
    """
    Template-side view of a controller.

    Helper mixins (see ``Action.helpers``) are combined with this class; their
    methods reach the active class action through :attr:`controller`.
    """

    helper_names: Tuple[str, ...] = ()

    def __init__(self, controller: "Controller"):
        self.controller = controller

    def to_dict(self) -> Dict[str, Any]:
        """
        Flat Jinja2 context.

        Priority: assigns > helpers > framework variables
        """
        controller = self.controller
        context: Dict[str, Any] = {
            "view": self,
            "controller": controller,
            "request": controller.request,
            "params": controller.params,
        }

        for name in self.helper_names:
            context[name] = getattr(self, name)

        context.update(controller.view_assigns())
        return context
