"""
Controller Base Class

Provides the host Controller that class actions dispatch into, and the
Request it reads from.

The controller owns the per-request surface class actions rely on:
view assigns, the response body, render / redirect_to / respond_to /
respond_with, and the class-level ``format -> {only|except}`` table that
restricts which formats each action may respond with.
"""

from typing import Any, Callable, Dict, List, Optional
from dataclasses import dataclass, field
import copy
import html as html_lib
import logging

from ..assigns import collect_assigns
from ..config import get_config
from ..faults import DoubleRenderFault
from ..registry import WILDCARD_FORMAT
from ..templates import TemplateEngine, ViewContext
from .collector import FormatCollector, Responder
from .negotiation import media_type_for, render_json, requested_formats
from .resolver import controller_path


_MISSING = object()


@dataclass
class Request:
    """
    Minimal request description.

    Attributes:
        method: HTTP method
        path: Request path
        headers: Request headers
        query: Parsed query parameters
    """

    method: str = "GET"
    path: str = "/"
    headers: Dict[str, str] = field(default_factory=dict)
    query: Dict[str, Any] = field(default_factory=dict)

    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Case-insensitive header lookup."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return default


class Controller:
    """
    Base Controller class.

    Class Attributes:
        mimes_for_respond_to: ``format -> {"only": [...]} | {"except": [...]}``
            restrictions consulted by ``respond_with``; each subclass owns a copy
        template_engine: Engine used by ``render`` (built from config if unset)
        view_context_class: Class of the object templates see as ``view``
        logger: Logging sink

    Example:
        class PostsController(Controller):
            mimes_for_respond_to = {"html": {}, "json": {}}

            def show(self):
                self.post = Post.get(self.params["id"])
                self.respond_with(self.post)
    """

    mimes_for_respond_to: Dict[str, Dict[str, List[str]]] = {}
    template_engine: Optional[TemplateEngine] = None
    view_context_class = ViewContext
    logger: logging.Logger = logging.getLogger("classaction.controller")

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        cls.mimes_for_respond_to = copy.deepcopy(cls.mimes_for_respond_to)

    def __init__(self, request: Optional[Request] = None, params: Optional[Dict[str, Any]] = None):
        self._request = request or Request()
        self._params: Dict[str, Any] = {**self._request.query, **(params or {})}
        self._action_name: Optional[str] = None
        self._response_body: Optional[str] = None
        self._status = 200
        self._location: Optional[str] = None
        self._content_type: Optional[str] = None
        self._negotiated_format: Optional[str] = None
        self._template_engine: Optional[TemplateEngine] = None

    # ------------------------------------------------------------------
    # Request state
    # ------------------------------------------------------------------

    @property
    def request(self) -> Request:
        return self._request

    @property
    def params(self) -> Dict[str, Any]:
        return self._params

    @property
    def action_name(self) -> Optional[str]:
        return self._action_name

    @action_name.setter
    def action_name(self, name: Optional[str]) -> None:
        self._action_name = name

    @property
    def response_body(self) -> Optional[str]:
        return self._response_body

    @response_body.setter
    def response_body(self, body: Optional[str]) -> None:
        self._response_body = body

    @property
    def status(self) -> int:
        return self._status

    @property
    def location(self) -> Optional[str]:
        return self._location

    @property
    def content_type(self) -> Optional[str]:
        return self._content_type

    @property
    def negotiated_format(self) -> Optional[str]:
        return self._negotiated_format

    @negotiated_format.setter
    def negotiated_format(self, fmt: Optional[str]) -> None:
        self._negotiated_format = fmt

    def requested_formats(self) -> List[str]:
        return requested_formats(self.params, self.request.headers, get_config().default_format)

    @property
    def format(self) -> str:
        """The negotiated format, or the one the request prefers."""
        if self._negotiated_format:
            return self._negotiated_format
        preferred = self.requested_formats()[0]
        if preferred == WILDCARD_FORMAT:
            return get_config().default_format
        return preferred

    def view_assigns(self) -> Dict[str, Any]:
        """Template-visible variables set on this controller."""
        return collect_assigns(self)

    # ------------------------------------------------------------------
    # Format restrictions
    # ------------------------------------------------------------------

    @classmethod
    def respond_to_formats(
        cls,
        *formats: str,
        only: Optional[List[str]] = None,
        exclude: Optional[List[str]] = None,
    ) -> None:
        """
        Declare formats the controller responds to.

        Example:
            PostsController.respond_to_formats("html", "json")
            PostsController.respond_to_formats("csv", only=["index"])
        """
        for fmt in formats:
            restriction: Dict[str, List[str]] = {}
            if only is not None:
                restriction["only"] = list(only)
            if exclude is not None:
                restriction["except"] = list(exclude)
            cls.mimes_for_respond_to[fmt] = restriction

    @classmethod
    def mimes_for_action(cls, action: Optional[str]) -> List[str]:
        """Formats ``action`` may respond with; exclusion wins over inclusion."""
        formats = []
        for fmt, restriction in cls.mimes_for_respond_to.items():
            if action in restriction.get("except", []):
                continue
            if "only" in restriction and action not in restriction["only"]:
                continue
            formats.append(fmt)
        return formats

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def get_template_engine(self) -> TemplateEngine:
        engine = type(self).template_engine or self._template_engine
        if engine is None:
            engine = self._template_engine = TemplateEngine.from_config(get_config())
        return engine

    def view_context(self) -> ViewContext:
        """Build the object templates are rendered against."""
        return self.view_context_class(self)

    def default_template_name(self, fmt: Optional[str] = None) -> str:
        return f"{controller_path(type(self))}/{self.action_name}.{fmt or self.format}"

    def render(
        self,
        template: Optional[str] = None,
        *,
        context: Optional[Dict[str, Any]] = None,
        text: Optional[str] = None,
        html: Optional[str] = None,
        json: Any = _MISSING,
        status: int = 200,
        content_type: Optional[str] = None,
    ) -> str:
        """
        Produce the response body.

        Exactly one of ``template`` (default: ``<controller>/<action>.<format>``),
        ``text``, ``html`` or ``json`` is used.

        Raises:
            DoubleRenderFault: If a response body was already produced
        """
        if self._response_body is not None:
            raise DoubleRenderFault(self.action_name)

        if json is not _MISSING:
            body, default_type = render_json(json), media_type_for("json")
        elif text is not None:
            body, default_type = str(text), media_type_for("text")
        elif html is not None:
            body, default_type = html, media_type_for("html")
        else:
            template = template or self.default_template_name()
            body = self._render_template(template, context)
            default_type = media_type_for(template.rsplit(".", 1)[-1])

        self._status = status
        self._content_type = content_type or default_type
        self._response_body = body
        return body

    def _render_template(self, template: str, context: Optional[Dict[str, Any]]) -> str:
        variables = self.view_context().to_dict()
        variables.update(context or {})
        return self.get_template_engine().render(template, variables)

    def default_render(self, fmt: Optional[str] = None) -> str:
        return self.render(self.default_template_name(fmt))

    def redirect_to(self, location: str, status: int = 302) -> str:
        if self._response_body is not None:
            raise DoubleRenderFault(self.action_name)

        self._status = status
        self._location = location
        self._content_type = media_type_for("html")
        self._response_body = (
            f'<html><body>You are being <a href="{html_lib.escape(location)}">redirected</a>.</body></html>'
        )
        return self._response_body

    def respond_to(self, block: Callable[[FormatCollector], Any]) -> Optional[str]:
        """
        Respond per format.

        Example:
            def handle(collector):
                collector.add("html")
                collector.add("json", lambda: self.render(json=self.post))
            self.respond_to(handle)
        """
        collector = FormatCollector()
        block(collector)
        return Responder(self, collector).respond()

    def respond_with(
        self,
        resource: Any,
        block: Optional[Callable[[FormatCollector], Any]] = None,
    ) -> Optional[str]:
        """
        Respond with ``resource`` in any format allowed for the current action.

        ``block`` may add formats or attach callbacks to them.
        """
        collector = FormatCollector(type(self).mimes_for_action(self.action_name))
        if block is not None:
            block(collector)
        return Responder(self, collector, resource).respond()

    # ------------------------------------------------------------------
    # Processing
    # ------------------------------------------------------------------

    def process(self, action_name: str) -> Optional[str]:
        """Run ``action_name`` and render its default template if it produced no body."""
        self._action_name = action_name
        self.logger.debug("Processing %s#%s", type(self).__name__, action_name)

        getattr(self, action_name)()

        if self._response_body is None:
            self.default_render()
        return self._response_body
