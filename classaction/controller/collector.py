"""
Format collection and responding.

``respond_to`` and ``respond_with`` hand a :class:`FormatCollector` to a
block that registers one callback per format; the :class:`Responder` then
negotiates the request format and runs the matching callback, falling back
to a default response.
"""

from typing import Any, Callable, Dict, List, Optional, TYPE_CHECKING

from ..config import get_config
from ..faults import UnknownFormatFault
from ..registry import WILDCARD_FORMAT
from .negotiation import media_type_for, select_format

if TYPE_CHECKING:
    from .base import Controller


FormatBlock = Callable[[], Any]

_MISSING = object()


class FormatCollector:
    """
    Ordered ``format -> callback`` table.

    A format may be registered without a callback, in which case the default
    response for that format is used.
    """

    def __init__(self, formats: Optional[List[str]] = None):
        self._blocks: Dict[str, Optional[FormatBlock]] = {}
        for fmt in formats or []:
            self._blocks[fmt] = None

    def add(self, fmt: str, block: Optional[FormatBlock] = None) -> None:
        if block is not None or fmt not in self._blocks:
            self._blocks[fmt] = block

    def any(self, block: Optional[FormatBlock] = None) -> None:
        self.add(WILDCARD_FORMAT, block)

    @property
    def formats(self) -> List[str]:
        return list(self._blocks)

    def block_for(self, fmt: str) -> Optional[FormatBlock]:
        if fmt in self._blocks:
            return self._blocks[fmt]
        return self._blocks.get(WILDCARD_FORMAT)

    def __contains__(self, fmt: str) -> bool:
        return fmt in self._blocks

    def __len__(self) -> int:
        return len(self._blocks)

    def __repr__(self) -> str:
        return f"FormatCollector({self.formats!r})"


class Responder:
    """
    Produce the response for one negotiated format.

    Args:
        controller: Controller being responded for
        collector: Formats the action can respond with
        resource: Object passed to ``respond_with`` (omitted for ``respond_to``)
    """

    def __init__(self, controller: "Controller", collector: FormatCollector, resource: Any = _MISSING):
        self.controller = controller
        self.collector = collector
        self.resource = resource

    def respond(self) -> Optional[str]:
        """Run the response; returns the negotiated format."""
        fmt = select_format(
            self.controller.requested_formats(),
            self.collector.formats,
            get_config().default_format,
        )
        if fmt is None:
            raise UnknownFormatFault(
                self.controller.requested_formats()[0],
                self.collector.formats,
                self.controller.action_name,
            )

        self.controller.negotiated_format = fmt

        block = self.collector.block_for(fmt)
        if block is not None:
            block()

        if self.controller.response_body is None:
            self.default_response(fmt)
        return fmt

    def default_response(self, fmt: str) -> None:
        if self.resource is _MISSING or fmt == "html":
            self.controller.default_render(fmt)
            return

        if fmt == "json":
            self.controller.render(json=self.resource)
            return

        serializer = getattr(self.resource, f"to_{fmt}", None)
        if callable(serializer):
            self.controller.render(text=serializer(), content_type=media_type_for(fmt))
            return

        raise UnknownFormatFault(fmt, self.collector.formats, self.controller.action_name)
