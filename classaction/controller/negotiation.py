"""
Format negotiation and renderers.

Maps format names (``html``, ``json``...) to media types and picks the
format a request asks for.

Negotiation order:
1. Explicit ``format`` param: ``?format=json``
2. ``Accept`` header negotiation (quality factors)
3. Configured default format
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..registry import WILDCARD_FORMAT

__all__ = [
    "MIME_TYPES",
    "media_type_for",
    "format_for_media_type",
    "parse_accept",
    "requested_formats",
    "select_format",
    "render_json",
]


MIME_TYPES: Dict[str, str] = {
    "html": "text/html",
    "text": "text/plain",
    "json": "application/json",
    "xml": "application/xml",
    "js": "text/javascript",
    "css": "text/css",
    "csv": "text/csv",
    "yaml": "application/x-yaml",
}


def media_type_for(fmt: str) -> str:
    return MIME_TYPES.get(fmt, "application/octet-stream")


def format_for_media_type(media_type: str) -> Optional[str]:
    for fmt, known in MIME_TYPES.items():
        if known == media_type:
            return fmt
    return None


# ═══════════════════════════════════════════════════════════════════════════
#  Accept header parser
# ═══════════════════════════════════════════════════════════════════════════

def parse_accept(header: Optional[str]) -> List[Tuple[str, float]]:
    """
    Parse an ``Accept`` header into a list of ``(media_type, quality)``
    sorted by quality descending.

    Examples::

        parse_accept("text/html, application/json;q=0.9, */*;q=0.1")
        # → [("text/html", 1.0), ("application/json", 0.9), ("*/*", 0.1)]
    """
    if not header or not header.strip():
        return [("*/*", 1.0)]

    entries: List[Tuple[str, float]] = []
    for part in header.split(","):
        part = part.strip()
        if not part:
            continue
        segments = part.split(";")
        media = segments[0].strip()
        quality = 1.0
        for seg in segments[1:]:
            seg = seg.strip()
            if seg.startswith("q="):
                try:
                    quality = float(seg[2:])
                except (ValueError, TypeError):
                    quality = 1.0
        entries.append((media, quality))

    # sort() is stable, so equal qualities keep header order
    entries.sort(key=lambda x: x[1], reverse=True)
    return entries


def requested_formats(
    params: Optional[Dict[str, Any]],
    headers: Optional[Dict[str, str]],
    default: str,
) -> List[str]:
    """
    Formats the request accepts, most preferred first.

    ``*/*`` is reported as the wildcard format.
    """
    explicit = (params or {}).get("format")
    if explicit:
        return [str(explicit)]

    accept = None
    if headers:
        accept = headers.get("accept") or headers.get("Accept")
    if not accept:
        return [default]

    formats: List[str] = []
    for media, quality in parse_accept(accept):
        if quality <= 0:
            continue
        if media == "*/*":
            fmt = WILDCARD_FORMAT
        else:
            fmt = format_for_media_type(media)
        if fmt and fmt not in formats:
            formats.append(fmt)
    return formats or [default]


def select_format(
    requested: Sequence[str],
    available: Sequence[str],
    default: Optional[str] = None,
) -> Optional[str]:
    """
    Pick the response format.

    ``available`` is in declaration order and may contain the wildcard,
    which accepts any requested format. A wildcard request against a
    wildcard-only ``available`` resolves to ``default``.
    """
    for fmt in requested:
        if fmt == WILDCARD_FORMAT:
            for candidate in available:
                if candidate != WILDCARD_FORMAT:
                    return candidate
            if default and WILDCARD_FORMAT in available:
                return default
            continue
        if fmt in available:
            return fmt
        if WILDCARD_FORMAT in available:
            return fmt
    return None


# ═══════════════════════════════════════════════════════════════════════════
#  Renderers
# ═══════════════════════════════════════════════════════════════════════════

def render_json(data: Any, *, indent: Optional[int] = None) -> str:
    def _default(o):
        if isinstance(o, (set, tuple)):
            return list(o)
        if hasattr(o, "isoformat"):
            return o.isoformat()
        if hasattr(o, "to_dict"):
            return o.to_dict()
        if hasattr(o, "__dict__"):
            return {k: v for k, v in o.__dict__.items() if not k.startswith("_")}
        return str(o)

    return json.dumps(data, default=_default, indent=indent, ensure_ascii=False)

