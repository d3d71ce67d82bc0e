"""HTML fallback pages for browsers hitting the public fetch endpoint."""

import html
from typing import List, Tuple

from fastapi import Request
from fastapi.responses import HTMLResponse

_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <meta name="robots" content="noindex">
  <title>{title}</title>
  <style>
    body {{ font-family: system-ui, sans-serif; max-width: 36rem; margin: 4rem auto; padding: 0 1rem; color: #333; }}
    h1 {{ font-size: 1.5rem; }}
    p {{ line-height: 1.5; }}
  </style>
</head>
<body>
  <h1>{title}</h1>
  <p>{message}</p>
</body>
</html>
"""

_TITLES = {
    400: "Invalid link",
    404: "Document not found",
    410: "Document expired",
    500: "Something went wrong",
}


def _parse_accept(accept: str) -> List[Tuple[str, float]]:
    """Split an Accept header into ``(media_type, q)`` pairs in header order."""
    ranges = []
    for part in accept.split(","):
        media_type, _, params = part.partition(";")
        media_type = media_type.strip().lower()
        if not media_type:
            continue
        q = 1.0
        for param in params.split(";"):
            name, _, value = param.partition("=")
            if name.strip().lower() == "q":
                try:
                    q = float(value.strip())
                except ValueError:
                    q = 0.0
                if not 0.0 <= q <= 1.0:
                    q = 0.0
        ranges.append((media_type, q))
    return ranges


def _preference(ranges: List[Tuple[str, float]], media_type: str) -> Tuple[float, int]:
    """Quality and header position of the explicit entry for ``media_type``."""
    for position, (candidate, q) in enumerate(ranges):
        if candidate == media_type:
            return q, position
    return 0.0, len(ranges)


def wants_html(request: Request) -> bool:
    """True when the client prefers an HTML page over JSON (browsers, crawlers).

    Only explicit ``text/html`` and ``application/json`` entries count; a bare
    ``*/*`` keeps the JSON default. Equal quality goes to whichever is listed first.
    """
    ranges = _parse_accept(request.headers.get("accept", ""))
    html_q, html_pos = _preference(ranges, "text/html")
    if html_q <= 0:
        return False
    json_q, json_pos = _preference(ranges, "application/json")
    if html_q != json_q:
        return html_q > json_q
    return html_pos < json_pos


def render_error_page(status_code: int, message: str) -> HTMLResponse:
    """Render a minimal, uncached error page."""
    title = _TITLES.get(status_code, _TITLES[500])
    body = _PAGE.format(title=html.escape(title), message=html.escape(message))
    return HTMLResponse(
        content=body,
        status_code=status_code,
        headers={"Cache-Control": "no-cache, no-store, must-revalidate"},
    )
