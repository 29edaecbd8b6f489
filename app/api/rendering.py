"""
Response rendering for the deletion endpoints.

The status page is read by people as well as by the platform, so it answers
in HTML unless JSON is asked for with `format=json` or an Accept header.
"""

from html import escape
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.responses import HTMLResponse, JSONResponse, Response

from app.schemas.deletion import DeletionStatusView

_ERROR_PAGES = {
    "missing_or_invalid_id": (
        "Missing or Invalid ID",
        "The confirmation code (?id=) is required and must be a hex string.",
    ),
    "not_found": (
        "Request Not Found",
        "No deletion request matches this confirmation code.",
    ),
    "method_not_allowed": (
        "Method Not Allowed",
        "This page only answers GET requests.",
    ),
}
_DEFAULT_ERROR_PAGE = ("Server Error", "There was a problem loading this request.")


def wants_json(request: Request) -> bool:
    if request.query_params.get("format") == "json":
        return True
    return "application/json" in request.headers.get("accept", "").lower()


def is_status_page(request: Request) -> bool:
    return request.url.path.rstrip("/").endswith("/status")


def _page(title: str, body: str) -> str:
    return (
        "<!doctype html>\n<meta charset=\"utf-8\">\n"
        f"<title>{escape(title)}</title>\n{body}\n"
    )


def render_error(
    request: Request,
    status_code: int,
    content: Dict[str, Any],
    headers: Optional[Dict[str, str]] = None,
) -> Response:
    """Error response in the format the caller negotiated."""
    if is_status_page(request) and not wants_json(request):
        heading, message = _ERROR_PAGES.get(content.get("error"), _DEFAULT_ERROR_PAGE)
        return HTMLResponse(
            _page(heading, f"<h1>{escape(heading)}</h1>\n<p>{escape(message)}</p>"),
            status_code=status_code,
            headers=headers,
        )
    return JSONResponse(content, status_code=status_code, headers=headers)


def _row(label: str, value: Optional[str]) -> str:
    return f"<p><b>{escape(label)}:</b> {escape(value or '—')}</p>"


def render_status(request: Request, view: DeletionStatusView) -> Response:
    if wants_json(request):
        return JSONResponse(view.to_public_dict())

    rows = [
        _row("Confirmation Code", view.confirmation_code),
        _row("User ID", view.user_id),
        _row("Status", view.status),
    ]
    if view.app_name or view.app_id:
        rows.append(_row("App", view.app_name or view.app_id))
    if view.created_at:
        rows.append(_row("Requested", view.created_at))
    if view.updated_at:
        rows.append(_row("Updated", view.updated_at))

    return HTMLResponse(_page("Deletion Status", "<h1>Data Deletion Status</h1>\n" + "\n".join(rows)))
