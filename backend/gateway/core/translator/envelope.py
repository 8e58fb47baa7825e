"""
Cloud Code Envelope

Wraps a Gemini CLI request body in the v1internal envelope expected by the
Cloud Code Assist / Antigravity endpoints.
"""
from typing import Any, Dict, Optional

from .ids import IdProvider, default_ids

ENVELOPE_REQUEST_FIELDS = ("contents", "systemInstruction", "generationConfig", "safetySettings", "tools")


def credentials_project_id(credentials: Any) -> Optional[str]:
    """Read a project id from a credentials dict or object, if it has one."""
    if credentials is None:
        return None
    if isinstance(credentials, dict):
        return credentials.get("projectId") or credentials.get("project_id")
    return getattr(credentials, "project_id", None) or getattr(credentials, "projectId", None)


def wrap_in_cloud_code_envelope(
    model: str,
    gemini_cli_body: Dict[str, Any],
    credentials: Any = None,
    ids: Optional[IdProvider] = None,
    user_agent: str = "gemini-cli",
) -> Dict[str, Any]:
    """
    Wrap a Gemini CLI body for the Cloud Code endpoint.

    Uses the account's project id when the credentials carry one, otherwise
    a generated one. Request and session ids are fresh on every call.
    """
    ids = ids or default_ids
    inner_request: Dict[str, Any] = {"sessionId": ids.session_id()}
    for key in ENVELOPE_REQUEST_FIELDS:
        if gemini_cli_body.get(key) is not None:
            inner_request[key] = gemini_cli_body[key]

    return {
        "project": credentials_project_id(credentials) or ids.project_id(),
        "model": model,
        "userAgent": user_agent,
        "requestId": ids.request_id(),
        "request": inner_request,
    }
