import html
from typing import Any


def sanitize_payload(body: dict[str, Any]) -> dict[str, Any]:
    """Trim and HTML-escape every string value; other values pass through."""
    cleaned = {}
    for key, value in body.items():
        if isinstance(value, str):
            value = html.escape(value.strip(), quote=True)
        cleaned[key] = value
    return cleaned
