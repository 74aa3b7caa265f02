"""Flatten request validation errors into envelope messages."""

from typing import Any, Iterable

# Location prefixes FastAPI adds that carry no meaning for clients
LOCATION_SOURCES = {"body", "query", "path", "header", "cookie"}


def format_validation_errors(errors: Iterable[dict[str, Any]]) -> list[str]:
    """Turn pydantic error dicts into "field: message" strings.

    Password complexity failures expand to one message per broken rule.
    """
    messages: list[str] = []
    for error in errors:
        if error.get("type") == "password_complexity":
            messages.extend(error.get("ctx", {}).get("rules", []))
            continue

        field = ".".join(str(part) for part in error.get("loc", ()) if part not in LOCATION_SOURCES)
        message = str(error.get("msg", "Invalid value")).removeprefix("Value error, ")
        messages.append(f"{field}: {message}" if field else message)
    return messages
