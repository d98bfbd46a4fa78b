from __future__ import annotations

import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)

Payload = dict[str, Any]
SuccessCallback = Callable[[Any], None]
ErrorCallback = Callable[[Payload], None]


def log_errors(response: Payload) -> None:
    messages = [str(err.get("message") or err) if isinstance(err, dict) else str(err) for err in response.get("errors") or []]
    logger.warning("Task API request failed: %s", "; ".join(messages) or "unknown error")


def error_payload(message: str, **extra: Any) -> Payload:
    error: dict[str, Any] = {"message": message}
    error.update(extra)
    return {"errors": [error]}


class ResponseDispatcher:
    """Routes a ``{data, errors}`` payload to exactly one of two callbacks."""

    def __init__(self, on_error: ErrorCallback | None = None) -> None:
        self.on_error: ErrorCallback = on_error or log_errors

    def dispatch(
        self,
        response: Payload,
        on_success: SuccessCallback,
        on_error: ErrorCallback | None = None,
    ) -> None:
        if response.get("errors") is not None:
            (on_error or self.on_error)(response)
        else:
            on_success(response.get("data"))
