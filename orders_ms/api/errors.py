"""
RPC error mapping.

The single place where failures become the ``{status, message}`` envelope
sent back to callers.
"""
import logging
from http import HTTPStatus
from typing import Any, Dict, Mapping, Optional, Tuple

from pydantic import ValidationError

from orders_ms.domain.exceptions import (
    OrderNotFoundError,
    OrderValidationError,
    UpstreamUnavailableError,
)


logger = logging.getLogger(__name__)

DEFAULT_STATUS = HTTPStatus.BAD_REQUEST.value

# Checked in order, first match wins
_STATUS_BY_ERROR = (
    (OrderNotFoundError, HTTPStatus.NOT_FOUND.value),
    (OrderValidationError, HTTPStatus.BAD_REQUEST.value),
    (UpstreamUnavailableError, HTTPStatus.SERVICE_UNAVAILABLE.value),
    (ValidationError, HTTPStatus.BAD_REQUEST.value),
)


def to_rpc_error(error: BaseException) -> Dict[str, Any]:
    """
    Map any failure to the RPC error envelope.

    - A failure that already carries a status and a message (as attributes,
      or as a ``{status, message}`` mapping argument) passes through, with a
      non-numeric status replaced by 400.
    - Domain failures get their status from the table above.
    - Anything else becomes 400 with the failure's string form.
    """
    status, message = _classify(error)
    logger.error(f"RPC error {status}: {message}")
    return {"status": status, "message": message}


def _classify(error: BaseException) -> Tuple[int, str]:
    carried = _carried_status(error)
    if carried is not None:
        return carried

    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status, _message_of(error)

    return DEFAULT_STATUS, _message_of(error)


def _carried_status(error: BaseException) -> Optional[Tuple[int, str]]:
    if len(error.args) == 1 and isinstance(error.args[0], Mapping):
        payload = error.args[0]
        if "status" in payload and "message" in payload:
            return _coerce_status(payload["status"]), str(payload["message"])

    status = getattr(error, "status", None)
    message = getattr(error, "message", None)
    if status is not None and message is not None:
        return _coerce_status(status), str(message)
    return None


def _coerce_status(status: Any) -> int:
    if isinstance(status, bool):
        return DEFAULT_STATUS
    try:
        return int(str(status).strip())
    except ValueError:
        return DEFAULT_STATUS


def _message_of(error: BaseException) -> str:
    if isinstance(error, ValidationError):
        return "; ".join(
            f"{'.'.join(str(part) for part in detail['loc']) or 'payload'}: {detail['msg']}"
            for detail in error.errors()
        )
    return str(error) or type(error).__name__
