"""Transport-level failures of the Redis Streams request/reply bus."""
from typing import Any, Mapping


class RpcError(Exception):
    """Base class for request/reply failures."""


class RpcTransportError(RpcError):
    """The request could not be delivered or the reply could not be read."""


class RpcTimeoutError(RpcTransportError):
    """No reply arrived before the deadline."""


class MalformedMessageError(RpcTransportError):
    """A stream entry does not have the request/reply shape."""


class RpcRemoteError(RpcError):
    """The remote handler answered with an error envelope."""

    def __init__(self, status: Any, message: str):
        super().__init__(message)
        self.status = status
        self.message = message

    @classmethod
    def from_payload(cls, payload: Any) -> "RpcRemoteError":
        if isinstance(payload, Mapping):
            return cls(payload.get("status"), str(payload.get("message", payload)))
        return cls(None, str(payload))


class RpcCommandNotFoundError(RpcError):
    """No handler is registered for the requested command."""

    status = 404

    def __init__(self, cmd: str):
        self.cmd = cmd
        self.message = f"There is no matching message handler defined for command {cmd!r}"
        super().__init__(self.message)
