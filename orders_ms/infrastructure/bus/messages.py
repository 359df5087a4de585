"""
Request/reply envelopes carried in Redis Stream entries.

Request entry:  {"id", "pattern": '{"cmd": ...}', "data": <json>, "reply_to"}
Reply entry:    {"id", "response": <json>}  or  {"id", "err": <json>}
"""
import json
from typing import Any, Dict, Mapping, Optional
from uuid import uuid4

from pydantic import BaseModel, Field, ValidationError

from .errors import MalformedMessageError


def _dumps(value: Any) -> str:
    return json.dumps(value, default=str)


class RpcRequest(BaseModel):
    """A command addressed to a service, with where to send the answer."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    cmd: str
    data: Any = None
    reply_to: Optional[str] = None

    def to_fields(self) -> Dict[str, str]:
        fields = {
            "id": self.id,
            "pattern": _dumps({"cmd": self.cmd}),
            "data": _dumps(self.data),
        }
        if self.reply_to:
            fields["reply_to"] = self.reply_to
        return fields

    @classmethod
    def from_fields(cls, fields: Mapping[str, str]) -> "RpcRequest":
        try:
            pattern = json.loads(fields["pattern"])
            cmd = pattern["cmd"] if isinstance(pattern, dict) else pattern
            return cls(
                id=fields["id"],
                cmd=cmd,
                data=json.loads(fields.get("data", "null")),
                reply_to=fields.get("reply_to"),
            )
        except (KeyError, TypeError, ValueError, ValidationError) as e:
            raise MalformedMessageError(f"Malformed request entry {dict(fields)}: {e}") from e


class RpcReply(BaseModel):
    """The answer to one request: a result or an error envelope."""

    id: str
    response: Any = None
    err: Optional[Any] = None

    @property
    def is_error(self) -> bool:
        return self.err is not None

    def to_fields(self) -> Dict[str, str]:
        if self.is_error:
            return {"id": self.id, "err": _dumps(self.err)}
        return {"id": self.id, "response": _dumps(self.response)}

    @classmethod
    def from_fields(cls, fields: Mapping[str, str]) -> "RpcReply":
        try:
            if "err" in fields:
                return cls(id=fields["id"], err=json.loads(fields["err"]))
            if "response" in fields:
                return cls(id=fields["id"], response=json.loads(fields["response"]))
        except (KeyError, TypeError, ValueError, ValidationError) as e:
            raise MalformedMessageError(f"Malformed reply entry {dict(fields)}: {e}") from e
        raise MalformedMessageError(f"Reply entry carries neither response nor err: {dict(fields)}")
