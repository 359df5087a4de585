"""Message bus infrastructure - Redis Streams request/reply."""
from .errors import (
    MalformedMessageError,
    RpcCommandNotFoundError,
    RpcError,
    RpcRemoteError,
    RpcTimeoutError,
    RpcTransportError,
)
from .messages import RpcReply, RpcRequest
from .redis_rpc_client import RedisRpcClient
from .redis_rpc_server import RedisRpcServer

__all__ = [
    "MalformedMessageError",
    "RedisRpcClient",
    "RedisRpcServer",
    "RpcCommandNotFoundError",
    "RpcError",
    "RpcRemoteError",
    "RpcReply",
    "RpcRequest",
    "RpcTimeoutError",
    "RpcTransportError",
]
