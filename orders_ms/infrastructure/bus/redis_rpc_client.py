"""
Redis Streams request/reply client.

Sends a command to another service's request stream and waits for the
answer on a private reply stream.
"""
import logging
from typing import Any, Optional
from uuid import uuid4

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from .errors import MalformedMessageError, RpcRemoteError, RpcTimeoutError, RpcTransportError
from .messages import RpcReply, RpcRequest


logger = logging.getLogger(__name__)


class RedisRpcClient:
    """
    Calls commands on a remote service over Redis Streams.

    Flow for one call:
    1. XADD the request to the remote service's stream, with ``reply_to``
       naming a fresh reply stream
    2. XREAD the reply stream, blocking until the timeout
    3. DEL the reply stream

    Failures are split in two: ``RpcTransportError`` (Redis down, timeout,
    garbage reply) and ``RpcRemoteError`` (the remote handler answered with
    an error envelope). No retry happens here.
    """

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        stream_name: str = "products:rpc",
        reply_prefix: str = "orders-ms:reply",
        timeout_seconds: float = 5.0,
        redis_client: Optional[aioredis.Redis] = None,
    ):
        """
        Initialize Redis RPC client.

        Args:
            redis_url: Redis connection URL
            stream_name: Request stream of the remote service
            reply_prefix: Prefix of the per-request reply streams
            timeout_seconds: How long to wait for a reply
            redis_client: Already connected client (tests, shared pools)
        """
        self.redis_url = redis_url
        self.stream_name = stream_name
        self.reply_prefix = reply_prefix
        self.timeout_seconds = timeout_seconds
        self._redis_client = redis_client

    async def connect(self) -> None:
        """Establish Redis connection."""
        if self._redis_client is None:
            try:
                self._redis_client = await aioredis.from_url(
                    self.redis_url,
                    encoding="utf-8",
                    decode_responses=True
                )
                await self._redis_client.ping()
                logger.info(f"✅ RPC client connected to Redis: {self.redis_url}")
            except RedisError as e:
                self._redis_client = None
                raise RpcTransportError(f"Failed to connect to Redis: {e}") from e

    async def disconnect(self) -> None:
        """Close Redis connection."""
        if self._redis_client:
            await self._redis_client.aclose()
            self._redis_client = None
            logger.info("✅ RPC client disconnected from Redis")

    async def send(self, cmd: str, data: Any = None) -> Any:
        """
        Call ``cmd`` on the remote service and return its response.

        Args:
            cmd: Command name, e.g. ``validateProducts``
            data: JSON-serializable payload

        Returns:
            The decoded ``response`` of the reply

        Raises:
            RpcTimeoutError: No reply within ``timeout_seconds``
            RpcTransportError: Redis failure or malformed reply
            RpcRemoteError: The remote handler replied with an error
        """
        if self._redis_client is None:
            await self.connect()

        request = RpcRequest(
            cmd=cmd,
            data=data,
            reply_to=f"{self.reply_prefix}:{uuid4().hex}",
        )
        block_ms = max(1, int(self.timeout_seconds * 1000))

        try:
            await self._redis_client.xadd(self.stream_name, request.to_fields())
            logger.debug(f"Sent {cmd} to {self.stream_name} (id={request.id})")

            entries = await self._redis_client.xread(
                streams={request.reply_to: "0"},
                count=1,
                block=block_ms,
            )
        except RedisError as e:
            raise RpcTransportError(f"{cmd} to {self.stream_name} failed: {e}") from e
        finally:
            await self._drop_reply_stream(request.reply_to)

        if not entries:
            raise RpcTimeoutError(
                f"No reply to {cmd} from {self.stream_name} within {self.timeout_seconds}s"
            )

        _, stream_entries = entries[0]
        _, fields = stream_entries[0]
        reply = RpcReply.from_fields(fields)

        if reply.id != request.id:
            raise MalformedMessageError(
                f"Reply id {reply.id} does not match request id {request.id}"
            )
        if reply.is_error:
            raise RpcRemoteError.from_payload(reply.err)

        return reply.response

    async def _drop_reply_stream(self, key: str) -> None:
        try:
            await self._redis_client.delete(key)
        except RedisError as e:
            # Reply streams also expire server-side
            logger.warning(f"Could not delete reply stream {key}: {e}")

    async def __aenter__(self):
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.disconnect()
