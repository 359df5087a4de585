"""
Redis Streams request/reply server.

Consumes command requests from the service's stream through a consumer
group, runs the registered handler for each one and writes the reply to the
stream named by the request's ``reply_to``.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Set, Tuple

import redis.asyncio as aioredis
from redis.exceptions import RedisError, ResponseError

from .errors import MalformedMessageError, RpcCommandNotFoundError
from .messages import RpcReply, RpcRequest


logger = logging.getLogger(__name__)

Handler = Callable[[Any], Awaitable[Any]]
ErrorMapper = Callable[[BaseException], Dict[str, Any]]


class RedisRpcServer:
    """
    Serves commands from a Redis Stream.

    Features:
    - Consumer groups for load balancing across service instances
    - One asyncio task per request, bounded by ``max_concurrency``
    - ACK after the reply is written; a request whose reply could not be
      written stays pending
    - Reply streams expire after ``reply_ttl_seconds``

    Handler failures never escape: they are turned into error envelopes by
    ``error_mapper`` and sent back to the caller.
    """

    def __init__(
        self,
        error_mapper: ErrorMapper,
        redis_url: str = "redis://localhost:6379/0",
        stream_name: str = "orders:rpc",
        consumer_group: str = "orders-ms",
        consumer_name: str = "orders-ms-1",
        reply_ttl_seconds: int = 60,
        max_concurrency: int = 20,
        redis_client: Optional[aioredis.Redis] = None,
    ):
        """
        Initialize Redis RPC server.

        Args:
            error_mapper: Turns any exception into a ``{status, message}`` dict
            redis_url: Redis connection URL
            stream_name: Request stream this service listens on
            consumer_group: Consumer group name
            consumer_name: Unique consumer name (for load balancing)
            reply_ttl_seconds: Expiry of reply streams
            max_concurrency: Requests handled at the same time
            redis_client: Already connected client (tests, shared pools)
        """
        self.redis_url = redis_url
        self.stream_name = stream_name
        self.consumer_group = consumer_group
        self.consumer_name = consumer_name
        self.reply_ttl_seconds = reply_ttl_seconds
        self._error_mapper = error_mapper
        self._handlers: Dict[str, Handler] = {}
        self._redis_client = redis_client
        self._slots = asyncio.Semaphore(max_concurrency)
        self._tasks: Set[asyncio.Task] = set()
        self._running = False

    @property
    def commands(self) -> List[str]:
        return sorted(self._handlers)

    def register(self, cmd: str, handler: Handler) -> None:
        """Route requests for ``cmd`` to ``handler``."""
        if cmd in self._handlers:
            raise ValueError(f"Handler for {cmd!r} already registered")
        self._handlers[cmd] = handler

    async def connect(self) -> None:
        """Establish Redis connection and create consumer group."""
        if self._redis_client is None:
            try:
                self._redis_client = await aioredis.from_url(
                    self.redis_url,
                    encoding="utf-8",
                    decode_responses=True
                )
                await self._redis_client.ping()
                logger.info(f"✅ Connected to Redis: {self.redis_url}")
            except RedisError as e:
                logger.error(f"Failed to connect to Redis: {e}")
                self._redis_client = None
                raise

        try:
            await self._redis_client.xgroup_create(
                name=self.stream_name,
                groupname=self.consumer_group,
                id="0",
                mkstream=True
            )
            logger.info(f"✅ Created consumer group: {self.consumer_group}")
        except ResponseError as e:
            if "BUSYGROUP" in str(e):
                logger.info(f"Consumer group {self.consumer_group} already exists")
            else:
                raise

    async def disconnect(self) -> None:
        """Wait for in-flight requests, then close the Redis connection."""
        self._running = False
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        if self._redis_client:
            await self._redis_client.aclose()
            self._redis_client = None
            logger.info("✅ Disconnected from Redis")

    async def read_requests(
        self,
        batch_size: int = 10,
        block_ms: int = 1000
    ) -> List[Tuple[str, Dict[str, str]]]:
        """
        Read new request entries from the stream.

        Returns:
            List of ``(entry_id, fields)`` tuples
        """
        entries = await self._redis_client.xreadgroup(
            groupname=self.consumer_group,
            consumername=self.consumer_name,
            streams={self.stream_name: ">"},  # ">" means new messages
            count=batch_size,
            block=block_ms
        )
        if not entries:
            return []

        return [
            (entry_id, fields)
            for _, stream_entries in entries
            for entry_id, fields in stream_entries
        ]

    async def dispatch(self, request: RpcRequest) -> RpcReply:
        """Run the handler for ``request`` and wrap its outcome in a reply."""
        handler = self._handlers.get(request.cmd)
        try:
            if handler is None:
                raise RpcCommandNotFoundError(request.cmd)
            result = await handler(request.data)
        except Exception as e:
            return RpcReply(id=request.id, err=self._error_mapper(e))
        return RpcReply(id=request.id, response=result)

    async def handle_entry(self, entry_id: str, fields: Mapping[str, str]) -> None:
        """Process one stream entry: decode, dispatch, reply, ACK."""
        try:
            request = RpcRequest.from_fields(fields)
        except MalformedMessageError as e:
            logger.error(f"Dropping entry {entry_id}: {e}")
            await self.acknowledge(entry_id)
            return

        reply = await self.dispatch(request)

        if request.reply_to:
            await self._redis_client.xadd(request.reply_to, reply.to_fields())
            await self._redis_client.expire(request.reply_to, self.reply_ttl_seconds)
        else:
            logger.warning(f"Request {request.id} ({request.cmd}) has no reply_to, reply dropped")

        await self.acknowledge(entry_id)

    async def acknowledge(self, entry_id: str) -> None:
        """
        Acknowledge entry processing (ACK).

        This removes the entry from the pending list,
        ensuring it won't be reprocessed.
        """
        await self._redis_client.xack(self.stream_name, self.consumer_group, entry_id)
        logger.debug(f"✅ Acknowledged entry: {entry_id}")

    async def serve_forever(self, batch_size: int = 10, block_ms: int = 1000) -> None:
        """
        Long-running consume loop. Returns after ``stop()``.

        Args:
            batch_size: Maximum entries per read
            block_ms: Blocking time of each read in milliseconds
        """
        await self.connect()
        self._running = True

        logger.info("🚀 Serving RPC commands...")
        logger.info(f"   Stream: {self.stream_name}")
        logger.info(f"   Consumer Group: {self.consumer_group}")
        logger.info(f"   Consumer Name: {self.consumer_name}")
        logger.info(f"   Commands: {', '.join(self.commands)}")

        while self._running:
            try:
                entries = await self.read_requests(batch_size=batch_size, block_ms=block_ms)
            except RedisError as e:
                logger.error(f"Failed to read from {self.stream_name}: {e}", exc_info=True)
                await asyncio.sleep(block_ms / 1000)
                continue

            for entry_id, fields in entries:
                await self._slots.acquire()
                task = asyncio.create_task(self._run_entry(entry_id, fields))
                self._tasks.add(task)
                task.add_done_callback(self._tasks.discard)

    def stop(self) -> None:
        """Ask the consume loop to exit after the current read."""
        self._running = False

    async def _run_entry(self, entry_id: str, fields: Mapping[str, str]) -> None:
        try:
            await self.handle_entry(entry_id, fields)
        except RedisError as e:
            # Not ACKed - stays pending for this consumer group
            logger.error(f"Failed to reply to entry {entry_id}: {e}", exc_info=True)
        finally:
            self._slots.release()
