import asyncio
import itertools
from typing import AsyncGenerator, Dict

import msgspec

from syncpoint.coordination.coordination_service import CoordinationService
from syncpoint.coordination.models import Request, Response
from syncpoint.coordination.protocol import (
    decode_response,
    encode_frame,
    read_frame,
)
from syncpoint.errors import CoordinationError
from syncpoint.logging import Logger
from syncpoint.logging.syncpoint_logging_models import (
    CoordinationServerDebug,
    CoordinationServerError,
)


class CoordinationClient(CoordinationService):
    """
    Coordination service client speaking to a CoordinationServer over
    one multiplexed TCP connection.
    """

    def __init__(
        self,
        host: str,
        port: int,
        run_id: str = "default",
        connect_retries: int = 5,
        connect_retry_interval: float = 1.0,
    ) -> None:
        self.run_id = run_id
        self._host = host
        self._port = port
        self._connect_retries = connect_retries
        self._connect_retry_interval = connect_retry_interval

        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None
        self._read_task: asyncio.Task | None = None
        self._write_lock = asyncio.Lock()
        self._request_ids = itertools.count(1)
        self._pending: Dict[int, asyncio.Future] = {}
        self._subscriptions: Dict[int, asyncio.Queue[Response]] = {}
        self._connected = False
        self._logger = Logger()

    @property
    def connected(self):
        return self._connected

    async def connect(self):
        if self._connected:
            return

        last_error: Exception | None = None

        for attempt in range(self._connect_retries + 1):
            try:
                self._reader, self._writer = await asyncio.open_connection(
                    self._host,
                    self._port,
                )

                self._connected = True
                self._read_task = asyncio.create_task(self._read_loop())

                return

            except OSError as err:
                last_error = err

                await self._logger.log(
                    CoordinationServerDebug(
                        message=f"Connect attempt {attempt + 1} failed: {err}",
                        host=self._host,
                        port=self._port,
                    )
                )

                if attempt < self._connect_retries:
                    await asyncio.sleep(self._connect_retry_interval)

        raise CoordinationError(
            f"Coordination service at {self._host}:{self._port} is unreachable: {last_error}"
        )

    async def signal_entry(self, state: str) -> int:
        response = await self._request("signal_entry", state)
        return response.value

    async def barrier(self, state: str, target: int) -> None:
        await self._request("barrier", state, target=target)

    async def publish(self, topic: str, payload: bytes) -> int:
        response = await self._request("publish", topic, payload=payload)
        return response.value

    async def subscribe(self, topic: str) -> AsyncGenerator[bytes, None]:
        await self._ensure_connected()

        request_id = next(self._request_ids)
        queue: asyncio.Queue[Response] = asyncio.Queue()
        self._subscriptions[request_id] = queue

        finished = False

        try:
            await self._send(
                Request(
                    request_id=request_id,
                    run_id=self.run_id,
                    kind="subscribe",
                    name=topic,
                )
            )

            while True:
                response = await queue.get()

                if response.kind == "item":
                    yield response.payload

                elif response.kind == "closed":
                    finished = True
                    return

                else:
                    finished = True
                    raise CoordinationError(response.error or f"Subscription to {topic} failed")

        finally:
            self._subscriptions.pop(request_id, None)

            if not finished and self._connected:
                await self._send(
                    Request(
                        request_id=request_id,
                        run_id=self.run_id,
                        kind="unsubscribe",
                        name=topic,
                    )
                )

    async def close(self) -> None:
        if self._writer is None:
            return

        self._connected = False
        self._writer.close()

        try:
            await self._writer.wait_closed()

        except ConnectionError:
            pass

        if self._read_task:
            self._read_task.cancel()

            try:
                await self._read_task

            except asyncio.CancelledError:
                pass

        self._fail_outstanding("Coordination client closed")
        self._writer = None

    async def __aenter__(self):
        await self.connect()
        return self

    async def _ensure_connected(self):
        if not self._connected:
            await self.connect()

    async def _request(
        self,
        kind: str,
        name: str,
        target: int = 0,
        payload: bytes | None = None,
    ) -> Response:
        await self._ensure_connected()

        request_id = next(self._request_ids)
        waiter = asyncio.get_running_loop().create_future()
        self._pending[request_id] = waiter

        try:
            await self._send(
                Request(
                    request_id=request_id,
                    run_id=self.run_id,
                    kind=kind,
                    name=name,
                    target=target,
                    payload=payload,
                )
            )

            response: Response = await waiter

        finally:
            self._pending.pop(request_id, None)

        if response.kind == "error":
            raise CoordinationError(response.error or f"{kind} on {name} failed")

        return response

    async def _send(self, request: Request):
        if self._writer is None:
            raise CoordinationError("Coordination client is not connected")

        try:
            async with self._write_lock:
                self._writer.write(encode_frame(request))
                await self._writer.drain()

        except ConnectionError as err:
            raise CoordinationError(
                f"Lost connection to coordination service: {err}"
            ) from err

    async def _read_loop(self):
        try:
            while (data := await read_frame(self._reader)) is not None:
                response = decode_response(data)

                if queue := self._subscriptions.get(response.request_id):
                    queue.put_nowait(response)

                elif (
                    waiter := self._pending.get(response.request_id)
                ) and not waiter.done():
                    waiter.set_result(response)

        except (
            asyncio.IncompleteReadError,
            ConnectionError,
            ValueError,
            msgspec.DecodeError,
        ) as err:
            await self._logger.log(
                CoordinationServerError(
                    message=f"Connection to coordination service failed: {err}",
                    host=self._host,
                    port=self._port,
                )
            )

        self._connected = False
        self._fail_outstanding(
            f"Connection to coordination service at {self._host}:{self._port} closed"
        )

    def _fail_outstanding(self, reason: str):
        for waiter in self._pending.values():
            if not waiter.done():
                waiter.set_exception(CoordinationError(reason))

        # A dropped connection ends every subscription the same way a
        # closed topic does.
        for request_id, queue in self._subscriptions.items():
            queue.put_nowait(
                Response(request_id=request_id, kind="closed")
            )
