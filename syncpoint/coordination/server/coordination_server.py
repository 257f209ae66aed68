import asyncio
from typing import Dict, Set

import msgspec

from syncpoint.coordination.in_memory_service import InMemoryCoordinationService
from syncpoint.coordination.models import Request, Response
from syncpoint.coordination.protocol import (
    decode_request,
    encode_frame,
    read_frame,
)
from syncpoint.errors import CoordinationError
from syncpoint.logging import Logger
from syncpoint.logging.syncpoint_logging_models import (
    CoordinationServerDebug,
    CoordinationServerError,
    CoordinationServerInfo,
)


class CoordinationServer:
    """
    TCP front end for the coordination service.

    Each run id gets its own InMemoryCoordinationService. Requests that
    block (barriers, subscriptions) are served by their own task so a
    single connection can multiplex many outstanding calls.

    A run is closed and its topic history dropped once the last
    connection that used it goes away.
    """

    def __init__(
        self,
        host: str = "0.0.0.0",
        port: int = 5050,
    ) -> None:
        self._host = host
        self._port = port
        self._server: asyncio.Server | None = None
        self._runs: Dict[str, InMemoryCoordinationService] = {}
        self._run_connections: Dict[str, Set[int]] = {}
        self._connections: Dict[int, Dict[int, asyncio.Task]] = {}
        self._writers: Dict[int, asyncio.StreamWriter] = {}
        self._logger = Logger()

    @property
    def port(self):
        return self._port

    @property
    def active_runs(self):
        return tuple(self._runs)

    def get_run(self, run_id: str) -> InMemoryCoordinationService:
        if (service := self._runs.get(run_id)) is None:
            service = InMemoryCoordinationService(run_id)
            self._runs[run_id] = service

        return service

    async def start(self):
        self._server = await asyncio.start_server(
            self._handle_connection,
            host=self._host,
            port=self._port,
        )

        # Port 0 binds an ephemeral port.
        sockets = self._server.sockets
        if sockets:
            self._port = sockets[0].getsockname()[1]

        await self._logger.log(
            CoordinationServerInfo(
                message="Coordination server listening",
                host=self._host,
                port=self._port,
            )
        )

    async def serve_forever(self):
        if self._server is None:
            await self.start()

        async with self._server:
            await self._server.serve_forever()

    async def close_run(self, run_id: str):
        if service := self._runs.pop(run_id, None):
            await service.close()

    async def close(self):
        for run_id in list(self._runs):
            await self.close_run(run_id)

        for tasks in self._connections.values():
            for task in tasks.values():
                task.cancel()

        for writer in list(self._writers.values()):
            writer.close()

        if self._server:
            self._server.close()
            await self._server.wait_closed()

        await self._logger.log(
            CoordinationServerInfo(
                message="Coordination server closed",
                host=self._host,
                port=self._port,
            )
        )

    async def _handle_connection(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
    ):
        connection_id = id(writer)
        tasks: Dict[int, asyncio.Task] = {}
        self._connections[connection_id] = tasks
        self._writers[connection_id] = writer
        write_lock = asyncio.Lock()

        try:
            while (data := await read_frame(reader)) is not None:
                request = decode_request(data)
                self._run_connections.setdefault(
                    request.run_id,
                    set(),
                ).add(connection_id)

                if request.kind == "unsubscribe":
                    if task := tasks.pop(request.request_id, None):
                        task.cancel()

                    continue

                task = asyncio.create_task(
                    self._dispatch(request, writer, write_lock)
                )
                tasks[request.request_id] = task
                task.add_done_callback(
                    lambda _, request_id=request.request_id: tasks.pop(request_id, None)
                )

        except (
            asyncio.IncompleteReadError,
            ConnectionError,
            ValueError,
            msgspec.DecodeError,
        ) as err:
            await self._logger.log(
                CoordinationServerError(
                    message=f"Dropping connection: {err}",
                    host=self._host,
                    port=self._port,
                )
            )

        finally:
            for task in tasks.values():
                task.cancel()

            self._connections.pop(connection_id, None)
            self._writers.pop(connection_id, None)
            writer.close()

            await self._release_runs(connection_id)

    async def _release_runs(self, connection_id: int):
        for run_id, connections in list(self._run_connections.items()):
            connections.discard(connection_id)

            if connections:
                continue

            del self._run_connections[run_id]
            await self.close_run(run_id)

            await self._logger.log(
                CoordinationServerDebug(
                    message=f"Closed run {run_id} after its last connection left",
                    host=self._host,
                    port=self._port,
                )
            )

    async def _dispatch(
        self,
        request: Request,
        writer: asyncio.StreamWriter,
        write_lock: asyncio.Lock,
    ):
        service = self.get_run(request.run_id)

        try:
            match request.kind:
                case "signal_entry":
                    value = await service.signal_entry(request.name)
                    await self._send(
                        writer,
                        write_lock,
                        Response(request_id=request.request_id, kind="ok", value=value),
                    )

                case "barrier":
                    await service.barrier(request.name, request.target)
                    await self._send(
                        writer,
                        write_lock,
                        Response(request_id=request.request_id, kind="ok", value=request.target),
                    )

                case "publish":
                    value = await service.publish(request.name, request.payload or b"")
                    await self._send(
                        writer,
                        write_lock,
                        Response(request_id=request.request_id, kind="ok", value=value),
                    )

                case "subscribe":
                    await self._stream_topic(request, service, writer, write_lock)

                case _:
                    raise CoordinationError(f"Unknown request kind {request.kind}")

        except CoordinationError as err:
            await self._send(
                writer,
                write_lock,
                Response(request_id=request.request_id, kind="error", error=str(err)),
            )

        except ConnectionError:
            await self._logger.log(
                CoordinationServerDebug(
                    message=f"Client went away during {request.kind} on {request.name}",
                    host=self._host,
                    port=self._port,
                )
            )

    async def _stream_topic(
        self,
        request: Request,
        service: InMemoryCoordinationService,
        writer: asyncio.StreamWriter,
        write_lock: asyncio.Lock,
    ):
        position = 0
        async for item in service.subscribe(request.name):
            position += 1
            await self._send(
                writer,
                write_lock,
                Response(
                    request_id=request.request_id,
                    kind="item",
                    value=position,
                    payload=item,
                ),
            )

        await self._send(
            writer,
            write_lock,
            Response(request_id=request.request_id, kind="closed", value=position),
        )

    async def _send(
        self,
        writer: asyncio.StreamWriter,
        write_lock: asyncio.Lock,
        response: Response,
    ):
        async with write_lock:
            writer.write(encode_frame(response))
            await writer.drain()
