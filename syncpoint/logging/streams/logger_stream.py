import asyncio
import io
import os
import pathlib
import sys
from collections import defaultdict
from typing import (
    Callable,
    Dict,
    TypeVar,
)

import msgspec

from syncpoint.logging.config.logging_config import LoggingConfig
from syncpoint.logging.models import Entry, Log

T = TypeVar('T', bound=Entry)


DEFAULT_TEMPLATE = "{timestamp} - {level} - {thread_id} - {filename}:{function_name}.{line_number} - {message}"
ERROR_TEMPLATE = "{timestamp} - {level} - {thread_id}.{filename}:{function_name}.{line_number} - {error}"


class LoggerStream:
    """
    Writes log entries either as templated lines to stdout/stderr or as
    JSON lines to a file. Blocking writes run in the loop's default
    executor; writes to one file are serialized by a per-file lock.
    """

    def __init__(
        self,
        name: str | None = None,
        template: str | None = None,
        filename: str | None = None,
        directory: str | None = None,
    ) -> None:
        if name is None:
            name = "default"

        self._name = name
        self._default_template = template
        self._default_logfile = filename
        self._default_log_directory = directory

        self._init_lock = asyncio.Lock()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._cwd: str | None = None
        self._initialized = False

        self._files: Dict[str, io.BufferedRandom] = {}
        self._file_locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._default_logfile_path: str | None = None

        self._config = LoggingConfig()

    @property
    def name(self):
        return self._name

    @property
    def default_logfile_path(self):
        return self._default_logfile_path

    async def initialize(self):
        async with self._init_lock:
            if self._initialized:
                return

            self._loop = asyncio.get_running_loop()
            self._cwd = await self._loop.run_in_executor(None, os.getcwd)
            self._initialized = True

    async def open_file(
        self,
        filename: str,
        directory: str | None = None,
        is_default: bool = False,
    ) -> str:
        if self._initialized is False:
            await self.initialize()

        logfile_path = self._to_logfile_path(filename, directory=directory)

        async with self._file_locks[logfile_path]:
            await self._loop.run_in_executor(
                None,
                self._open_file,
                logfile_path,
            )

        if is_default:
            self._default_logfile_path = logfile_path

        return logfile_path

    async def close(self):
        for logfile_path in list(self._files):
            async with self._file_locks[logfile_path]:
                await self._loop.run_in_executor(
                    None,
                    self._close_file,
                    logfile_path,
                )

        self._files.clear()
        self._initialized = False

    async def log(
        self,
        entry: T | Log[T],
        template: str | None = None,
        path: str | None = None,
        filter: Callable[[T], bool] | None = None,
    ):
        if not isinstance(entry, Log):
            entry = Log.capture(entry, depth=1, logger=self._name)

        if self._config.enabled(self._name, entry.entry.level) is False:
            return

        if filter and filter(entry.entry) is False:
            return

        if self._initialized is False:
            await self.initialize()

        logfile_path = self._resolve_logfile_path(path)

        if logfile_path is None:
            await self._log_to_stream(
                entry,
                template or self._default_template or DEFAULT_TEMPLATE,
            )

        else:
            await self._log_to_file(entry, logfile_path)

    def _resolve_logfile_path(self, path: str | None) -> str | None:
        filename = self._default_logfile
        directory = self._default_log_directory

        if path:
            logfile_path = pathlib.Path(path)

            if logfile_path.suffix:
                filename = logfile_path.name
                directory = str(logfile_path.parent.absolute())

            else:
                directory = str(logfile_path.absolute())

        if filename is None and (directory or self._config.directory):
            filename = f"{self._name}.json"

        if filename is None:
            return None

        if path is None and self._default_logfile_path:
            return self._default_logfile_path

        return self._to_logfile_path(filename, directory=directory)

    def _to_logfile_path(
        self,
        filename: str,
        directory: str | None = None,
    ) -> str:
        if pathlib.Path(filename).suffix != ".json":
            raise ValueError(f"Log file {filename} must be a .json file")

        if self._config.directory:
            directory = self._config.directory

        elif directory is None:
            directory = self._cwd

        return os.path.join(directory, filename)

    async def _log_to_stream(
        self,
        log: Log,
        template: str,
    ):
        context = {
            "filename": log.filename,
            "function_name": log.function_name,
            "line_number": log.line_number,
            "thread_id": log.thread_id,
            "timestamp": log.timestamp,
        }

        stream = sys.stdout if self._config.output == 'stdout' else sys.stderr

        try:
            line = log.entry.to_template(template, context=context)

        except (KeyError, IndexError, ValueError) as err:
            context["error"] = f"Could not render log entry: {err}"
            stream = sys.stderr
            line = log.entry.to_template(ERROR_TEMPLATE, context=context)

        await self._loop.run_in_executor(
            None,
            self._write_to_stream,
            stream,
            line,
        )

    async def _log_to_file(
        self,
        log: Log,
        logfile_path: str,
    ):
        async with self._file_locks[logfile_path]:
            if self._files.get(logfile_path) is None or self._files[logfile_path].closed:
                await self._loop.run_in_executor(
                    None,
                    self._open_file,
                    logfile_path,
                )

            await self._loop.run_in_executor(
                None,
                self._write_to_file,
                msgspec.json.encode(log),
                logfile_path,
            )

    def _open_file(self, logfile_path: str):
        resolved_path = pathlib.Path(logfile_path).absolute().resolve()
        resolved_path.parent.mkdir(parents=True, exist_ok=True)

        self._files[logfile_path] = open(resolved_path, "ab+")

    def _close_file(self, logfile_path: str):
        if (
            logfile := self._files.get(logfile_path)
        ) and logfile.closed is False:
            logfile.close()

    def _write_to_stream(
        self,
        stream: io.TextIOBase,
        line: str,
    ):
        if stream.closed is False:
            stream.write(line + "\n")
            stream.flush()

    def _write_to_file(
        self,
        data: bytes,
        logfile_path: str,
    ):
        if (
            logfile := self._files.get(logfile_path)
        ) and logfile.closed is False:
            logfile.write(data + b"\n")
            logfile.flush()
