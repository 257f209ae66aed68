import asyncio
import pathlib
import weakref
from typing import (
    Callable,
    Dict,
    TypeVar,
)

from syncpoint.logging.models import Entry, Log

from .logger_context import LoggerContext

T = TypeVar('T', bound=Entry)


_loop_contexts: weakref.WeakKeyDictionary[
    asyncio.AbstractEventLoop,
    Dict[str, LoggerContext],
] = weakref.WeakKeyDictionary()


class Logger:
    """
    Structured async logger. Each name maps to one LoggerContext per
    event loop, shared by every Logger on that loop and kept open until
    close(). The first Logger to use a name decides its template and path.
    """

    @property
    def _contexts(self) -> Dict[str, LoggerContext]:
        return _loop_contexts.setdefault(asyncio.get_running_loop(), {})

    def context(
        self,
        name: str | None = None,
        template: str | None = None,
        path: str | None = None,
    ) -> LoggerContext:
        if name is None:
            name = 'default'

        contexts = self._contexts

        if (context := contexts.get(name)) is None:
            filename, directory = self._parse_path(path)

            context = LoggerContext(
                name=name,
                template=template,
                filename=filename,
                directory=directory,
            )
            contexts[name] = context

        return context

    async def log(
        self,
        entry: T,
        name: str | None = None,
        template: str | None = None,
        path: str | None = None,
        filter: Callable[[T], bool] | None = None,
    ):
        if name is None:
            name = 'default'

        log = Log.capture(entry, depth=1, logger=name)

        async with self.context(name=name) as stream:
            await stream.log(
                log,
                template=template,
                path=path,
                filter=filter,
            )

    async def close(self):
        """
        Close every file opened by this loop's streams. A later log()
        reopens them.
        """
        await asyncio.gather(*[
            context.stream.close() for context in self._contexts.values()
        ])

    def _parse_path(self, path: str | None):
        if not path:
            return None, None

        logfile_path = pathlib.Path(path)

        if logfile_path.suffix:
            return logfile_path.name, str(logfile_path.parent.absolute())

        return None, str(logfile_path.absolute())
