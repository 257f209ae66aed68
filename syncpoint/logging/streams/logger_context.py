from .logger_stream import LoggerStream


class LoggerContext:
    """
    A named stream and the file it writes to by default. Entering the
    context initializes the stream and opens that file. The stream is
    closed on exit only when the context owns it; contexts handed out by
    Logger stay open until Logger.close().
    """

    def __init__(
        self,
        name: str = "default",
        template: str | None = None,
        filename: str | None = None,
        directory: str | None = None,
        owned: bool = False,
    ) -> None:
        self.name = name
        self.filename = filename
        self.directory = directory
        self.owned = owned
        self.stream = LoggerStream(
            name=name,
            template=template,
            filename=filename,
            directory=directory,
        )

    async def __aenter__(self) -> LoggerStream:
        await self.stream.initialize()

        if self.filename and self.stream.default_logfile_path is None:
            await self.stream.open_file(
                self.filename,
                directory=self.directory,
                is_default=True,
            )

        return self.stream

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.owned:
            await self.stream.close()
