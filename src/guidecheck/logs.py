"""Logging setup for the command line entrypoint"""

import logging

import typer


LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


class EchoHandler(logging.Handler):
    """Write records through typer.echo so they follow the current stderr."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            typer.echo(self.format(record), err=True)
        except Exception:
            self.handleError(record)


def configure_logging(level: str = "WARNING") -> None:
    """Route guidecheck loggers to stderr at the given level name."""
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {level}")
    handler = EchoHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.basicConfig(level=numeric, handlers=[handler], force=True)
