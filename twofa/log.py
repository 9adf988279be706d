from enum import IntEnum

import click


class LogLevel(IntEnum):
    NORM = 0
    MIN = 1
    MID = 2
    MAX = 3


class Logger:
    """
    Diagnostics on stderr, so stdout only carries results.

    Higher levels are supersets of lower ones: -ddd prints everything -d does.
    """

    def __init__(self, level: int = 0) -> None:
        try:
            self.level = LogLevel(level)
        except ValueError:
            click.echo(f"LogLevel '{level}' not supported. Norm chosen.", err=True)
            self.level = LogLevel.NORM

    def norm(self, msg: str) -> None:
        click.echo(msg, err=True)

    def min(self, msg: str) -> None:
        self._debug(LogLevel.MIN, msg)

    def mid(self, msg: str) -> None:
        self._debug(LogLevel.MID, msg)

    def max(self, msg: str) -> None:
        self._debug(LogLevel.MAX, msg)

    def _debug(self, level: LogLevel, msg: str) -> None:
        if self.level >= level:
            click.echo(f"DEBUG: {msg}", err=True)
