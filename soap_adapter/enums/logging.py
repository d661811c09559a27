"""Log levels accepted by the adapter's logging settings."""

import logging
from enum import IntEnum


class LogLevel(IntEnum):
    NOTSET = logging.NOTSET
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL

    @classmethod
    def parse(cls, value: "int | str | LogLevel") -> "LogLevel":
        """
        Resolve a level given as a number, a numeric string or a level name.

        Names are case-insensitive and ``WARN`` is accepted for ``WARNING``.
        Unknown values raise ValueError.
        """
        if isinstance(value, str):
            text = value.strip()
            if text.lstrip("-").isdigit():
                return cls(int(text))
            name = text.upper()
            if name == "WARN":
                name = "WARNING"
            try:
                return cls[name]
            except KeyError:
                raise ValueError(f"Unknown log level: {value!r}") from None
        return cls(value)
