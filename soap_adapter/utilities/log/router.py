"""Delivery of queued adapter log records to the configured sinks."""

import logging
from collections.abc import Iterable


class RouterHandler(logging.Handler):
    """
    Terminal handler of the logging queue listener.

    Every record taken off the queue is offered to each sink in turn. A sink
    that raises does not stop delivery to the sinks after it.
    """

    def __init__(self, sinks: Iterable[logging.Handler] = (), swallow_errors: bool = True):
        """
        :param sinks: handlers receiving every record, in order
        :param swallow_errors: report a failing sink through handleError() instead of raising
        """
        super().__init__()
        self.sinks = list(sinks)
        self.swallow_errors = swallow_errors

    def add_sink(self, sink: logging.Handler) -> None:
        if sink not in self.sinks:
            self.sinks.append(sink)

    def emit(self, record: logging.LogRecord):
        for sink in self.sinks:
            try:
                # handle() applies the sink's own level and filters
                sink.handle(record)
            except Exception:
                if not self.swallow_errors:
                    raise
                self.handleError(record)
