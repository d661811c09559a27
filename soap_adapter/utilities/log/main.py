import logging
from logging.handlers import QueueHandler, QueueListener
from queue import Queue
from typing import Optional

from soap_adapter.settings.main import LogSettings
from soap_adapter.utilities.log.handlers import SplunkHECHandler
from soap_adapter.utilities.log.router import RouterHandler

CONSOLE_FORMAT = '[%(asctime)s] [%(levelname)s] %(name)s: %(message)s'


class LoggingService:
    """Configures a named logger whose records are shipped to sinks off the calling thread.

    The logger gets a single QueueHandler; a QueueListener drains the queue into a
    RouterHandler that fans each record out to the console and, when enabled, Splunk.
    Pass the configured logger to SoapAdapter(logger=...) to collect its error logs.
    """

    def __init__(self, logger_name: str = "soap_adapter", settings: Optional[LogSettings] = None,
                 log_level: Optional[int] = None):
        self.settings: LogSettings = settings if settings else LogSettings()
        self.logger_name = logger_name
        self.logger = logging.getLogger(logger_name)
        self.log_level = int(log_level if log_level is not None else self.settings.log_level)
        self.propagate = False
        self.sinks: list[logging.Handler] = []

        self.router: Optional[RouterHandler] = None
        self.log_queue: Optional[Queue] = None
        self.log_listener: Optional[QueueListener] = None

    def set_propagate(self, propagate: bool):
        self.propagate = propagate

    def append_sink(self, sink: logging.Handler):
        self.sinks.append(sink)
        # Sinks added after configure_logger() go straight to the live router
        if self.router is not None:
            self.router.add_sink(sink)

    def configure_logger(self) -> logging.Logger:
        self.logger.setLevel(self.log_level)
        self.logger.propagate = self.propagate

        # Already wired by an earlier call
        if any(isinstance(h, QueueHandler) for h in self.logger.handlers):
            return self.logger

        if self.settings.log_to_splunk and self.settings.splunk_hec_url and self.settings.splunk_token:
            self.append_sink(SplunkHECHandler(self.settings.splunk_hec_url, self.settings.splunk_token))

        console = logging.StreamHandler()
        console.setLevel(self.log_level)
        console.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        self.sinks.append(console)

        self.log_queue = Queue(maxsize=self.settings.log_max_queue)
        self.router = RouterHandler(self.sinks)
        self.log_listener = QueueListener(self.log_queue, self.router, respect_handler_level=True)
        self.logger.addHandler(QueueHandler(self.log_queue))

        self.start()
        return self.logger

    def start(self):
        if self.log_listener is not None and self.log_listener._thread is None:
            self.log_listener.start()

    def stop(self):
        """Flush queued records to the sinks and stop the listener thread."""
        if self.log_listener is not None and self.log_listener._thread is not None:
            self.log_listener.stop()
