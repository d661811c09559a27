"""SOAP client adapter driven by a declarative configuration bag.

Classes:
    SoapConfig: validated connection options (WSDL, endpoint, credentials, caching).
    StreamContext: requests session plus operation timeout built from transport options.
    SoapAdapter: owns a Zeep client, forwards calls and funnels every failure into SoapError.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, NoReturn

import requests  # type: ignore[import-untyped]
import zeep
from lxml import etree
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from requests.auth import HTTPBasicAuth, HTTPDigestAuth  # type: ignore[import-untyped]
from requests.exceptions import RequestException  # type: ignore[import-untyped]
from zeep.cache import InMemoryCache, SqliteCache
from zeep.exceptions import Error as ZeepError
from zeep.plugins import HistoryPlugin
from zeep.transports import Transport
from zeep.wsdl.bindings.soap import Soap12Binding, SoapBinding

from soap_adapter.enums import SoapAuthentication, SoapVersion, WsdlCache
from soap_adapter.settings.main import SoapSettings

# Zeep's own default for loading WSDL and XSD documents
DEFAULT_CONNECTION_TIMEOUT = 300

# Options dropped from the client options when left empty
_OPTIONAL_KEYS = ("location", "uri", "login", "password", "authentication")


class SoapError(Exception):
    """Raised for every adapter failure; carries the fault's descriptive message."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message)
        self.message = message


# ---------------------------------------------------------------------------
# SoapConfig
# ---------------------------------------------------------------------------

class SoapConfig(BaseModel):
    """Connection options for a SoapAdapter. Unknown keys are kept and passed through."""

    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    wsdl: str | None = None
    user_agent: str | None = Field(default="SoapClient", alias="userAgent")
    location: str | None = ""
    uri: str | None = ""
    login: str | None = ""
    password: str | None = ""
    authentication: SoapAuthentication | None = None
    trace: bool | None = False
    cache_wsdl: WsdlCache | None = None
    soap_version: SoapVersion | None = None
    connection_timeout: float | None = None

    @field_validator("authentication", mode="before")
    @classmethod
    def _blank_authentication(cls, value: Any) -> Any:
        return value or None


# ---------------------------------------------------------------------------
# Transport context
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class StreamContext:
    """Transport options resolved into a session the Zeep transport can use."""

    session: requests.Session
    timeout: float | None = None


def _parse_headers(raw: Any) -> dict[str, str]:
    """Accept headers as a mapping or as "Name: value" lines."""
    if isinstance(raw, Mapping):
        return {str(k): str(v) for k, v in raw.items()}
    lines = raw.splitlines() if isinstance(raw, str) else list(raw)
    headers: dict[str, str] = {}
    for line in lines:
        name, sep, value = line.partition(":")
        if sep:
            headers[name.strip()] = value.strip()
    return headers


def create_stream_context(options: Mapping[str, Any]) -> StreamContext:
    """Build a StreamContext from nested transport options.

    Recognised keys:
        http.user_agent: User-Agent header.
        http.header: extra headers, as a mapping or "Name: value" lines.
        http.proxy: proxy URL used for both http and https.
        http.timeout: per-operation timeout in seconds.
        ssl.verify_peer: False disables certificate verification.
        ssl.cafile: CA bundle path used for verification.
        ssl.local_cert / ssl.local_pk: client certificate and optional key.
    """
    http = dict(options.get("http") or {})
    ssl = dict(options.get("ssl") or {})

    session = requests.Session()
    if http.get("user_agent"):
        session.headers["User-Agent"] = str(http["user_agent"])
    if http.get("header"):
        session.headers.update(_parse_headers(http["header"]))
    if http.get("proxy"):
        session.proxies = {"http": http["proxy"], "https": http["proxy"]}

    if ssl.get("verify_peer") is False:
        session.verify = False
    elif ssl.get("cafile"):
        session.verify = ssl["cafile"]
    if ssl.get("local_cert"):
        session.cert = (ssl["local_cert"], ssl["local_pk"]) if ssl.get("local_pk") else ssl["local_cert"]

    timeout = http.get("timeout")
    return StreamContext(session=session, timeout=float(timeout) if timeout is not None else None)


def _fault_message(exc: BaseException) -> str:
    """Descriptive text of a Zeep fault or transport exception."""
    return getattr(exc, "message", None) or str(exc)


def _binding_version(binding: Any) -> SoapVersion:
    return SoapVersion.SOAP_1_2 if isinstance(binding, Soap12Binding) else SoapVersion.SOAP_1_1


# ---------------------------------------------------------------------------
# SoapAdapter
# ---------------------------------------------------------------------------

class SoapAdapter:
    """Zeep-backed SOAP client wrapper with implicit connect and a single error path.

    Args:
        config: Connection options, as a mapping or a SoapConfig.
        debug: Trace raw envelopes when the config leaves ``trace`` unset.
            Defaults to ``settings.debug``.
        log_errors: Log failures (and the last raw request) before raising.
        options: Transport options for the initial connection, see create_stream_context().
        logger: Destination for error logs.
        settings: Source of the process-wide debug flag.
        on_error: Called with the error message right before SoapError is raised.
    """

    def __init__(
        self,
        config: Mapping[str, Any] | SoapConfig | None = None,
        debug: bool | None = None,
        log_errors: bool = False,
        options: Mapping[str, Any] | None = None,
        logger: logging.Logger | None = None,
        settings: SoapSettings | None = None,
        on_error: Callable[[str | None], None] | None = None,
    ) -> None:
        self.logger = logger or logging.getLogger("soap_adapter")
        self.on_error = on_error
        self.log_errors = log_errors
        self.debug = (settings or SoapSettings()).debug if debug is None else debug

        # Connection state
        self.client: zeep.Client | None = None
        self.service: Any = None
        self.binding: Any = None
        self.connected = False
        self._history: HistoryPlugin | None = None

        try:
            self.config = config if isinstance(config, SoapConfig) else SoapConfig(**dict(config or {}))
        except ValidationError as exc:
            self.handle_error(str(exc))

        self.connect(options)

    def get_config(self, key: str | None = None) -> Any:
        """Return the whole configuration mapping, or a single value when ``key`` is given."""
        data = self.config.model_dump()
        if key is None:
            return data
        return data.get(key)

    # --- Option resolution ---

    def _parse_config(self, options: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Merge the stored configuration and transport options into client options."""
        options = options or {}
        config = self.get_config()
        config.pop("wsdl", None)

        if config.get("trace") is None:
            config["trace"] = self.debug

        opts: dict[str, Any] = {}
        user_agent = config.pop("user_agent", None)
        if user_agent and not options.get("http"):
            opts["http"] = {"user_agent": user_agent}
        for key, value in options.items():
            opts.setdefault(key, value)

        if opts:
            config["stream_context"] = create_stream_context(opts)

        if config.get("cache_wsdl") is None:
            config["cache_wsdl"] = WsdlCache.NONE

        for key in _OPTIONAL_KEYS:
            if not config.get(key):
                config.pop(key, None)

        if "authentication" not in config and config.get("login"):
            config["authentication"] = SoapAuthentication.BASIC

        return {key: value for key, value in config.items() if value is not None}

    # --- Client construction ---

    @staticmethod
    def _create_cache(mode: WsdlCache) -> Any:
        if mode == WsdlCache.MEMORY:
            return InMemoryCache()  # type: ignore[no-untyped-call]
        if mode in (WsdlCache.DISK, WsdlCache.BOTH):
            return SqliteCache()  # type: ignore[no-untyped-call]
        return None

    def _create_transport(self, options: Mapping[str, Any]) -> Transport:
        """Zeep transport carrying the stream context session, cache and credentials."""
        context: StreamContext | None = options.get("stream_context")
        session = context.session if context else requests.Session()
        context_headers = dict(session.headers)

        transport = Transport(  # type: ignore[no-untyped-call]
            session=session,
            cache=self._create_cache(options["cache_wsdl"]),
            timeout=options.get("connection_timeout", DEFAULT_CONNECTION_TIMEOUT),
            operation_timeout=context.timeout if context else None,
        )
        # Transport stamps its own User-Agent on the session; the context's headers win
        if context:
            session.headers.update(context_headers)

        if options.get("login"):
            auth_class = HTTPDigestAuth if options.get("authentication") == SoapAuthentication.DIGEST else HTTPBasicAuth
            session.auth = auth_class(options["login"], options.get("password", ""))
        return transport

    def _select_port(self, client: zeep.Client, options: Mapping[str, Any]) -> Any:
        """First SOAP port matching the configured namespace and version, else the first port."""
        ports = [port for service in client.wsdl.services.values() for port in service.ports.values()]
        candidates = [port for port in ports if isinstance(port.binding, SoapBinding)] or ports
        if not candidates:
            self.handle_error("WSDL does not declare any service port")

        uri = options.get("uri")
        version = options.get("soap_version")
        for port in candidates:
            if uri and port.binding.name.namespace != uri:
                continue
            if version is not None and _binding_version(port.binding) != version:
                continue
            return port
        return candidates[0]

    def _create_client(self, wsdl: str, transport: Transport, history: HistoryPlugin | None,
                       options: Mapping[str, Any]) -> zeep.Client:
        """Load the WSDL through ``transport``; loading failures go to handle_error()."""
        try:
            return zeep.Client(  # type: ignore[no-untyped-call]
                wsdl,
                transport=transport,
                plugins=[history] if history else [],
                settings=zeep.Settings(  # type: ignore[no-untyped-call]
                    strict=options.get("strict", True),
                    xml_huge_tree=options.get("xml_huge_tree", False),
                ),
            )
        except (ZeepError, RequestException, OSError) as exc:
            self.handle_error(_fault_message(exc))

    def connect(self, options: Mapping[str, Any] | None = None) -> bool:
        """Connect to the SOAP server using the WSDL in the configuration.

        Returns:
            True once connected. Failures raise SoapError through handle_error().
        """
        self.close()
        wsdl = self.get_config("wsdl")
        if not wsdl:
            self.handle_error("No WSDL location configured")

        config = self._parse_config(options)
        transport = self._create_transport(config)
        history = HistoryPlugin(maxlen=1) if config.get("trace") else None  # type: ignore[no-untyped-call]
        try:
            client = self._create_client(wsdl, transport, history, config)
            port = self._select_port(client, config)
        except Exception:
            # Nothing holds the session until the client is stored
            transport.session.close()
            raise

        address = config.get("location") or port.binding_options["address"]

        self.client = client
        self._history = history
        self.binding = port.binding
        self.service = client.create_service(port.binding.name.text, address)
        self.connected = True
        self.logger.debug("Connected to %s (binding %s at %s)", wsdl, port.binding.name, address)
        return self.connected

    def close(self) -> bool:
        """Release the client and its HTTP session."""
        if self.client is not None:
            self.client.transport.session.close()
        self.client = None
        self.service = None
        self.binding = None
        self._history = None
        self.connected = False
        return True

    # --- Forwarded operations ---

    def list_sources(self) -> list[str]:
        """Return the signatures of the operations the bound service offers."""
        if self.binding is None:
            self.handle_error("SOAP client is not connected")
        return [str(operation) for operation in self.binding.all().values()]

    def send_request(self, action: str, data: Sequence[Any] | Mapping[str, Any] | None = None) -> Any:
        """Call ``action`` on the service, connecting first when needed.

        Args:
            action: Operation name as declared in the WSDL.
            data: Positional arguments, or a mapping of keyword arguments.

        Returns:
            The operation's result as deserialised by Zeep.
        """
        if not self.connected:
            self.connect()

        if action not in self.binding.all():
            self.handle_error(f'Function ("{action}") is not a valid method for this service')

        operation = self.service[action]
        try:
            if isinstance(data, Mapping):
                result = operation(**data)
            else:
                result = operation(*(data or ()))
        # Zeep rejects arguments that do not fit the operation signature with TypeError
        except (ZeepError, RequestException, TypeError) as exc:
            self.handle_error(_fault_message(exc))

        return result

    def _last_envelope(self, direction: str) -> str | None:
        if self.client is None or self._history is None:
            return None
        try:
            envelope = getattr(self._history, direction)["envelope"]
        except (IndexError, TypeError):
            return None
        return etree.tostring(envelope, encoding="unicode")

    def get_request(self) -> str | None:
        """Return the last raw SOAP request, or None when nothing was traced."""
        return self._last_envelope("last_sent")

    def get_response(self) -> str | None:
        """Return the last raw SOAP response, or None when nothing was traced."""
        return self._last_envelope("last_received")

    # --- Errors ---

    def handle_error(self, message: str | None = None) -> NoReturn:
        """Optionally log ``message`` and the last request, then raise SoapError."""
        if self.log_errors:
            self.logger.error(message)
            if self.client is not None:
                last_request = self.get_request()
                if last_request is not None:
                    self.logger.error(last_request)
        if self.on_error is not None:
            self.on_error(message)
        raise SoapError(message)
