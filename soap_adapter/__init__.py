"""Configuration-driven SOAP client adapter built on Zeep."""

from soap_adapter.utilities.soap import SoapAdapter, SoapConfig, SoapError, StreamContext, create_stream_context

__all__ = [
    "SoapAdapter",
    "SoapConfig",
    "SoapError",
    "StreamContext",
    "create_stream_context",
]
