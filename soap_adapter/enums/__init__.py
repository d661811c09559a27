"""Public enum exports used across the package."""

from soap_adapter.enums.logging import LogLevel
from soap_adapter.enums.soap import SoapAuthentication, SoapVersion, WsdlCache

__all__ = [
    "LogLevel",
    "SoapAuthentication",
    "SoapVersion",
    "WsdlCache",
]
