"""SOAP client option values: WSDL caching, HTTP authentication and protocol version."""

from enum import IntEnum, StrEnum


class WsdlCache(StrEnum):
    """Where parsed WSDL/XSD documents are cached between client constructions."""

    NONE = "none"
    DISK = "disk"
    MEMORY = "memory"
    BOTH = "both"


class SoapAuthentication(StrEnum):
    """HTTP authentication scheme used when a login is configured."""

    BASIC = "basic"
    DIGEST = "digest"


class SoapVersion(IntEnum):
    """SOAP envelope version of a WSDL binding."""

    SOAP_1_1 = 1
    SOAP_1_2 = 2
