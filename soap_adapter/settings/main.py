"""Pydantic settings models for the SOAP adapter and its logging."""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from soap_adapter.enums import LogLevel


class SoapSettings(BaseSettings):
    """Process-wide SOAP adapter defaults."""

    # Consulted only when an adapter is built without an explicit debug flag.
    # A debug adapter traces raw envelopes unless its config says otherwise.
    debug: bool = Field(default=False, alias="SOAP_DEBUG")


class LogSettings(BaseSettings):
    """Cross-cutting logging behavior settings."""

    log_level: LogLevel = LogLevel.INFO
    log_to_splunk: bool = False
    splunk_hec_url: str | None = None
    splunk_token: str | None = None
    log_max_queue: int = 10000

    @field_validator("log_level", mode="before")
    @classmethod
    def parse_log_level(cls, value):
        # LOG_LEVEL may be a name ("error") as well as a number
        return LogLevel.parse(value)


class GeneralSettings(BaseSettings):
    """Bundle of every settings model, loaded once per process."""

    soap: SoapSettings = Field(default_factory=SoapSettings)
    log_settings: LogSettings = Field(default_factory=LogSettings)
