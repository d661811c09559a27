from soap_adapter.utilities.log.main import LoggingService

__all__ = ["LoggingService"]
