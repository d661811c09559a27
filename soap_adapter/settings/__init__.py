from soap_adapter.settings.main import GeneralSettings, LogSettings, SoapSettings

# Always load general settings
general_settings = GeneralSettings()

__all__ = ["GeneralSettings", "LogSettings", "SoapSettings", "general_settings"]
