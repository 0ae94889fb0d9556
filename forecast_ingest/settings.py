"""Pipeline settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class IngestSettings(BaseSettings):
    """Settings for dataset acquisition

    Values can be overridden with METNO_* environment variables or a .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="METNO_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Acquisition retry loop
    retry_seconds: float = 10.0
    progress_log_seconds: float = 60.0
    deadline_seconds: float = 3600.0

    # MET Norway THREDDS server
    opendap_base_url: str = "https://thredds.met.no/thredds/dodsC/metpplatest"


_settings = None


def get_settings() -> IngestSettings:
    """Get the current settings, loading them from the environment on first use"""
    global _settings
    if _settings is None:
        _settings = IngestSettings()
    return _settings


def set_settings(settings: IngestSettings):
    """Set custom settings"""
    global _settings
    _settings = settings
