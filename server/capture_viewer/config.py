"""
Collector configuration.

Uses ``pydantic_settings.BaseSettings`` for automatic environment
variable binding, type coercion, and validation.
"""

from __future__ import annotations

import pydantic
import pydantic_settings

from capture_viewer.records import aggregator
from capture_viewer.utils import logger

log = logger.create_logger("Config")

DEFAULT_CREDENTIAL_HEADER = "spec"


class CollectorConfig(pydantic_settings.BaseSettings):
    """Configuration for the remote collection endpoint.

    Attributes:
        api_url: URL returning the JSON array of raw records.
        credential: Opaque access value forwarded as a header.
        credential_header: Name of the header carrying it.
        timeout_seconds: Total request timeout.
        default_profile: Profile name for records without one.
    """

    model_config = pydantic_settings.SettingsConfigDict(populate_by_name=True)

    api_url: str = pydantic.Field(
        default="", validation_alias="COLLECTOR_API_URL"
    )
    credential: str = pydantic.Field(
        default="", validation_alias="COLLECTOR_SPEC"
    )
    credential_header: str = pydantic.Field(
        default=DEFAULT_CREDENTIAL_HEADER,
        validation_alias="COLLECTOR_CREDENTIAL_HEADER",
    )
    timeout_seconds: float = pydantic.Field(
        default=10.0, gt=0, validation_alias="COLLECTOR_TIMEOUT"
    )
    default_profile: str = pydantic.Field(
        default=aggregator.DEFAULT_PROFILE,
        validation_alias="DEFAULT_PROFILE",
    )

    def validate_config(self) -> bool:
        """Check if the collector URL is present.

        Returns:
            True when ``api_url`` is set.
        """
        return bool(self.api_url)


def validate_collector_config() -> str | None:
    """Check if the collector endpoint is configured.

    Returns:
        An error message string when misconfigured, or ``None`` if valid.
    """
    if CollectorConfig().validate_config():
        return None

    log.warn("Collector endpoint is not configured")
    return (
        "Collector is not configured. Please set COLLECTOR_API_URL"
        " (and optionally COLLECTOR_SPEC, COLLECTOR_CREDENTIAL_HEADER,"
        " COLLECTOR_TIMEOUT)"
    )
