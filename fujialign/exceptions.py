"""
FUJIALIGN Custom Exceptions

Domain-specific exception hierarchy for the alignment engine. Only input
validation and provider start-up failures are meant to reach the caller;
per-instant provider failures and failed transit lookups are handled inside
the engine, and "no event found" is a normal return value.

Exception Hierarchy:
    FujiAlignError (base)
    ├── ConfigurationError
    ├── InvalidSiteError
    ├── ProviderError
    │   ├── ProviderInitializationError
    │   └── ProviderUnavailableError
    ├── TransitLookupError
    └── SearchCancelledError
"""

from datetime import date, datetime
from typing import Any, Optional


class FujiAlignError(Exception):
    """Base exception for all FUJIALIGN errors.

    Attributes:
        message: Human-readable error description
        details: Optional dict with additional error context
    """

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(FujiAlignError):
    """Error in configuration file or settings.

    Raised when configuration validation fails, the file is missing,
    or the YAML cannot be parsed.
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_file: Optional[str] = None,
    ) -> None:
        details = {}
        if config_key:
            details["config_key"] = config_key
        if config_file:
            details["config_file"] = config_file
        super().__init__(message, details)
        self.config_key = config_key
        self.config_file = config_file


# =============================================================================
# Input Errors
# =============================================================================

class InvalidSiteError(FujiAlignError):
    """Observation site coordinates are outside the valid range.

    Raised before any scanning starts.
    """

    def __init__(
        self,
        message: str,
        site_id: Optional[str] = None,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
    ) -> None:
        details: dict[str, Any] = {}
        if site_id is not None:
            details["site_id"] = site_id
        if latitude is not None:
            details["latitude"] = latitude
        if longitude is not None:
            details["longitude"] = longitude
        super().__init__(message, details)
        self.site_id = site_id
        self.latitude = latitude
        self.longitude = longitude


# =============================================================================
# Provider Errors
# =============================================================================

class ProviderError(FujiAlignError):
    """Base class for celestial-position provider errors."""
    pass


class ProviderInitializationError(ProviderError):
    """Provider could not load its ephemeris data.

    Unrecoverable; propagates to the caller.
    """

    def __init__(self, message: str, ephemeris: Optional[str] = None) -> None:
        details = {}
        if ephemeris:
            details["ephemeris"] = ephemeris
        super().__init__(message, details)
        self.ephemeris = ephemeris


class ProviderUnavailableError(ProviderError):
    """Provider failed to answer for a single instant.

    The search engine skips the instant and keeps scanning.
    """

    def __init__(
        self,
        message: str,
        body: Optional[str] = None,
        instant: Optional[datetime] = None,
    ) -> None:
        details = {}
        if body:
            details["body"] = body
        if instant is not None:
            details["instant"] = instant.isoformat()
        super().__init__(message, details)
        self.body = body
        self.instant = instant


# =============================================================================
# Search Errors
# =============================================================================

class TransitLookupError(FujiAlignError):
    """Meridian transit could not be located for a date.

    The engine falls back to local noon instead of aborting the event.
    """

    def __init__(
        self,
        message: str,
        body: Optional[str] = None,
        day: Optional[date] = None,
    ) -> None:
        details = {}
        if body:
            details["body"] = body
        if day is not None:
            details["date"] = day.isoformat()
        super().__init__(message, details)
        self.body = body
        self.day = day


class SearchCancelledError(FujiAlignError):
    """A scan was cancelled through its cancellation event."""

    def __init__(
        self,
        message: str,
        site_id: Optional[str] = None,
        phase: Optional[str] = None,
    ) -> None:
        details = {}
        if site_id is not None:
            details["site_id"] = site_id
        if phase:
            details["phase"] = phase
        super().__init__(message, details)
        self.site_id = site_id
        self.phase = phase


# Allow importing without prefix for common cases
Error = FujiAlignError
