"""Portfolio pipeline error types."""

from __future__ import annotations

from enum import Enum


class PortfolioErrorCode(Enum):
    """Why a provider request or holdings load failed."""

    RATE_LIMITED = "rate_limited"
    NOT_FOUND = "not_found"
    TIMEOUT = "timeout"
    PROVIDER_ERROR = "provider_error"
    PARSE_ERROR = "parse_error"
    SOURCE_UNAVAILABLE = "source_unavailable"


class PortfolioError(Exception):
    """Pipeline exception with a structured error code.

    Raised inside provider hooks and the tabular loader; the provider
    boundary and the holdings store downgrade it to fallback data, so it
    never reaches a snapshot caller.

    Attributes:
        message: Description of what failed.
        code: Classification used in provider warnings and by callers.
    """

    def __init__(
        self,
        message: str,
        code: PortfolioErrorCode = PortfolioErrorCode.PROVIDER_ERROR,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
