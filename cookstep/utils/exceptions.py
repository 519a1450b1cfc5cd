"""Custom exception classes.

Every exception carries the HTTP status it maps to and a fixed message that
is safe to show to end users. Technical detail goes to the logs only.
"""

from typing import Optional

FETCH_FAILED_MESSAGE = (
    "We couldn't read a recipe from that page. "
    "Some websites block automated access; please try another link."
)


class CookStepException(Exception):
    """Base exception for the cookstep application."""

    status_code: int = 500
    public_message: str = "Internal server error"


class ValidationError(CookStepException):
    """Raised when input validation fails."""

    status_code = 400
    public_message = "Validation error"


class ScrapingError(CookStepException):
    """Raised when the recipe page cannot be fetched."""

    status_code = 502
    public_message = FETCH_FAILED_MESSAGE


class FetchTimeoutError(ScrapingError):
    """Raised when the page fetch exceeds its timeout."""

    status_code = 504


class UpstreamStatusError(ScrapingError):
    """Raised when the recipe site answers with a non-2xx status."""

    def __init__(self, upstream_status: int, url: str, message: Optional[str] = None):
        self.upstream_status = upstream_status
        self.url = url
        self.status_code = upstream_status if 400 <= upstream_status < 600 else 502
        super().__init__(message or f"Upstream returned HTTP {upstream_status} for {url}")


class RecipeNotFoundError(CookStepException):
    """Raised when neither extractor finds recipe data on the page."""

    status_code = 404
    public_message = "No recipe data found"


class GeminiError(CookStepException):
    """Raised when Gemini API call fails."""

    status_code = 502
    public_message = "Failed to process recipe instructions"


class InstructionParsingError(GeminiError):
    """Raised when the LLM step breakdown is unusable; always recovered by the rule-based tier."""

    pass
