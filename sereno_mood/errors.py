"""
Error types for the SERENO mood assessment service.
"""

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

VALIDATION_ERROR_CODE = "VALIDATION_ERROR"


class SubmissionValidationError(ValueError):
    """Raised when a mood submission is malformed, before analysis runs."""

    def __init__(self, message: str, details: list[dict[str, str]]) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    @classmethod
    def from_errors(
        cls, errors: Iterable[Mapping[str, Any]], message: str
    ) -> "SubmissionValidationError":
        """Build from pydantic-style error dicts (``loc``/``msg`` keys)."""
        return cls(message, field_details(errors))

    def to_payload(self) -> dict[str, Any]:
        """Render as the JSON error envelope returned to API clients."""
        return {
            "success": False,
            "error": {
                "code": VALIDATION_ERROR_CODE,
                "message": self.message,
                "details": self.details,
            },
        }


def field_details(errors: Iterable[Mapping[str, Any]]) -> list[dict[str, str]]:
    """Flatten pydantic error dicts into ``{field, message}`` pairs."""
    return [
        {"field": _format_location(error.get("loc", ())), "message": error["msg"]}
        for error in errors
    ]


def _format_location(loc: Sequence[Any]) -> str:
    # FastAPI prefixes body errors with "body"
    parts = [str(part) for part in loc if part != "body"]
    return ".".join(parts) if parts else "body"
