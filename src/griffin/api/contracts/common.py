"""Shared contract base and the error envelope."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialised with camelCase keys.

    Accepts both camelCase and snake_case on input.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def chain_id_to_str(value: Any) -> Any:
    """Coerce an integer chain id (``1``) to its string form (``"1"``)."""
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


def amount_to_str(value: Any) -> Any:
    """Keep amounts as decimal strings; JSON numbers are converted."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class ErrorBody(CamelModel):
    code: str = Field(..., description="Stable error code")
    message: str = Field(..., description="Human-readable message")
    details: Optional[dict[str, Any]] = None
    timestamp: datetime
    request_id: Optional[str] = None


class ErrorResponse(CamelModel):
    """Uniform error envelope."""

    error: ErrorBody
