"""Base Pydantic schemas."""

from pydantic import BaseModel, ConfigDict
from humps import camelize


def to_camel(string: str) -> str:
    """Convert snake_case to camelCase."""
    return camelize(string)


class CamelModel(BaseModel):
    """
    Base model that accepts camelCase keys for snake_case fields.

    Request bodies from the dashboard use camelCase:
        class BatchAnalysisRequest(CamelModel):
            start_date: str  # JSON: startDate
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class RecordModel(BaseModel):
    """Base model for responses that mirror database rows (snake_case keys)."""

    model_config = ConfigDict(from_attributes=True)


class ErrorResponse(BaseModel):
    """Standard error response format."""

    error: str
