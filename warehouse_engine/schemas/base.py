"""
Base Schema Classes for Pydantic Models

RULE: All response schemas that read from ORM models or service result
dataclasses MUST inherit from BaseResponseSchema.
"""

from pydantic import BaseModel, ConfigDict


class BaseResponseSchema(BaseModel):
    """
    Base class for all response schemas that read from ORM models.

    Usage:
        class LotResponse(BaseResponseSchema):
            id: UUID
            lot_number: str
    """
    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )


class BaseCreateSchema(BaseModel):
    """
    Base class for create/input schemas.

    Unknown fields are ignored.
    """
    model_config = ConfigDict(
        extra='ignore',
    )
