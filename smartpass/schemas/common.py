"""
==============================================================================
Common Schemas Module
==============================================================================

Shared response schemas and the camelCase base model used for every
SmartPass record.

==============================================================================
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SmartPassModel(BaseModel):
    """
    Base for records exchanged with the SmartPass endpoint.

    Python attributes are snake_case, the wire format is camelCase.
    Spreadsheet cells often arrive as numbers, so numbers are accepted
    for string fields.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        str_strip_whitespace=True,
    )


class MessageResponse(BaseModel):
    """Simple message response."""
    success: bool = Field(default=True)
    message: str
