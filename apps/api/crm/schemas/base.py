"""Shared Pydantic base for camelCase JSON payloads."""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Serializes fields as camelCase (`pipelineId`, `isDefault`).

    Input accepts either camelCase or the snake_case field name.
    """

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "from_attributes": True,
    }
