"""
Shared response models for the payloads the mobile client reads (camelCase).
"""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Serialized with camelCase keys; also accepts snake_case names and attribute objects."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class EnrichedLineResponse(CamelModel):
    category_id: int
    category_name: str
    parent_category_name: str
    color_hex: str | None = None
    planned: float
    spent: float
    remaining: float
    progress_pct: float
    status: str
