"""Participant record as returned by the lookup API."""

from pydantic import BaseModel, ConfigDict, Field


class Participant(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    unique_code: str
    name: str
    is_crossed: bool = Field(default=False, alias="isCrossed")
