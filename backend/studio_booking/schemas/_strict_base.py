"""Strict schema baselines with forbidden extras by default."""

from datetime import time
from typing import Annotated

from pydantic import BaseModel, BeforeValidator, ConfigDict, PlainSerializer

from ..utils.time_utils import format_time, parse_time_of_day


class StrictModel(BaseModel):
    """Neutral strict base for response DTOs."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)


class StrictRequestModel(StrictModel):
    """Request DTO base that always forbids unexpected fields."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)


class StandardizedModel(BaseModel):
    """Response base with enum values and attribute loading."""

    model_config = ConfigDict(use_enum_values=True, populate_by_name=True, from_attributes=True)


# Accepts "HH:MM" / "HH:MM:SS" / time, serializes back to "HH:MM"
TimeOfDay = Annotated[
    time,
    BeforeValidator(parse_time_of_day),
    PlainSerializer(format_time, return_type=str, when_used="json"),
]
