"""Studio schemas."""

from typing import Optional

from ._strict_base import StandardizedModel, TimeOfDay


class StudioResponse(StandardizedModel):
    id: str
    name: str
    studio_type: Optional[str] = None
    capacity: Optional[int] = None
    hourly_rate: int
    open_time: Optional[TimeOfDay] = None
    close_time: Optional[TimeOfDay] = None
    is_active: bool
