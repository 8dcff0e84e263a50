"""Stored guidance: only the raw model text is kept.

The structured response is rebuilt on every read from (content, mode), so a
mode change or a parser update is reflected the next time history is opened.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Union

from pydantic import BaseModel

from parentguidance.services.guidance.engine import parse
from parentguidance.services.guidance.schemas import (
    DynamicResponse,
    FixedResponse,
    StructuralMode,
)


class GuidanceRecord(BaseModel):
    id: str
    situation_id: str
    content: str
    category: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    def to_response(self, mode: StructuralMode) -> Union[FixedResponse, DynamicResponse]:
        return parse(self.content, mode)


def combine_records(
    records: Iterable[GuidanceRecord], mode: StructuralMode
) -> Union[FixedResponse, DynamicResponse]:
    """Parse several stored entries for one situation as a single document."""
    full_content = "\n\n".join(record.content for record in records)
    return parse(full_content, mode)
