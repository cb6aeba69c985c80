from __future__ import annotations

from pydantic import BaseModel, Field


class EntryRequest(BaseModel):
    # Emptiness and length are checked by the entry service so the error
    # surfaces as a ValidationError rather than a schema failure.
    name: str = Field(default="", description="Author name, at most 100 characters")
    message: str = Field(default="", description="Entry text")
