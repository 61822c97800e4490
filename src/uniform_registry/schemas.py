"""Pydantic data models for the Uniform Registry service."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class UniformRecord(BaseModel):
    """One uniform entry as stored in the backing file.

    Stored values are passed through as they are: keys absent from the
    stored object stay absent in responses, and values or keys this model
    does not describe are not validated.
    """

    model_config = ConfigDict(extra="allow")

    id: Any = Field(..., description="Millisecond creation timestamp.")
    school: Any = Field(None, description="School name.")
    schoolType: Any = Field(None, description="Kind of school.")
    uniformCombo: Any = Field(None, description="Everyday uniform description.")
    uniformImage: Any = Field(None, example="/uploads/1718000000000.jpg")
    compoundWear: Any = Field(None, description="Compound wear description.")
    compoundImage: Any = None
    churchWear: Any = Field(None, description="Church wear description.")
    churchImage: Any = None


class MessageResponse(BaseModel):
    """Status message returned by delete and by every error response."""

    message: str = Field(..., example="Uniform deleted successfully!")


class UniformResponse(MessageResponse):
    """Status message plus the record that was created or updated."""

    data: UniformRecord
