# note models - a note is written about one or more plants

from typing import Optional
from pydantic import BaseModel, Field


class NoteCreate(BaseModel):
    plant_ids: list[str] = Field(..., alias="plantIds", min_length=1, description="ids of the plants this note is about")
    date: str = Field(..., description="date the note refers to")
    note: str = Field("", description="note text")

    model_config = {"populate_by_name": True, "extra": "allow"}


class NoteUpdate(BaseModel):
    """partial update. an empty plantIds deletes the note."""
    plant_ids: Optional[list[str]] = Field(None, alias="plantIds")
    date: Optional[str] = None
    note: Optional[str] = None

    model_config = {"populate_by_name": True, "extra": "allow"}


class NoteResponse(BaseModel):
    id: str
    user_id: str = Field(..., alias="userId")
    plant_ids: list[str] = Field(default_factory=list, alias="plantIds")
    date: Optional[str] = None
    note: str = ""

    model_config = {"populate_by_name": True, "extra": "allow"}


class NoteUpdateResponse(BaseModel):
    deleted: bool = False
    note: Optional[NoteResponse] = None
