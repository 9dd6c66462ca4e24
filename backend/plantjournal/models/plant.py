# plant models - create/update payloads and response schemas
# plants carry free-form attributes beyond the ones named here

from typing import Optional
from pydantic import BaseModel, Field

from plantjournal.models.note import NoteResponse


class PlantCreate(BaseModel):
    """payload for creating a plant. userId is always the signed-in user."""
    title: str = Field(..., min_length=1, description="display name of the plant")
    botanical_name: Optional[str] = Field(None, alias="botanicalName")
    common_name: Optional[str] = Field(None, alias="commonName")
    description: Optional[str] = None
    purchase_date: Optional[str] = Field(None, alias="purchaseDate")
    planted_date: Optional[str] = Field(None, alias="plantedDate")

    model_config = {"populate_by_name": True, "extra": "allow"}


class PlantUpdate(PlantCreate):
    title: Optional[str] = Field(None, min_length=1)


class PlantResponse(BaseModel):
    id: str
    user_id: str = Field(..., alias="userId")
    title: str = ""
    notes: Optional[list[NoteResponse]] = None

    model_config = {"populate_by_name": True, "extra": "allow"}
