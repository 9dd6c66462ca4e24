# plants router - list, create, fetch with notes, update, and cascading delete
# writes are scoped to the signed-in user

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from plantjournal.dependencies import get_current_user
from plantjournal.models.plant import PlantCreate, PlantResponse, PlantUpdate
from plantjournal.routers.notes import doc_to_note
from plantjournal.services.store import JournalStore, get_store

logger = logging.getLogger(__name__)
router = APIRouter(tags=["plants"])


def _doc_to_plant(doc: dict) -> PlantResponse:
    fields = {k: v for k, v in doc.items() if k not in ("_id", "notes")}
    notes = doc.get("notes")
    return PlantResponse(
        id=doc["_id"],
        notes=[doc_to_note(n) for n in notes] if notes is not None else None,
        **fields,
    )


@router.get("/plants", response_model=list[PlantResponse])
async def list_my_plants(
    current_user: dict = Depends(get_current_user),
    store: JournalStore = Depends(get_store),
):
    plants = await store.get_plants_by_user_id(current_user["_id"])
    return [_doc_to_plant(p) for p in plants or []]


@router.get("/users/{user_id}/plants", response_model=list[PlantResponse])
async def list_user_plants(
    user_id: str,
    store: JournalStore = Depends(get_store),
):
    """plants belonging to any user, without notes"""
    plants = await store.get_plants_by_user_id(user_id)
    if plants is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return [_doc_to_plant(p) for p in plants]


@router.post("/plants", response_model=PlantResponse, status_code=status.HTTP_201_CREATED)
async def create_plant(
    body: PlantCreate,
    current_user: dict = Depends(get_current_user),
    store: JournalStore = Depends(get_store),
):
    plant = body.model_dump(by_alias=True, exclude_none=True)
    plant["userId"] = current_user["_id"]
    created = await store.create_plant(plant)
    logger.info(f"Plant created: {created['_id']} by user {current_user['_id']}")
    return _doc_to_plant(created)


@router.get("/plants/{plant_id}", response_model=PlantResponse)
async def get_plant(
    plant_id: str,
    store: JournalStore = Depends(get_store),
):
    """a plant with every note that references it"""
    plant = await store.get_plant_by_id(plant_id)
    if not plant:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Plant not found",
        )
    return _doc_to_plant(plant)


@router.put("/plants/{plant_id}", response_model=PlantResponse)
async def update_plant(
    plant_id: str,
    body: PlantUpdate,
    current_user: dict = Depends(get_current_user),
    store: JournalStore = Depends(get_store),
):
    plant = body.model_dump(by_alias=True, exclude_none=True)
    plant["_id"] = plant_id
    plant["userId"] = current_user["_id"]

    result = await store.update_plant(plant)
    if not result.matched_count:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Plant not found",
        )

    updated = await store.get_plant_by_id(plant_id)
    return _doc_to_plant(updated)


@router.delete("/plants/{plant_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_plant(
    plant_id: str,
    current_user: dict = Depends(get_current_user),
    store: JournalStore = Depends(get_store),
):
    """delete a plant along with the notes that only reference it"""
    result = await store.delete_plant(plant_id, current_user["_id"])
    if not result.deleted_count:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Plant not found",
        )
    logger.info(f"Plant deleted: {plant_id} by user {current_user['_id']}")
