# notes router - create, read, update and delete notes about plants
# the owner is always the signed-in user

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from plantjournal.dependencies import get_current_user
from plantjournal.models.note import NoteCreate, NoteResponse, NoteUpdate, NoteUpdateResponse
from plantjournal.services.store import JournalStore, get_store

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/notes", tags=["notes"])


def doc_to_note(doc: dict) -> NoteResponse:
    """convert a store note (string ids, _id key) to the response model"""
    fields = {k: v for k, v in doc.items() if k != "_id"}
    return NoteResponse(id=doc["_id"], **fields)


@router.post("", response_model=NoteResponse, status_code=status.HTTP_201_CREATED)
async def create_note(
    body: NoteCreate,
    current_user: dict = Depends(get_current_user),
    store: JournalStore = Depends(get_store),
):
    note = body.model_dump(by_alias=True, exclude_none=True)
    note["userId"] = current_user["_id"]
    created = await store.create_note(note)
    logger.info(f"Note created: {created['_id']} by user {current_user['_id']}")
    return doc_to_note(created)


@router.get("/{note_id}", response_model=NoteResponse)
async def get_note(
    note_id: str,
    store: JournalStore = Depends(get_store),
):
    note = await store.get_note_by_id(note_id)
    if not note:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Note not found",
        )
    return doc_to_note(note)


@router.put("/{note_id}", response_model=NoteUpdateResponse)
async def update_note(
    note_id: str,
    body: NoteUpdate,
    current_user: dict = Depends(get_current_user),
    store: JournalStore = Depends(get_store),
):
    """update a note. removing every plant from a note deletes it."""
    note = body.model_dump(by_alias=True, exclude_none=True)
    note["_id"] = note_id
    note["userId"] = current_user["_id"]

    result = await store.update_note(note)
    if result.deleted_count:
        logger.info(f"Note {note_id} deleted by update with no plants")
        return NoteUpdateResponse(deleted=True)
    if not result.matched_count:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Note not found",
        )

    updated = await store.get_note_by_id(note_id)
    return NoteUpdateResponse(note=doc_to_note(updated))


@router.delete("/{note_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_note(
    note_id: str,
    current_user: dict = Depends(get_current_user),
    store: JournalStore = Depends(get_store),
):
    result = await store.delete_note(note_id, current_user["_id"])
    if not result.deleted_count:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Note not found",
        )
    logger.info(f"Note deleted: {note_id} by user {current_user['_id']}")
