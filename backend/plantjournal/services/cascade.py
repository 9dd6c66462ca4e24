# cascading plant delete - the stages run strictly in order
# 1. fetch notes that reference the plant
# 2. split them into notes that only reference this plant and notes that reference several
# 3. delete the single-plant notes
# 4. drop the plant id from the multi-plant notes
# 5. delete the plant itself, re-checking ownership
#
# no transaction spans the stages: a failure aborts the remaining stages and
# earlier stages stay applied. concurrent deletes or note creation against the
# same plant are not isolated from each other.

import logging
from dataclasses import dataclass, field

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase

from plantjournal.services.crud import DeleteResult, UpdateResult, read, remove, update
from plantjournal.services.ids import to_native, to_native_list

logger = logging.getLogger(__name__)


@dataclass
class NotePartition:
    single_plant_notes: list[ObjectId] = field(default_factory=list)
    multiple_plant_notes: list[dict] = field(default_factory=list)


async def fetch_dependent_notes(db: AsyncIOMotorDatabase, plant_id: ObjectId, user_id: ObjectId) -> list[dict]:
    notes = await read(db, "note", {"plantIds": plant_id, "userId": user_id})
    logger.debug(f"#1 fetch_dependent_notes: {len(notes)} notes reference plant {plant_id}")
    return notes


def partition_notes(notes: list[dict], plant_id: ObjectId) -> NotePartition:
    """split notes into ids to delete and notes to update.

    a note whose plantIds would be empty once this plant is removed goes to the
    delete side, so the update stage never sees it.
    """
    partition = NotePartition()
    for note in notes:
        remaining = [pid for pid in to_native_list(note.get("plantIds")) if pid != plant_id]
        if not remaining:
            partition.single_plant_notes.append(to_native(note["_id"]))
        else:
            partition.multiple_plant_notes.append(note)
    logger.debug(
        f"#2 partition_notes: {len(partition.single_plant_notes)} single, "
        f"{len(partition.multiple_plant_notes)} multiple"
    )
    return partition


async def delete_single_plant_notes(db: AsyncIOMotorDatabase, note_ids: list[ObjectId]) -> DeleteResult:
    if not note_ids:
        return DeleteResult()
    result = await remove(db, "note", {"_id": {"$in": note_ids}})
    if result.deleted_count != len(note_ids):
        logger.warning(f"#3 expected to delete {len(note_ids)} notes, deleted {result.deleted_count}")
    logger.debug(f"#3 delete_single_plant_notes: {result.deleted_count} deleted")
    return result


async def update_multiple_plant_notes(
    db: AsyncIOMotorDatabase, notes: list[dict], plant_id: ObjectId
) -> UpdateResult:
    if not notes:
        return UpdateResult()
    updated_notes = []
    for note in notes:
        plant_ids = [pid for pid in to_native_list(note["plantIds"]) if pid != plant_id]
        updated_notes.append({"_id": to_native(note["_id"]), "plantIds": plant_ids})
    result = await update(db, "note", updated_notes)
    logger.debug(f"#4 update_multiple_plant_notes: {result.modified_count} updated")
    return result


async def delete_plant_record(db: AsyncIOMotorDatabase, plant_id: ObjectId, user_id: ObjectId) -> DeleteResult:
    result = await remove(db, "plant", {"_id": plant_id, "userId": user_id})
    logger.debug(f"#5 delete_plant_record: {result.deleted_count} deleted")
    return result


async def delete_plant_cascade(db: AsyncIOMotorDatabase, plant_id: ObjectId, user_id: ObjectId) -> DeleteResult:
    notes = await fetch_dependent_notes(db, plant_id, user_id)
    partition = partition_notes(notes, plant_id)
    await delete_single_plant_notes(db, partition.single_plant_notes)
    await update_multiple_plant_notes(db, partition.multiple_plant_notes, plant_id)
    return await delete_plant_record(db, plant_id, user_id)
