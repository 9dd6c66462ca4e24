# journal store - every crud operation for the user, plant and note collections
# this is the only layer that converts between string ids and mongo objectids:
#   reads / updates / deletes: query ids string -> objectid, result ids objectid -> string
#   inserts: document ids string -> objectid, result ids objectid -> string
#
# objectid fields per collection:
#   user:  _id
#   plant: _id, userId
#   note:  _id, userId, plantIds[]

import logging
from datetime import datetime, timezone
from typing import Optional

from plantjournal.exceptions import ValidationError
from plantjournal.services import cascade
from plantjournal.services.crud import DeleteResult, UpdateResult, create_one, read, remove, update
from plantjournal.services.db import Database
from plantjournal.services.ids import externalize, nativize, to_native

logger = logging.getLogger(__name__)

PLANT_ID_FIELDS = ("_id", "userId")
NOTE_ID_FIELDS = ("_id", "userId")
NOTE_LIST_FIELDS = ("plantIds",)


def _plant_out(plant: Optional[dict]) -> Optional[dict]:
    return externalize(plant, PLANT_ID_FIELDS)


def _note_out(note: Optional[dict]) -> Optional[dict]:
    return externalize(note, NOTE_ID_FIELDS, NOTE_LIST_FIELDS)


def _note_in(note: dict) -> dict:
    """nativize a note's ids, dropping repeated plant ids while keeping order"""
    doc = nativize(dict(note), NOTE_ID_FIELDS, NOTE_LIST_FIELDS)
    if "plantIds" in doc:
        doc["plantIds"] = list(dict.fromkeys(doc["plantIds"]))
    return doc


class JournalStore:
    """facade over the plant journal collections.

    callers pass and receive string ids; the connection manager is injected so
    tests and the api share one lazily opened connection.
    """

    def __init__(self, database: Database):
        self.database = database

    # user

    async def find_or_create_facebook_user(self, profile: dict) -> dict:
        """return the user with this facebook id, creating it from profile on first sign-in"""
        facebook_id = ((profile or {}).get("facebook") or {}).get("id")
        if not facebook_id:
            raise ValidationError("No facebook.id in user profile", details={"profile": profile})

        db = await self.database.get_connection()
        users = await read(db, "user", {"facebook.id": facebook_id})
        if users:
            if len(users) != 1:
                logger.warning(f"Unexpected user count {len(users)} for facebook.id {facebook_id}")
            return users[0]

        user = dict(profile)
        user.setdefault("createdAt", datetime.now(timezone.utc).isoformat())
        created = await create_one(db, "user", user)
        logger.info(f"Created user {created['_id']} for facebook.id {facebook_id}")
        return created

    async def get_user_by_id(self, user_id: str) -> Optional[dict]:
        db = await self.database.get_connection()
        users = await read(db, "user", {"_id": to_native(user_id)})
        return users[0] if users else None

    # plant

    async def create_plant(self, plant: dict) -> dict:
        if not plant.get("userId"):
            raise ValidationError("userId must be specified as part of plant when creating a plant")
        doc = nativize(dict(plant), PLANT_ID_FIELDS)

        db = await self.database.get_connection()
        return _plant_out(await create_one(db, "plant", doc))

    async def get_plant_by_id(self, plant_id: str) -> Optional[dict]:
        """fetch a plant and attach the notes that reference it.
        returns None when no plant matches."""
        oid = to_native(plant_id)
        db = await self.database.get_connection()

        plants = await read(db, "plant", {"_id": oid})
        if not plants:
            return None
        if len(plants) != 1:
            logger.warning(f"Unexpected plant count {len(plants)} for _id {plant_id}")

        notes = await read(db, "note", {"plantIds": oid}, options={"sort": [("date", 1)]})
        plant = _plant_out(plants[0])
        plant["notes"] = [_note_out(note) for note in notes]
        return plant

    async def get_plants_by_user_id(self, user_id: str) -> Optional[list[dict]]:
        """plants owned by a user, without notes. None when the user doesn't exist."""
        oid = to_native(user_id)
        db = await self.database.get_connection()

        users = await read(db, "user", {"_id": oid}, {"_id": 1})
        if len(users) != 1:
            logger.info(f"No user found for userId {user_id}")
            return None

        plants = await read(db, "plant", {"userId": oid})
        logger.debug(f"Plants found for user {user_id}: {len(plants)}")
        return [_plant_out(p) for p in plants]

    async def update_plant(self, plant: dict) -> UpdateResult:
        if not plant.get("_id") or not plant.get("userId"):
            raise ValidationError("_id and userId must be specified when updating a plant")
        doc = nativize(dict(plant), PLANT_ID_FIELDS)
        doc.pop("notes", None)

        db = await self.database.get_connection()
        return await update(db, "plant", doc, match={"userId": doc["userId"]})

    async def delete_plant(self, plant_id: str, user_id: str) -> DeleteResult:
        """remove the plant, delete the notes that only reference it and drop
        it from the notes that reference other plants too."""
        plant_oid = to_native(plant_id)
        user_oid = to_native(user_id)

        db = await self.database.get_connection()
        try:
            result = await cascade.delete_plant_cascade(db, plant_oid, user_oid)
        except Exception as e:
            logger.warning(f"delete plant {plant_id} finished with error: {e}")
            raise
        logger.info(f"delete plant {plant_id} finished, {result.deleted_count} removed")
        return result

    async def delete_all_plants_by_user_id(self, user_id: str) -> DeleteResult:
        """remove every plant and note belonging to a user"""
        oid = to_native(user_id)
        db = await self.database.get_connection()

        await remove(db, "note", {"userId": oid})
        return await remove(db, "plant", {"userId": oid})

    # note

    async def create_note(self, note: dict) -> dict:
        if not note.get("userId"):
            raise ValidationError("userId must be specified as part of note when creating a note")
        if not note.get("plantIds"):
            raise ValidationError("plantIds must reference at least one plant when creating a note")
        doc = _note_in(note)

        db = await self.database.get_connection()
        return _note_out(await create_one(db, "note", doc))

    async def get_note_by_id(self, note_id: str) -> Optional[dict]:
        db = await self.database.get_connection()
        notes = await read(db, "note", {"_id": to_native(note_id)})
        return _note_out(notes[0]) if notes else None

    async def update_note(self, note: dict) -> UpdateResult:
        """merge note fields into the stored note. a note left without plants
        is deleted rather than saved with an empty plantIds."""
        if not note.get("_id") or not note.get("userId"):
            raise ValidationError("_id and userId must be specified when updating a note")
        doc = _note_in(note)

        db = await self.database.get_connection()
        if "plantIds" in doc and not doc["plantIds"]:
            logger.info(f"Note {note['_id']} has no plants left, deleting it")
            removed = await remove(db, "note", {"_id": doc["_id"], "userId": doc["userId"]})
            return UpdateResult(deleted_count=removed.deleted_count)

        return await update(db, "note", doc, match={"userId": doc["userId"]})

    async def delete_note(self, note_id: str, user_id: str) -> DeleteResult:
        db = await self.database.get_connection()
        return await remove(db, "note", {"_id": to_native(note_id), "userId": to_native(user_id)})


# singleton instance
store = JournalStore(Database())


async def get_store() -> JournalStore:
    """dependency injection for store access"""
    return store
