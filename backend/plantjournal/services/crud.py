# generic crud helpers - thin wrappers over motor collections
# every call is bounded by a deadline and store failures surface as ReadError / WriteError

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import UpdateOne
from pymongo.errors import BulkWriteError, PyMongoError

from plantjournal.config import settings
from plantjournal.exceptions import ReadError, WriteError
from plantjournal.services.ids import externalize

logger = logging.getLogger(__name__)


@dataclass
class UpdateResult:
    matched_count: int = 0
    modified_count: int = 0
    deleted_count: int = 0


@dataclass
class DeleteResult:
    deleted_count: int = 0


async def _bounded(awaitable, timeout: Optional[float] = None):
    """await a storage call with the configured deadline"""
    return await asyncio.wait_for(awaitable, timeout or settings.DB_OPERATION_TIMEOUT_SECONDS)


async def create_one(db: AsyncIOMotorDatabase, collection: str, document: dict) -> dict:
    """insert one document and return it with a string _id"""
    try:
        result = await _bounded(db[collection].insert_one(document))
    except (PyMongoError, asyncio.TimeoutError) as e:
        logger.warning(f"{collection} insert failed: {e!r}")
        raise WriteError(f"Insert into {collection} failed", details={"error": repr(e)}) from e

    document["_id"] = result.inserted_id
    return externalize(document)


async def read(
    db: AsyncIOMotorDatabase,
    collection: str,
    query: dict,
    projection: Optional[dict] = None,
    options: Optional[dict] = None,
) -> list[dict]:
    """find matching documents. options may carry sort, skip and limit.
    an empty list is a normal result, not an error."""
    options = options or {}

    async def _find() -> list[dict]:
        cursor = db[collection].find(query, projection or None)
        if options.get("sort"):
            cursor = cursor.sort(options["sort"])
        if options.get("skip"):
            cursor = cursor.skip(options["skip"])
        if options.get("limit"):
            cursor = cursor.limit(options["limit"])
        return await cursor.to_list(length=None)

    try:
        docs = await _bounded(_find())
    except (PyMongoError, asyncio.TimeoutError) as e:
        logger.warning(f"{collection} read failed for {query}: {e!r}")
        raise ReadError(f"Read from {collection} failed", details={"error": repr(e)}) from e

    return [externalize(doc) for doc in docs]


def _to_update_op(document: dict, match: Optional[dict] = None) -> UpdateOne:
    fields = {k: v for k, v in document.items() if k != "_id"}
    query = {"_id": document["_id"]}
    if match:
        query.update(match)
    return UpdateOne(query, {"$set": fields})


async def update(
    db: AsyncIOMotorDatabase,
    collection: str,
    documents: Union[dict, list[dict]],
    match: Optional[dict] = None,
) -> UpdateResult:
    """merge one document or a batch into existing documents matched by _id.

    a batch goes out as a single ordered bulk write: items run in order and the
    first failing item stops the rest. the WriteError details name the ids that
    were written and the ones that were not.
    """
    batch = documents if isinstance(documents, list) else [documents]
    if not batch:
        return UpdateResult()

    for doc in batch:
        if doc.get("_id") is None:
            raise WriteError(f"Update on {collection} needs an _id on every document")

    ops = [_to_update_op(doc, match) for doc in batch]
    try:
        result = await _bounded(db[collection].bulk_write(ops, ordered=True))
    except BulkWriteError as e:
        failed_index = e.details["writeErrors"][0]["index"] if e.details.get("writeErrors") else 0
        ids = [str(doc["_id"]) for doc in batch]
        logger.warning(f"{collection} batch update stopped at item {failed_index}: {e.details}")
        raise WriteError(
            f"Update on {collection} failed",
            details={"written": ids[:failed_index], "failed": ids[failed_index:]},
        ) from e
    except (PyMongoError, asyncio.TimeoutError) as e:
        logger.warning(f"{collection} update failed: {e!r}")
        raise WriteError(
            f"Update on {collection} failed",
            details={"failed": [str(doc["_id"]) for doc in batch], "error": repr(e)},
        ) from e

    return UpdateResult(matched_count=result.matched_count, modified_count=result.modified_count)


async def remove(db: AsyncIOMotorDatabase, collection: str, query: dict[str, Any]) -> DeleteResult:
    """delete every document matching query. zero matches is not an error."""
    try:
        result = await _bounded(db[collection].delete_many(query))
    except (PyMongoError, asyncio.TimeoutError) as e:
        logger.warning(f"{collection} delete failed for {query}: {e!r}")
        raise WriteError(f"Delete from {collection} failed", details={"error": repr(e)}) from e

    return DeleteResult(deleted_count=result.deleted_count)
