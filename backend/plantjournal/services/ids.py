# identifier codec - string ids outside the data layer, objectids inside
# the store facade is the only caller; crud helpers only normalise _id on reads

from typing import Iterable, Optional

from bson import ObjectId
from bson.errors import InvalidId

from plantjournal.exceptions import InvalidIdentifier


def to_native(value) -> ObjectId:
    """convert an external string id to an objectid, raises InvalidIdentifier.

    uppercase hex is accepted and comes back lowercase from to_external, so the
    round trip only holds for the canonical lowercase form.
    """
    if isinstance(value, ObjectId):
        return value
    if not isinstance(value, str):
        raise InvalidIdentifier(value)
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise InvalidIdentifier(value) from None


def to_external(value: ObjectId) -> str:
    return str(value)


def to_native_list(values: Optional[Iterable]) -> list[ObjectId]:
    return [to_native(v) for v in (values or [])]


def to_external_list(values: Optional[Iterable]) -> list[str]:
    return [to_external(v) for v in (values or [])]


def externalize(doc: Optional[dict], fields: Iterable[str] = ("_id",), list_fields: Iterable[str] = ()) -> Optional[dict]:
    """convert the named objectid fields of a document to strings in place"""
    if not doc:
        return doc
    for field in fields:
        if doc.get(field) is not None:
            doc[field] = to_external(doc[field])
    for field in list_fields:
        if field in doc:
            doc[field] = to_external_list(doc[field])
    return doc


def nativize(doc: dict, fields: Iterable[str] = ("_id",), list_fields: Iterable[str] = ()) -> dict:
    """convert the named string id fields of a document to objectids in place"""
    for field in fields:
        if doc.get(field) is not None:
            doc[field] = to_native(doc[field])
    for field in list_fields:
        if field in doc:
            doc[field] = to_native_list(doc[field])
    return doc
