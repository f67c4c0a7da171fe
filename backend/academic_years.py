"""
Single active academic year.

Creating or updating a year with ``isActive`` set is rejected while another
year is active; switching the active year goes through ``activate``, which
deactivates every other year before activating the requested one.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from pymongo import ReturnDocument

from database import get_db
from errors import Conflict, NotFound
from references import parse_object_id

logger = logging.getLogger(__name__)

ACTIVE_YEAR_EXISTS = "There is already an active academic year. Deactivate it first."


def get_active_year() -> Optional[dict]:
    return get_db()["academicyear"].find_one({"isActive": True})


def ensure_no_other_active(exclude_id: Optional[ObjectId] = None) -> None:
    query = {"isActive": True}
    if exclude_id is not None:
        query["_id"] = {"$ne": exclude_id}
    if get_db()["academicyear"].find_one(query, {"_id": 1}) is not None:
        raise Conflict(ACTIVE_YEAR_EXISTS)


def activate(year_id: str) -> dict:
    oid = parse_object_id(year_id, "academic year ID")
    years = get_db()["academicyear"]
    if years.find_one({"_id": oid}, {"_id": 1}) is None:
        raise NotFound("Academic year", year_id)
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    years.update_many({"_id": {"$ne": oid}, "isActive": True}, {"$set": {"isActive": False, "updatedAt": now}})
    year = years.find_one_and_update(
        {"_id": oid},
        {"$set": {"isActive": True, "updatedAt": now}},
        return_document=ReturnDocument.AFTER,
    )
    if year is None:
        raise NotFound("Academic year", year_id)
    logger.info("Academic year %s is now active", year.get("name"))
    return year
