import logging
from threading import Lock
from typing import Any

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import HTTPException, status
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database
from pymongo.results import DeleteResult, InsertOneResult, UpdateResult

from survey_api.core import config


logger = logging.getLogger(__name__)

USERS = "users"
SURVEYS = "surveys"
PAYMENTS = "payments"
COMMENTS = "comments"
REPORTS = "reports"
REVOKED_TOKENS = "revoked_tokens"

client = MongoClient(config.MONGODB_URI, serverSelectionTimeoutMS=config.MONGODB_TIMEOUT_MS)

_index_lock = Lock()
_indexes_checked = False


def get_db() -> Database:
    return client[config.MONGODB_DB_NAME]


def create_indexes(db: Database) -> None:
    # Unique email closes the check-then-insert race on user creation.
    db[USERS].create_index([("email", ASCENDING)], unique=True, name="uniq_users_email")
    db[REVOKED_TOKENS].create_index([("jti", ASCENDING)], unique=True, name="uniq_revoked_jti")
    db[REVOKED_TOKENS].create_index("expires_at", expireAfterSeconds=0, name="ttl_revoked_expires_at")
    db[COMMENTS].create_index([("surveyId", ASCENDING)], name="idx_comments_survey")
    db[REPORTS].create_index([("surveyId", ASCENDING)], name="idx_reports_survey")


def ensure_indexes() -> None:
    global _indexes_checked

    if _indexes_checked:
        return

    with _index_lock:
        if _indexes_checked:
            return

        create_indexes(get_db())
        logger.info("MongoDB indexes ensured on database %s", config.MONGODB_DB_NAME)
        _indexes_checked = True


def parse_object_id(value: str) -> ObjectId:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid id.") from exc


def without_fields(document: dict[str, Any], fields=('_id',)) -> dict[str, Any]:
    """Drop client-supplied keys the server owns before a document is written."""
    return {key: value for key, value in document.items() if key not in fields}


def serialize_document(document: dict[str, Any] | None) -> dict[str, Any] | None:
    if document is None:
        return None
    serialized = dict(document)
    if "_id" in serialized:
        serialized["_id"] = str(serialized["_id"])
    return serialized


def serialize_documents(documents) -> list[dict[str, Any]]:
    return [serialize_document(document) for document in documents]


def serialize_insert(result: InsertOneResult) -> dict[str, Any]:
    return {"acknowledged": result.acknowledged, "insertedId": str(result.inserted_id)}


def serialize_update(result: UpdateResult) -> dict[str, Any]:
    upserted_id = result.upserted_id
    return {
        "acknowledged": result.acknowledged,
        "matchedCount": result.matched_count,
        "modifiedCount": result.modified_count,
        "upsertedId": str(upserted_id) if upserted_id is not None else None,
    }


def serialize_delete(result: DeleteResult) -> dict[str, Any]:
    return {"acknowledged": result.acknowledged, "deletedCount": result.deleted_count}
