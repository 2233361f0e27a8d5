"""
Database executor: one function per demo operation on the people
collection, with server time limits and timeout mapping.

Every function blocks until the driver reports completion and returns the
plain result the runner needs; driver errors propagate to the caller.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.errors import ExecutionTimeout, PyMongoError
from pymongo.read_concern import ReadConcern
from pymongo.write_concern import WriteConcern

from logger import logger
from person import Person

# ---------------------- CONSTANTS ----------------------

DEFAULT_PAGE_SIZE = 20
FIND_TIMEOUT_MS = 10000
QUERY_TIMEOUT_MS = 5000
COMMIT_TIMEOUT_MS = 10000

AGE_SUM_PIPELINE = [
    {"$group": {"_id": None, "cumulativeAge": {"$sum": "$age"}}},
]


# ---------------------- WRITES ----------------------

def drop_collection(collection: Collection) -> None:
    collection.drop()


def insert_people(collection: Collection, people: List[Person]) -> int:
    """Bulk insert, unordered. Returns the number of inserted ids.

    An empty batch is not sent; pymongo refuses an empty insert_many.
    """
    if not people:
        return 0
    result = collection.insert_many(
        [p.to_document() for p in people],
        ordered=False,
    )
    return len(result.inserted_ids)


def create_age_index(collection: Collection) -> str:
    return collection.create_index([("age", ASCENDING)])


def update_birth_date(collection: Collection, age: int, born: datetime) -> int:
    """Set ``dateOfBirth`` on the first record with the given age."""
    result = collection.update_one({"age": age}, {"$set": {"dateOfBirth": born}})
    return result.modified_count


def delete_older_than(collection: Collection, age: int) -> int:
    result = collection.delete_many({"age": {"$gt": age}})
    return result.deleted_count


# ---------------------- READS ----------------------

def read_page(
    collection: Collection,
    skip: int = 0,
    limit: int = DEFAULT_PAGE_SIZE,
) -> List[Person]:
    """Bounded read with a server-side time limit."""
    try:
        cursor = collection.find().skip(skip).limit(limit).max_time_ms(FIND_TIMEOUT_MS)
        return [Person.from_document(doc) for doc in cursor]
    except ExecutionTimeout:
        raise TimeoutError("Query timed out after exceeding the time limit.")


def sum_ages_client(collection: Collection) -> int:
    """Full scan, accumulating ages one document at a time."""
    cumulative_age = 0
    for doc in collection.find():
        cumulative_age += Person.from_document(doc).age
    return cumulative_age


def sum_ages_server(collection: Collection) -> int:
    try:
        results = list(collection.aggregate(AGE_SUM_PIPELINE, maxTimeMS=QUERY_TIMEOUT_MS))
    except ExecutionTimeout:
        raise TimeoutError("Aggregation timed out after exceeding the time limit.")
    if not results:
        return 0
    return results[0]["cumulativeAge"]


def count_people(collection: Collection, mongo_filter: Optional[Dict[str, Any]] = None) -> int:
    try:
        return collection.count_documents(mongo_filter or {}, maxTimeMS=QUERY_TIMEOUT_MS)
    except ExecutionTimeout:
        raise TimeoutError("Count timed out after exceeding the time limit.")


# ---------------------- TRANSACTION ----------------------

def transaction_options() -> Dict[str, Any]:
    return {
        "read_concern": ReadConcern("snapshot"),
        "write_concern": WriteConcern("majority"),
        "max_commit_time_ms": COMMIT_TIMEOUT_MS,
    }


def run_transaction(
    client: MongoClient,
    collection: Collection,
    person: Person,
    delete_filter: Dict[str, Any],
) -> Dict[str, Any]:
    """Insert ``person`` and delete ``delete_filter`` matches atomically.

    The transaction context commits on a clean exit and aborts exactly once
    if either statement raises; the error is re-raised to the caller.
    """
    with client.start_session() as session:
        try:
            with session.start_transaction(**transaction_options()):
                inserted = collection.insert_one(person.to_document(), session=session)
                deleted = collection.delete_many(delete_filter, session=session)
        except PyMongoError as e:
            logger.warning("[TX] Transaction aborted: %s", e)
            raise
    logger.debug("[TX] Committed")
    return {
        "inserted_id": str(inserted.inserted_id),
        "deleted_count": deleted.deleted_count,
    }
