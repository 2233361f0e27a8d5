"""
Sequential demo runner: issues the demo operations one at a time, in a
fixed order, and records every outcome as a step entry of a run report.

Step entry shape:
    { "step": 3, "name": "find_first_page", "status": "ok",
      "result": {...}, "summary": ["Person{...}", ...] }
or, on failure:
    { "step": 8, "name": "delete_many", "status": "error",
      "error_type": "OperationFailure", "error": "..." }

A failed step is never retried. The run goes on with the next step, and the
report carries ``status="error"`` and the names of every failed step in
``failed_steps``.
"""

from typing import Any, Callable, Dict, List, Optional, Tuple

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from cluster_manager import connect_to_cluster, get_people_collection
from config import PERSON_COUNT, PAGE_SIZE
from db_executor import (
    count_people,
    create_age_index,
    delete_older_than,
    drop_collection,
    insert_people,
    read_page,
    run_transaction,
    sum_ages_client,
    sum_ages_server,
    update_birth_date,
)
from logger import logger
from person import DEFAULT_NAME, generate_people, newcomer, years_ago
from verification import check_properties

# ---------------------- CONSTANTS ----------------------

UPDATE_AGE = 5
DELETE_OLDER_THAN = 5

STEP_NAMES = [
    "drop",
    "insert_many",
    "find_first_page",
    "sum_ages_client",
    "sum_ages_server",
    "create_index",
    "update_one",
    "delete_many",
    "count",
    "transaction",
]

StepOutcome = Tuple[Dict[str, Any], List[str]]
"""(result, summary_lines)"""

StepCallback = Callable[[Dict[str, Any]], None]


# ---------------------- STEPS ----------------------

def _build_steps(
    client: MongoClient,
    collection: Collection,
    person_count: int,
    page_size: int,
) -> List[Tuple[str, Callable[[], StepOutcome]]]:

    def drop() -> StepOutcome:
        drop_collection(collection)
        return {}, ["Collection dropped"]

    def insert_many() -> StepOutcome:
        inserted = insert_people(collection, generate_people(person_count))
        stored = count_people(collection)
        return (
            {"inserted": inserted, "count_after_insert": stored},
            [f"Inserted {inserted} documents"],
        )

    def find_first_page() -> StepOutcome:
        people = read_page(collection, skip=0, limit=page_size)
        return (
            {"returned": len(people), "people": [p.to_document() for p in people]},
            [str(p) for p in people],
        )

    def client_sum() -> StepOutcome:
        total = sum_ages_client(collection)
        return {"cumulative_age": total}, [f"Cumulative age {total}"]

    def server_sum() -> StepOutcome:
        total = sum_ages_server(collection)
        return {"cumulative_age": total}, [f"Cumulative age {total}"]

    def create_index() -> StepOutcome:
        name = create_age_index(collection)
        return {"index_name": name}, [f"Created index: {name}"]

    def update_one() -> StepOutcome:
        modified = update_birth_date(collection, UPDATE_AGE, years_ago(UPDATE_AGE))
        return {"modified": modified}, [f"Updated {modified} records"]

    def delete_many() -> StepOutcome:
        deleted = delete_older_than(collection, DELETE_OLDER_THAN)
        leftover = count_people(collection, {"age": {"$gt": DELETE_OLDER_THAN}})
        return {"deleted": deleted, "matching_after_delete": leftover}, [f"Deleted {deleted}"]

    def count() -> StepOutcome:
        remaining = count_people(collection)
        return {"remaining": remaining}, [f"Remaining {remaining}"]

    def transaction() -> StepOutcome:
        outcome = run_transaction(client, collection, newcomer(), {"name": DEFAULT_NAME})
        return (
            {"inserted_id": outcome["inserted_id"], "deleted": outcome["deleted_count"]},
            ["tx - Inserted one", f"tx - deleted {outcome['deleted_count']}"],
        )

    fns = [
        drop, insert_many, find_first_page, client_sum, server_sum,
        create_index, update_one, delete_many, count, transaction,
    ]
    return list(zip(STEP_NAMES, fns))


def _run_step(
    number: int,
    name: str,
    fn: Callable[[], StepOutcome],
) -> Dict[str, Any]:
    logger.info("[DEMO] Step %d — %s", number, name)
    try:
        result, summary = fn()
    except (PyMongoError, TimeoutError) as e:
        logger.error("[DEMO] Step %d — %s failed: %s", number, name, e)
        return {
            "step": number,
            "name": name,
            "status": "error",
            "error_type": type(e).__name__,
            "error": str(e),
        }
    for line in summary:
        logger.debug("[DEMO] %s", line)
    return {
        "step": number,
        "name": name,
        "status": "ok",
        "result": result,
        "summary": summary,
    }


# ---------------------- MAIN RUNNER ----------------------

def run_demo(
    client: MongoClient,
    collection: Collection,
    *,
    person_count: int = PERSON_COUNT,
    page_size: int = PAGE_SIZE,
    on_step: Optional[StepCallback] = None,
) -> Dict[str, Any]:
    """Run every demo step in order and return the run report.

    ``on_step`` is called with each step entry as soon as the step
    completes, so callers can print progress while the run is going.
    """
    report: Dict[str, Any] = {
        "database_name": collection.database.name,
        "collection_name": collection.name,
        "person_count": person_count,
        "status": "ok",
        "failed_steps": [],
        "steps": [],
    }

    steps = _build_steps(client, collection, person_count, page_size)
    for number, (name, fn) in enumerate(steps, 1):
        entry = _run_step(number, name, fn)
        report["steps"].append(entry)
        if on_step is not None:
            on_step(entry)
        if entry["status"] != "ok":
            report["status"] = "error"
            report["failed_steps"].append(name)

    report["completed"] = sum(1 for s in report["steps"] if s["status"] == "ok")
    report["total"] = len(steps)
    logger.info(
        "[DEMO] Finished: %d/%d steps completed (status=%s)",
        report["completed"], report["total"], report["status"],
    )
    return report


def run_demo_against(
    mongo_uri: str,
    database_name: str,
    collection_name: str,
    *,
    verify: bool = False,
    **kwargs: Any,
) -> Dict[str, Any]:
    """Connect, run the demo, optionally check its properties, and close
    the client. With ``verify`` the report gains a ``checks`` list."""
    client = connect_to_cluster(mongo_uri)
    try:
        collection = get_people_collection(client, database_name, collection_name)
        report = run_demo(client, collection, **kwargs)
        if verify:
            report["checks"] = check_properties(report, collection)
        return report
    finally:
        client.close()
