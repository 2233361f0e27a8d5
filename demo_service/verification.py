"""
Property checks over a finished demo run.

Each check returns ``{"name", "status", "detail"}`` where ``status`` is
``passed``, ``failed`` or ``skipped`` (the steps it depends on did not
complete). Checks that need the store query it through ``db_executor``.
"""

from typing import Any, Dict, List, Optional

from pymongo.collection import Collection

from db_executor import count_people
from logger import logger
from person import DEFAULT_NAME, NEWCOMER_NAME

CHECK_PASSED = "passed"
CHECK_FAILED = "failed"
CHECK_SKIPPED = "skipped"


def step_result(report: Dict[str, Any], name: str) -> Optional[Dict[str, Any]]:
    """Return the ``result`` of a successful step, or ``None``."""
    for entry in report.get("steps", []):
        if entry["name"] == name and entry["status"] == "ok":
            return entry["result"]
    return None


def step_entry(report: Dict[str, Any], name: str) -> Optional[Dict[str, Any]]:
    for entry in report.get("steps", []):
        if entry["name"] == name:
            return entry
    return None


def _check(name: str, passed: bool, detail: str) -> Dict[str, Any]:
    return {"name": name, "status": CHECK_PASSED if passed else CHECK_FAILED, "detail": detail}


def _skipped(name: str, missing: str) -> Dict[str, Any]:
    return {"name": name, "status": CHECK_SKIPPED, "detail": f"step '{missing}' did not complete"}


# ---------------------- CHECKS ----------------------

def check_insert_count(report: Dict[str, Any]) -> Dict[str, Any]:
    name = "insert_count"
    inserted = step_result(report, "insert_many")
    if inserted is None:
        return _skipped(name, "insert_many")
    expected = report["person_count"]
    return _check(
        name,
        inserted["count_after_insert"] == expected,
        f"{inserted['count_after_insert']} stored after insert, expected {expected}",
    )


def check_age_sums(report: Dict[str, Any]) -> Dict[str, Any]:
    name = "age_sums_match"
    client_side = step_result(report, "sum_ages_client")
    server_side = step_result(report, "sum_ages_server")
    if client_side is None:
        return _skipped(name, "sum_ages_client")
    if server_side is None:
        return _skipped(name, "sum_ages_server")
    return _check(
        name,
        client_side["cumulative_age"] == server_side["cumulative_age"],
        f"client {client_side['cumulative_age']}, server {server_side['cumulative_age']}",
    )


def check_delete_predicate(report: Dict[str, Any]) -> Dict[str, Any]:
    """Counted inside the delete step, before the transaction adds anyone."""
    name = "no_record_matches_delete_filter"
    deleted = step_result(report, "delete_many")
    if deleted is None:
        return _skipped(name, "delete_many")
    leftover = deleted["matching_after_delete"]
    return _check(name, leftover == 0, f"{leftover} records still match after the delete")


def check_transaction_atomicity(report: Dict[str, Any], collection: Collection) -> Dict[str, Any]:
    """Either both transaction statements took effect or neither did.

    The "neither" state is the one the ``count`` step observed: no
    newcomer and the same number of ``Dupont`` records as were remaining.
    """
    name = "transaction_atomic"
    before = step_result(report, "count")
    if before is None:
        return _skipped(name, "count")
    if step_entry(report, "transaction") is None:
        return _skipped(name, "transaction")

    newcomers = count_people(collection, {"name": NEWCOMER_NAME})
    originals = count_people(collection, {"name": DEFAULT_NAME})
    applied = newcomers == 1 and originals == 0
    untouched = newcomers == 0 and originals == before["remaining"]
    state = "applied" if applied else "untouched" if untouched else "partial"
    return _check(
        name,
        applied or untouched,
        f"{state}: {newcomers} {NEWCOMER_NAME}, {originals} {DEFAULT_NAME}",
    )


def check_properties(report: Dict[str, Any], collection: Collection) -> List[Dict[str, Any]]:
    checks = [
        check_insert_count(report),
        check_age_sums(report),
        check_delete_predicate(report),
        check_transaction_atomicity(report, collection),
    ]
    failed = [c["name"] for c in checks if c["status"] == CHECK_FAILED]
    if failed:
        logger.warning("[VERIFY] Failed checks: %s", failed)
    else:
        logger.info("[VERIFY] %d checks, none failed", len(checks))
    return checks
