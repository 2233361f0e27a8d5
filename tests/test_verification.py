from datetime import datetime

from demo_runner import run_demo
from verification import (
    CHECK_FAILED,
    CHECK_PASSED,
    CHECK_SKIPPED,
    check_age_sums,
    check_delete_predicate,
    check_insert_count,
    check_properties,
    check_transaction_atomicity,
)


def _report(**results):
    steps = [
        {"step": i, "name": name, "status": "ok", "result": result, "summary": []}
        for i, (name, result) in enumerate(results.items(), 1)
    ]
    return {"person_count": 10, "steps": steps}


def _seed(collection, dupont=0, durand=0):
    born = datetime(2000, 1, 1)
    docs = [{"name": "Dupont", "age": i, "dateOfBirth": born} for i in range(dupont)]
    docs += [{"name": "Durand", "age": 30, "dateOfBirth": born} for _ in range(durand)]
    if docs:
        collection.insert_many(docs)


def test_full_run_passes_every_check(fake_client, session_people, people):
    report = run_demo(fake_client, session_people, person_count=100)
    checks = check_properties(report, people)
    assert [c["status"] for c in checks] == [CHECK_PASSED] * 4


def test_insert_count_uses_store_count_not_returned_ids():
    check = check_insert_count(_report(insert_many={"inserted": 10, "count_after_insert": 9}))
    assert check["status"] == CHECK_FAILED
    assert check["detail"] == "9 stored after insert, expected 10"


def test_insert_count_matching_store_passes():
    check = check_insert_count(_report(insert_many={"inserted": 10, "count_after_insert": 10}))
    assert check["status"] == CHECK_PASSED


def test_delete_predicate_passes_when_nothing_matches():
    check = check_delete_predicate(_report(delete_many={"deleted": 94, "matching_after_delete": 0}))
    assert check["status"] == CHECK_PASSED


def test_delete_predicate_fails_when_matches_remain():
    check = check_delete_predicate(_report(delete_many={"deleted": 0, "matching_after_delete": 94}))
    assert check["status"] == CHECK_FAILED
    assert check["detail"] == "94 records still match after the delete"


def test_delete_predicate_skipped_when_delete_failed():
    assert check_delete_predicate(_report())["status"] == CHECK_SKIPPED


def test_age_sums_skipped_without_server_sum():
    check = check_age_sums(_report(sum_ages_client={"cumulative_age": 45}))
    assert check["status"] == CHECK_SKIPPED


def test_age_sums_mismatch_fails():
    check = check_age_sums(_report(
        sum_ages_client={"cumulative_age": 45},
        sum_ages_server={"cumulative_age": 44},
    ))
    assert check["status"] == CHECK_FAILED


def test_atomicity_applied_state_passes(people):
    _seed(people, durand=1)
    report = _report(count={"remaining": 6}, transaction={"deleted": 6})
    check = check_transaction_atomicity(report, people)
    assert check["status"] == CHECK_PASSED
    assert check["detail"].startswith("applied")


def test_atomicity_untouched_state_passes(people):
    _seed(people, dupont=6)
    report = _report(count={"remaining": 6})
    report["steps"].append({"step": 10, "name": "transaction", "status": "error",
                            "error_type": "OperationFailure", "error": "boom"})
    check = check_transaction_atomicity(report, people)
    assert check["status"] == CHECK_PASSED
    assert check["detail"].startswith("untouched")


def test_atomicity_partial_state_fails(people):
    _seed(people, dupont=6, durand=1)
    report = _report(count={"remaining": 6}, transaction={"deleted": 0})
    check = check_transaction_atomicity(report, people)
    assert check["status"] == CHECK_FAILED
    assert check["detail"].startswith("partial")


def test_atomicity_skipped_when_transaction_never_ran(people):
    check = check_transaction_atomicity(_report(count={"remaining": 6}), people)
    assert check["status"] == CHECK_SKIPPED
