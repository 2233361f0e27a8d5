"""
Response formatter: turns a run report into the JSON returned by the API.

Datetimes, ObjectIds and other BSON values are converted so FastAPI can
encode the response.
"""

from typing import Any, Dict, List

from verification import CHECK_FAILED


def describe_report(report: Dict[str, Any]) -> str:
    """Generate a one-line human-readable description of a run."""
    parts: List[str] = [
        f"Ran {report.get('completed', 0)} of {report.get('total', 0)} steps",
        f"on {report['database_name']}.{report['collection_name']}",
        f"with {report['person_count']} generated records",
    ]
    if report.get("failed_steps"):
        parts.append(f"(failed: {', '.join(report['failed_steps'])})")

    checks = report.get("checks")
    if checks is not None:
        failed = [c["name"] for c in checks if c["status"] == CHECK_FAILED]
        if failed:
            parts.append(f"; failed checks: {', '.join(failed)}")
        else:
            parts.append("; all checks passed or skipped")

    return " ".join(parts) + "."


def _sanitise_value(obj: Any) -> Any:
    """Recursively convert non-JSON-safe types to safe representations."""
    if isinstance(obj, dict):
        return {k: _sanitise_value(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_sanitise_value(item) for item in obj]
    if isinstance(obj, (int, float, str, bool, type(None))):
        return obj
    if hasattr(obj, "isoformat"):
        return obj.isoformat()
    # ObjectId, Decimal128, etc.
    return str(obj)


def format_report(report: Dict[str, Any]) -> Dict[str, Any]:
    """Build the final response dict for a run report."""
    response: Dict[str, Any] = {
        "interpretation": describe_report(report),
        "status": report["status"],
        "failed_steps": list(report.get("failed_steps", [])),
        "completed": report.get("completed", 0),
        "total": report.get("total", 0),
        "steps": [_sanitise_value(entry) for entry in report.get("steps", [])],
    }
    if "checks" in report:
        response["checks"] = report["checks"]
    return response
