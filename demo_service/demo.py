#!/usr/bin/env python3
"""
MongoDB Sequential Demo: command-line runner
============================================

Usage:
    python demo.py [mongo_uri] [database] [collection]

Example:
    python demo.py "mongodb://localhost:27017/?replicaSet=rs0" test testreactive

Drops the collection, inserts generated people, reads, sums, indexes,
updates, deletes, counts and finally runs a transaction, printing each
step as it completes and then checking the run's properties. Missing
arguments fall back to MONGO_URI / DATABASE_NAME / COLLECTION_NAME.

Exit status is 1 when a step or a check failed.
"""

import sys
from typing import Any, Dict, List, Optional

from config import COLLECTION_NAME, DATABASE_NAME, MONGO_URI
from demo_runner import run_demo_against
from verification import CHECK_FAILED, CHECK_PASSED

SEPARATOR = "=" * 70
DASH = "-" * 40


def colour(text, code):
    """ANSI colour wrapper (no-op on Windows without colorama)."""
    return f"\033[{code}m{text}\033[0m"


def green(t):  return colour(t, 32)
def red(t):    return colour(t, 31)
def yellow(t): return colour(t, 33)
def bold(t):   return colour(t, 1)


def print_step(entry: Dict[str, Any]) -> None:
    print(f"\n{DASH}")
    print(bold(f"  Step {entry['step']} — {entry['name']}"))
    if entry["status"] == "ok":
        for line in entry["summary"]:
            print(f"    {line}")
    else:
        print(f"    {red('FAIL')} — {entry['error_type']}: {entry['error']}")


def print_checks(checks: List[Dict[str, Any]]) -> None:
    print(f"\n{SEPARATOR}")
    print(bold("PROPERTY CHECKS"))
    print(SEPARATOR)
    for check in checks:
        if check["status"] == CHECK_PASSED:
            label = green("PASS")
        elif check["status"] == CHECK_FAILED:
            label = red("FAIL")
        else:
            label = yellow("SKIP")
        print(f"  {label}  {check['name']} — {check['detail']}")


def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    mongo_uri = args[0] if len(args) > 0 else MONGO_URI
    database = args[1] if len(args) > 1 else DATABASE_NAME
    collection = args[2] if len(args) > 2 else COLLECTION_NAME

    print(SEPARATOR)
    print(bold(f"MONGODB SEQUENTIAL DEMO  ({database}.{collection})"))
    print(SEPARATOR)

    try:
        report = run_demo_against(
            mongo_uri, database, collection, verify=True, on_step=print_step,
        )
    except ConnectionError as e:
        print(red(f"  ERROR: {e}"))
        return 1

    print_checks(report["checks"])

    failed_checks = [c for c in report["checks"] if c["status"] == CHECK_FAILED]
    print(f"\n{SEPARATOR}")
    if report["status"] == "ok" and not failed_checks:
        print(bold(green(f"DEMO COMPLETE — {report['completed']}/{report['total']} steps")))
        print(SEPARATOR)
        return 0
    print(bold(red(f"DEMO FAILED — {report['completed']}/{report['total']} steps")))
    print(SEPARATOR)
    return 1


if __name__ == "__main__":
    sys.exit(main())
