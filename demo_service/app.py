"""
FastAPI service exposing the sequential MongoDB demo.

Endpoints:
- ``GET  /health``: liveness
- ``POST /run-demo``: run every demo step and return the step trace
- ``POST /verify``: same run, followed by the property checks
"""

from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from config import COLLECTION_NAME, DATABASE_NAME, MONGO_URI, PAGE_SIZE, PERSON_COUNT
from demo_runner import run_demo_against
from logger import logger
from response_formatter import format_report

MAX_PERSON_COUNT = 100_000
MAX_PAGE_SIZE = 100

app = FastAPI(title="MongoDB Sequential Demo", version="1.0.0")


# ---------------------- REQUEST MODELS ----------------------


class DemoRequest(BaseModel):
    mongo_uri: Optional[str] = None
    database_name: Optional[str] = None
    collection_name: Optional[str] = None
    person_count: int = Field(
        default=PERSON_COUNT,
        ge=1,
        le=MAX_PERSON_COUNT,
        description=f"Generated records to insert (max {MAX_PERSON_COUNT})",
    )
    page_size: int = Field(default=PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)


# ---------------------- ENDPOINTS ----------------------


def _run(request: DemoRequest, verify: bool) -> Dict[str, Any]:
    try:
        report = run_demo_against(
            request.mongo_uri or MONGO_URI,
            request.database_name or DATABASE_NAME,
            request.collection_name or COLLECTION_NAME,
            verify=verify,
            person_count=request.person_count,
            page_size=request.page_size,
        )
    except ConnectionError as e:
        logger.error("run-demo connection error: %s", e)
        raise HTTPException(status_code=400, detail=str(e))
    return format_report(report)


@app.post("/run-demo")
def run_demo_endpoint(request: DemoRequest):
    """Run the demo steps in order; a failed step is reported, not raised."""
    return _run(request, verify=False)


@app.post("/verify")
def verify_endpoint(request: DemoRequest):
    """Run the demo and check its properties against the store."""
    return _run(request, verify=True)


@app.get("/health")
def health_check():
    return {"status": "ok", "version": "1.0.0"}
