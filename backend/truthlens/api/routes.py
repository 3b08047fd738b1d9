"""
API Routes — The endpoints that tie everything together.

ENDPOINTS:
- POST /api/audit         → Main endpoint: rows + AI text → AuditReport
- POST /api/audit/upload  → Same, from an uploaded CSV/JSON file
- GET  /api/audit/demo    → The built-in grounding demo scenario

FLOW:
1. Parse a file client-side and POST the rows, or upload the file directly
2. Get back an AuditReport with trust score, risk badge and critical flags
3. To start over, just send a new request (the API keeps no audit state)
"""

import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from truthlens.models.dataset import Dataset
from truthlens.models.schemas import AuditReport, AuditRequest, DemoScenario
from truthlens.services.collaborators import ExplainabilityEngine, HallucinationDetector
from truthlens.services.demo_scenario import (
    DEMO_AI_TEXT,
    DEMO_FILE_LABEL,
    build_demo_dataset,
)
from truthlens.services.ingestion import DatasetParseError, parse_dataset
from truthlens.services.pipeline import AuditEngineError, AuditPipeline

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["api"])


def get_audit_pipeline() -> AuditPipeline:
    """Dependency that provides a pipeline wired to the OpenAI collaborators."""
    return AuditPipeline(HallucinationDetector(), ExplainabilityEngine())


async def _run(
    pipeline: AuditPipeline,
    dataset: Dataset,
    ai_output_text: str,
    file_label: str,
) -> AuditReport:
    if dataset.is_empty:
        raise HTTPException(status_code=400, detail="Please upload a dataset first.")

    try:
        return await pipeline.run(dataset, ai_output_text=ai_output_text, file_label=file_label)
    except AuditEngineError as e:
        logger.error(f"Audit engine fault for '{file_label}': {e}")
        raise HTTPException(status_code=500, detail="Audit engine fault") from e


# =============================================================================
# MAIN AUDIT ENDPOINT
# =============================================================================

@router.post("/audit", response_model=AuditReport)
async def audit(
    request: AuditRequest,
    pipeline: AuditPipeline = Depends(get_audit_pipeline),
) -> AuditReport:
    """
    The main endpoint — audit a dataset and an AI output.

    Example:
        POST /api/audit
        {"rows": [{"age": 41, "income": 52000}, ...], "aiOutputText": "..."}

        Returns AuditReport with trust score, badge, flags and all metrics
    """
    dataset = Dataset.from_records(request.rows)
    logger.info(f"Audit requested: {len(dataset)} rows, label='{request.file_label}'")
    return await _run(pipeline, dataset, request.ai_output_text, request.file_label)


@router.post("/audit/upload", response_model=AuditReport)
async def audit_upload(
    file: UploadFile = File(...),
    ai_output_text: str = Form(""),
    pipeline: AuditPipeline = Depends(get_audit_pipeline),
) -> AuditReport:
    """
    Audit an uploaded CSV or JSON file.

    Example:
        POST /api/audit/upload  (multipart: file=customers.csv, ai_output_text=...)
    """
    file_name = file.filename or "upload"
    content = await file.read()

    try:
        dataset = parse_dataset(content, file_name)
    except DatasetParseError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    return await _run(pipeline, dataset, ai_output_text, file_name)


# =============================================================================
# DEMO SCENARIO
# =============================================================================

@router.get("/audit/demo", response_model=DemoScenario)
async def demo_scenario() -> DemoScenario:
    """
    The grounding demo: a small dataset with planted issues and a fabricated analysis.

    Feed it back into POST /api/audit to see the governance gate at work.
    """
    return DemoScenario(
        rows=build_demo_dataset(),
        ai_output_text=DEMO_AI_TEXT,
        file_label=DEMO_FILE_LABEL,
    )
