"""
Deckflow - Markdown to Presentation Pipeline
Main entry point for the HTTP API.

Endpoints:
- POST /runs                 start a run over an input directory
- GET  /runs/{run_id}/status poll stage, progress, errors and warnings
- GET  /runs/{run_id}/report post-run summary and quality score
- GET  /runs/{run_id}/output emitted Marp markdown
- GET  /health               service health

Runs execute as background tasks, one orchestrator per run. Finished runs
are evicted after RUN_RETENTION_MINUTES, and the oldest finished runs go
first once more than MAX_STORED_RUNS are held.
"""

import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import BackgroundTasks, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field
import uvicorn
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Configure Logfire early in startup
from deckflow.utils.logger import configure_logfire
configure_logfire()

from config.settings import get_settings
from deckflow.core.errors import PipelineError
from deckflow.core.pipeline import PipelineOrchestrator
from deckflow.models.pipeline_config import PipelineConfig
from deckflow.services.document_loader import DocumentLoader
from deckflow.utils.logger import setup_logger

# Initialize
logger = setup_logger(__name__)
settings = get_settings()


class RunRequest(BaseModel):
    input_dir: str = Field(..., description="Directory holding the five staged markdown files")


class RunRecord:
    """One API-triggered run and its orchestrator."""

    def __init__(self, run_id: str, orchestrator: PipelineOrchestrator):
        self.run_id = run_id
        self.orchestrator = orchestrator
        self.state = "pending"
        self.output: Optional[str] = None
        self.error: Optional[str] = None
        self.created_at = datetime.now()
        self.finished_at: Optional[datetime] = None

    @property
    def finished(self) -> bool:
        return self.state in ("completed", "failed")


_runs: Dict[str, RunRecord] = {}


def get_run(run_id: str) -> RunRecord:
    record = _runs.get(run_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Unknown run {run_id}")
    return record


async def execute_run(record: RunRecord, documents: list) -> None:
    """Background task: run the pipeline and keep the outcome on the record."""
    record.state = "running"
    try:
        result = await record.orchestrator.run(documents)
    except PipelineError as e:
        record.state = "failed"
        record.error = str(e)
        record.finished_at = datetime.now()
        logger.warning(f"Run {record.run_id} aborted: {e}")
        return

    record.state = "completed"
    record.output = result.output.content
    record.finished_at = datetime.now()
    logger.info(f"Run {record.run_id} completed with {result.output.slide_count} slides")


def cleanup_finished_runs(
    max_age_minutes: Optional[int] = None,
    max_runs: Optional[int] = None
) -> Dict[str, Any]:
    """
    Evict finished runs from memory.

    Drops completed or failed runs older than max_age_minutes, then the
    oldest finished runs while more than max_runs are held. Pending and
    running runs are never evicted.

    Returns:
        {"runs_evicted": int, "runs_remaining": int, "cutoff_time": str}
    """
    max_age = settings.RUN_RETENTION_MINUTES if max_age_minutes is None else max_age_minutes
    limit = settings.MAX_STORED_RUNS if max_runs is None else max_runs
    cutoff_time = datetime.now() - timedelta(minutes=max_age)

    expired = [
        run_id for run_id, record in _runs.items()
        if record.finished and record.finished_at <= cutoff_time
    ]
    for run_id in expired:
        del _runs[run_id]

    overflow = len(_runs) - limit
    if overflow > 0:
        finished = sorted(
            (record for record in _runs.values() if record.finished),
            key=lambda record: record.finished_at
        )
        for record in finished[:overflow]:
            del _runs[record.run_id]
            expired.append(record.run_id)

    if expired:
        logger.info(f"[Cleanup] Evicted {len(expired)} finished runs, {len(_runs)} remaining")
    return {
        "runs_evicted": len(expired),
        "runs_remaining": len(_runs),
        "cutoff_time": cutoff_time.isoformat(),
    }


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle startup and shutdown events."""
    logger.info("Starting Deckflow API...")

    if not settings.API_ENABLED:
        logger.warning("API_ENABLED is set to False - run endpoints will reject requests")

    yield
    logger.info(f"Shutting down Deckflow API ({len(_runs)} runs in memory)...")


app = FastAPI(
    title="Deckflow API",
    version="1.0.0",
    description="Staged markdown-to-slides pipeline",
    lifespan=lifespan
)

# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.post("/runs", status_code=202)
async def start_run(request: RunRequest, background_tasks: BackgroundTasks):
    """Load the input directory and start a pipeline run in the background."""
    if not settings.API_ENABLED:
        raise HTTPException(status_code=503, detail="Service is disabled")

    directory = Path(request.input_dir)
    if not directory.is_dir():
        raise HTTPException(status_code=404, detail=f"Input directory not found: {directory}")

    loader = DocumentLoader()
    validation = loader.validate_directory(directory)
    try:
        documents = await loader.load_directory(directory)
    except PipelineError as e:
        raise HTTPException(status_code=422, detail=str(e))

    run_id = uuid.uuid4().hex
    record = RunRecord(run_id, PipelineOrchestrator(PipelineConfig.from_settings()))
    _runs[run_id] = record
    cleanup_finished_runs()
    background_tasks.add_task(execute_run, record, documents)

    logger.info(f"Accepted run {run_id} for {directory}")
    return {
        "run_id": run_id,
        "state": record.state,
        "input_issues": [issue.model_dump() for issue in validation.errors],
    }


@app.get("/runs/{run_id}/status")
async def run_status(run_id: str):
    record = get_run(run_id)
    status = record.orchestrator.get_status()
    return {
        "run_id": run_id,
        "state": record.state,
        "error": record.error,
        **status.model_dump(mode="json"),
    }


@app.get("/runs/{run_id}/report")
async def run_report(run_id: str):
    record = get_run(run_id)
    try:
        report = record.orchestrator.generate_report()
    except PipelineError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return report.model_dump(mode="json")


@app.get("/runs/{run_id}/output", response_class=PlainTextResponse)
async def run_output(run_id: str):
    record = get_run(run_id)
    if record.output is None:
        raise HTTPException(status_code=409, detail=f"Run {run_id} has no output ({record.state})")
    return record.output


# Health check endpoint
@app.get("/health")
async def health_check():
    """Basic health check endpoint."""
    return {
        "status": "healthy" if settings.API_ENABLED else "disabled",
        "api_enabled": settings.API_ENABLED,
        "service": "deckflow",
        "version": "1.0.0",
        "environment": settings.APP_ENV,
        "runs": len(_runs),
    }


if __name__ == "__main__":
    log_level = "debug" if settings.DEBUG else "info"

    uvicorn.run(
        "main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        log_level=log_level,
        reload=settings.DEBUG
    )
