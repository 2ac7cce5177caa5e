# app/api/main.py
import logging

from fastapi import FastAPI, Depends, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import Settings, build_source
from app.core.errors import IncidentPipelineError
from app.core.logging_config import configure_logging
from app.core.models import report_to_json
from app.pipeline.runner import run_pipeline
from app.sources.base import IncidentSource

# ----- Setup -----
settings = Settings.from_env()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="Incident Aggregator", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_settings() -> Settings:
    return settings


def get_source(cfg: Settings = Depends(get_settings)) -> IncidentSource:
    try:
        return build_source(cfg)
    except ValueError as e:
        logger.error("source misconfigured: %s", e)
        raise HTTPException(500, f"source misconfigured: {e}")


# ----- Endpoints -----
@app.get("/")
def incident_report(
    source: IncidentSource = Depends(get_source),
    cfg: Settings = Depends(get_settings),
):
    """Fetch every category and return {identity: {severity: {count, incidents}}}."""
    try:
        run = run_pipeline(
            source,
            max_workers=cfg.fetch_workers,
            preserve_collisions=cfg.preserve_collisions,
        )
    except IncidentPipelineError as e:
        logger.error("report run failed: %s", e)
        raise HTTPException(502, f"report run failed: {e}")
    return report_to_json(run.report)


@app.get("/health")
def health():
    return {"ok": True}
