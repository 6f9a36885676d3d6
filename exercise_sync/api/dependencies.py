from __future__ import annotations

from fastapi import Request

from exercise_sync.reconciliation.pipeline import ReconciliationPipeline


def get_pipeline(request: Request) -> ReconciliationPipeline:
    """FastAPI dependency returning the pipeline owned by the running app."""
    return request.app.state.pipeline
