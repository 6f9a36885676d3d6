from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from exercise_sync.api.exercises import router as exercises_router
from exercise_sync.config.settings import settings
from exercise_sync.core.logger import setup_logger
from exercise_sync.reconciliation.pipeline import ReconciliationPipeline


def create_app(pipeline: ReconciliationPipeline | None = None) -> FastAPI:
    """Create the API app.

    Without an injected pipeline, the lifespan builds the default one from
    settings (SQL store plus JSON-export provider).
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if pipeline is None:
            from exercise_sync.bootstrap import build_pipeline

            app.state.pipeline = build_pipeline(settings)
            logger.info("Reconciliation pipeline built from settings")
        else:
            app.state.pipeline = pipeline
        yield

    app = FastAPI(title="Exercise Sync", lifespan=lifespan)
    app.include_router(exercises_router)
    return app


def run() -> None:
    import uvicorn

    setup_logger(level=settings.log_level, log_file=settings.log_file)
    uvicorn.run(create_app(), host="127.0.0.1", port=8000)


if __name__ == "__main__":
    run()
