"""Entry point for the Lydian Travel FastAPI application."""

import logging

from fastapi import FastAPI

import lydian_travel.models  # noqa: F401  registers every table on Base.metadata
from lydian_travel.api.v1 import router as v1_router
from lydian_travel.core.config import settings
from lydian_travel.core.database import Base, engine
from lydian_travel.core.error_handlers import register_exception_handlers

logging.basicConfig(level=settings.LOG_LEVEL)

if settings.AUTO_CREATE_TABLES:
    Base.metadata.create_all(bind=engine)

app = FastAPI(title=settings.PROJECT_NAME)

register_exception_handlers(app)

app.include_router(v1_router, prefix=settings.API_PREFIX)


@app.get("/health")
def health_check():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
