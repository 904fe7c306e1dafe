"""
FastAPI application entrypoint.

Run locally:  uvicorn anamnesis.main:app --reload
Templates are parsed at startup; a broken template stops the boot.
"""

import logging

from fastapi import FastAPI

from anamnesis.api.routes import renderer, router
from anamnesis.config import settings
from anamnesis.models.database import create_schema

logging.basicConfig(level=settings.LOG_LEVEL, format="%(levelname)s | %(name)s | %(message)s")

app = FastAPI(
    title="Anamnesis Intake API",
    description=(
        "Patient intake with eligibility checks for minors, guardians and "
        "policyholders, and signed PDF intake documents."
    ),
    version="1.0.0",
)

app.include_router(router, prefix="/api/v1")


@app.on_event("startup")
def on_startup():
    create_schema()
    renderer.warm_up()
