"""FastAPI application entry point."""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from loan_metrics.api.routes import calculators
from loan_metrics.config import settings
from loan_metrics.engine.errors import InvalidInputError

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Loan Metrics",
    description="DSCR, LTV and amortization calculators for investment-property loans",
    version="0.1.0",
    debug=settings.debug,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(calculators.router)


@app.exception_handler(InvalidInputError)
async def invalid_input_handler(request: Request, exc: InvalidInputError):
    logger.info("Rejected %s: %s", request.url.path, exc)
    return JSONResponse(status_code=422, content={"detail": exc.message, "field": exc.field})


@app.get("/health")
async def health():
    return {"status": "ok"}
