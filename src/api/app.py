"""FastAPI application entry point."""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from redis.exceptions import LockError

from src.api.routes import admin, applications, dashboard, deals, investments, tools, user
from src.config import settings
from src.engine.exceptions import (
    BelowMinimumError,
    DealNotOpenError,
    FundingError,
    InvalidInputError,
    NotFoundError,
)

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

ERROR_STATUS: dict[type[FundingError], int] = {
    InvalidInputError: 422,
    DealNotOpenError: 400,
    BelowMinimumError: 400,
    NotFoundError: 404,
}

app = FastAPI(
    title="White Coat Capital",
    description="Physician funding proposals and investor deal ledger",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(applications.router)
app.include_router(deals.router)
app.include_router(investments.router)
app.include_router(dashboard.router)
app.include_router(tools.router)
app.include_router(user.router)
app.include_router(admin.router)


@app.exception_handler(FundingError)
async def funding_error_handler(request: Request, exc: FundingError):
    status = next(
        (code for cls, code in ERROR_STATUS.items() if isinstance(exc, cls)),
        400,
    )
    content = {"error": str(exc)}
    if isinstance(exc, BelowMinimumError):
        content["required"] = str(exc.required)
    return JSONResponse(status_code=status, content=content)


@app.exception_handler(LockError)
async def lock_error_handler(request: Request, exc: LockError):
    logger.warning("Funding lock contention on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=409, content={"error": "Deal is busy, please retry"})


@app.get("/health")
async def health():
    return {"status": "ok"}
