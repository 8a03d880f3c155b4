"""
Stock Ledger — FastAPI Application.

This is the entry point for the application.
Logging is configured and all routers are registered here.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from stock_ledger.config import get_settings
from stock_ledger.api.health import router as health_router
from stock_ledger.api.reference import router as reference_router
from stock_ledger.api.stock_cards import router as stock_cards_router

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger("stock_ledger")

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Append-only stock movement ledger with derived stock on hand",
)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# Register routers
app.include_router(health_router)
app.include_router(reference_router)
app.include_router(stock_cards_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "stock_ledger.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
