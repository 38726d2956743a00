from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from portfolio_tracker import __version__
from portfolio_tracker.api import api_router
from portfolio_tracker.core.config import settings
from portfolio_tracker.core.db import init_db
from portfolio_tracker.core.logger import logger
from portfolio_tracker.core.redis_client import check_redis_connection


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.DB_AUTO_CREATE:
        init_db()
        logger.info("Database initialized")
    if settings.CACHE_ENABLED:
        check_redis_connection()
    yield
    logger.info("Shutting down")


app = FastAPI(lifespan=lifespan, title="Portfolio Tracker API", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=True
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [{"loc": e["loc"], "msg": e["msg"], "type": e["type"]} for e in exc.errors()]
    logger.info(f"Rejected {request.method} {request.url.path}: {errors}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Missing required fields", "errors": jsonable_encoder(errors)},
    )


app.include_router(api_router)


@app.get("/")
async def root():
    return {"message": "Portfolio Tracker API is running", "version": __version__}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
