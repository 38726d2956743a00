from fastapi import APIRouter

from .routes.investments import router as investments_router
from .routes.symbols import router as symbols_router

api_router = APIRouter()
api_router.include_router(investments_router, prefix="/investments", tags=["Investments"])
api_router.include_router(symbols_router, prefix="/symbols", tags=["Symbols"])
