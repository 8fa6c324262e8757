from fastapi import APIRouter

from cityweather.api.routes import cities

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(cities.router, tags=["cities"])
