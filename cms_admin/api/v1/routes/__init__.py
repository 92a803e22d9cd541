from fastapi import APIRouter

from .content_types import router as content_types_router
from .health import router as health_router

public_router = APIRouter()
private_router = APIRouter()

# All public endpoints go on public_router
public_router.include_router(health_router)

# All protected endpoints go on private_router
private_router.include_router(
    content_types_router, prefix="/content-types", tags=["content-types"]
)
