from fastapi import APIRouter

from .endpoints import catalog_overview, health, providers, source_items

router = APIRouter()
router.include_router(health.router, tags=["Health"])
router.include_router(catalog_overview.router)
router.include_router(source_items.router)
router.include_router(providers.router)
