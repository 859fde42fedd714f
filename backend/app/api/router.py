from fastapi import APIRouter

from app.api.estimate import router as estimate_router

router = APIRouter(prefix="/api")
router.include_router(estimate_router)
