from fastapi import APIRouter

from app.api.v1.endpoints import (
    admin,
    auth,
    crushes,
    matches,
    seasons,
    stats,
)

router = APIRouter()

router.include_router(auth.router, prefix="/auth")
router.include_router(crushes.router, prefix="/crushes")
router.include_router(matches.router, prefix="/matches")
router.include_router(seasons.router, prefix="/seasons")
router.include_router(stats.router, prefix="/stats")
router.include_router(admin.router, prefix="/admin")
