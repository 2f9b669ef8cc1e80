from fastapi import APIRouter

from app.api.article.routes import router as article_router
from app.api.health.routes import router as health_router

router = APIRouter()
router.include_router(article_router)
router.include_router(health_router)
