from fastapi import APIRouter

from checkresume.ai.config import load_analyzer_config

router = APIRouter()

@router.get("/health", summary="Health Check", description="Check the health status of the application.")
async def health_check():
    cfg = load_analyzer_config()
    return {
        "status": "healthy",
        "services": {
            "primary_ai": "configured" if cfg.has_primary else "not_configured",
            "secondary_ai": "configured" if cfg.has_secondary else "not_configured",
            "heuristic": "available",
        },
    }
