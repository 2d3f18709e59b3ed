import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi import _rate_limit_exceeded_handler
import sentry_sdk

from checkresume.api.v1.health import router as health_router
from checkresume.api.v1.resume import router as resume_router
from checkresume.api.v1.analytics import router as analytics_router
from checkresume.core.cors import cors_allowed_origins
from checkresume.core.errors import AppError, app_error_handler
from checkresume.core.rate_limit import limiter
from checkresume.core.config import settings
from checkresume.core.lifespan import lifespan

logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s %(message)s")
if settings.sentry_dsn:
    sentry_sdk.init(dsn=settings.sentry_dsn, environment=settings.environment)

app = FastAPI(title="CheckResumeAI API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_allowed_origins(),
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_exception_handler(AppError, app_error_handler)
app.add_middleware(SlowAPIMiddleware)

app.include_router(health_router, prefix="/v1", tags=["Health"])
app.include_router(resume_router, prefix="/v1", tags=["Resume"])
app.include_router(analytics_router, prefix="/v1", tags=["Analytics"])
