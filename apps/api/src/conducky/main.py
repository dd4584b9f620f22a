from fastapi import FastAPI
from slowapi.errors import RateLimitExceeded

from conducky.api.v1.router import router as v1_router
from conducky.core.config import settings
from conducky.core.errors import register_exception_handlers
from conducky.core.logging import configure_logging
from conducky.core.rate_limit import limiter, rate_limit_exceeded_handler

configure_logging()

app = FastAPI(title=settings.APP_NAME)

register_exception_handlers(app)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

app.include_router(v1_router, prefix="/api/v1")
