import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from streamhub.core.config import settings
from streamhub.core.exceptions import StreamHubError

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    openapi_url=f"{settings.API_V1_STR}/openapi.json"
)

from streamhub.modules.worker.runner import worker

@app.on_event("startup")
async def startup_event():
    await worker.start()

@app.on_event("shutdown")
async def shutdown_event():
    await worker.stop()

@app.exception_handler(StreamHubError)
async def streamhub_error_handler(request: Request, exc: StreamHubError):
    logger.warning(f"[API] {request.method} {request.url.path} -> {exc.status_code} {exc.error_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

@app.get("/")
def root():
    return {"message": "Welcome to StreamHub API", "docs": "/docs"}

from streamhub.core.middleware import RateLimitMiddleware
from streamhub.modules.access.router import router as access_router
from streamhub.modules.audit.router import router as audit_router
from streamhub.modules.catalog.router import router as catalog_router
from streamhub.modules.health.router import router as health_router
from streamhub.modules.payments.router import router as payments_router
from streamhub.modules.plans.router import router as plans_router
from streamhub.modules.reports.router import router as reports_router
from streamhub.modules.subscriptions.router import router as subscriptions_router
from streamhub.modules.users.router import router as users_router

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(
    RateLimitMiddleware,
    limit_per_minute=settings.RATE_LIMIT_PER_MINUTE,
    write_limit_per_minute=settings.RATE_LIMIT_WRITES_PER_MINUTE,
)

app.include_router(health_router, tags=["health"])
app.include_router(catalog_router, prefix=settings.API_V1_STR, tags=["catalog"])
app.include_router(access_router, prefix=settings.API_V1_STR, tags=["access"])
app.include_router(users_router, prefix=settings.API_V1_STR, tags=["users"])
app.include_router(plans_router, prefix=f"{settings.API_V1_STR}/plans", tags=["plans"])
app.include_router(subscriptions_router, prefix=f"{settings.API_V1_STR}/subscriptions", tags=["subscriptions"])
app.include_router(payments_router, prefix=f"{settings.API_V1_STR}/payments", tags=["payments"])
app.include_router(audit_router, prefix=f"{settings.API_V1_STR}/audit-logs", tags=["audit"])
app.include_router(reports_router, prefix=f"{settings.API_V1_STR}/reports", tags=["reports"])
