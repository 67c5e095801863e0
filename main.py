from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from shared.background import BestEffortRunner
from shared.config import settings
from shared.config.database import engine, Base, AsyncSessionLocal
from shared.errors import register_exception_handlers
from shared.observability import setup_observability
from shared.security import limiter

# IMPORTANT: import models so they register with Base
from services.category_service import models as category_models
from services.product_service import models as product_models
from services.order_service import models as order_models
from services.testimony_service import models as testimony_models
from services.contact_service import models as contact_models

from services.category_service.router import router as category_router
from services.product_service.router import router as product_router
from services.order_service.router import router as order_router
from services.testimony_service.router import router as testimony_router
from services.contact_service.router import router as contact_router

app = FastAPI(title="Storefront API", version="1.0.0")

# --- OBSERVABILITY BOOTSTRAP ---
setup_observability(app, settings.SERVICE_NAME)

# --- ERRORS & SECURITY ---
register_exception_handlers(app)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Post-commit side effects (sales counters, CDN cleanup)
app.state.hooks = BestEffortRunner(AsyncSessionLocal)

app.include_router(order_router, prefix=f"{settings.API_PREFIX}/order", tags=["order"])
app.include_router(product_router, prefix=f"{settings.API_PREFIX}/product", tags=["product"])
app.include_router(category_router, prefix=f"{settings.API_PREFIX}/category", tags=["category"])
app.include_router(testimony_router, prefix=f"{settings.API_PREFIX}/testimony", tags=["testimony"])
app.include_router(contact_router, prefix=f"{settings.API_PREFIX}/contact", tags=["contact"])


@app.get("/health", include_in_schema=False)
async def health_check():
    return {"service": settings.SERVICE_NAME, "status": "running"}


@app.on_event("startup")
async def startup_event():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@app.on_event("shutdown")
async def shutdown_event():
    await app.state.hooks.drain()
    await engine.dispose()
