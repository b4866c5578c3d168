from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from billing.api.v1.routes_catalog import customers_router, products_router
from billing.api.v1.routes_dashboard import router as dashboard_router
from billing.api.v1.routes_invoices import router as invoices_router
from billing.api.v1.routes_settings import router as settings_router
from billing.core import logs
from billing.core.config import settings
from billing.core.errors import BillingError
from billing.db.base import init_models

LOG = logs.logger(__file__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.STORE_BACKEND == "sql":
        await init_models()
    LOG.info(
        "startup - store:%s numbering:%s prices:%s",
        settings.STORE_BACKEND,
        settings.NUMBERING_STRATEGY,
        settings.PRICE_CONVENTION,
    )
    yield


app = FastAPI(title="billing", lifespan=lifespan)

app.include_router(invoices_router)
app.include_router(customers_router)
app.include_router(products_router)
app.include_router(dashboard_router)
app.include_router(settings_router)


@app.exception_handler(BillingError)
async def billing_error_handler(request: Request, exc: BillingError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

@app.get("/health")
async def health():
    return {"status": "ok"}
