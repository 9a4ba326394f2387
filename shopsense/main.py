import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shopsense.cart import SessionStore
from shopsense.config import settings
from shopsense.database import Base, engine
from shopsense.errors import BillingError
from shopsense.routes import (
    bills,
    cart,
    daily_operations,
    inventory,
    notifications,
    reports,
    shops,
    voice,
)

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create DB tables
    Base.metadata.create_all(bind=engine)
    yield


def create_app() -> FastAPI:
    app = FastAPI(title="ShopSense Billing", lifespan=lifespan)

    # open carts, one per (shop, billing session)
    app.state.sessions = SessionStore(ttl=settings.cart_session_ttl)

    # -------------------------------------------------
    # CORS
    # -------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -------------------------------------------------
    # Cart / bill rejections → JSON
    # -------------------------------------------------
    @app.exception_handler(BillingError)
    async def billing_error_handler(request: Request, exc: BillingError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    # -------------------------------------------------
    # API Routes
    # -------------------------------------------------
    app.include_router(shops.router)
    app.include_router(inventory.router)
    app.include_router(cart.router)
    app.include_router(voice.router)
    app.include_router(bills.router)
    app.include_router(reports.router)
    app.include_router(notifications.router)
    app.include_router(daily_operations.router)

    # -------------------------------------------------
    # Global Health Check
    # -------------------------------------------------
    @app.get("/health")
    def health_check():
        return {
            "status": "ok",
            "services": {
                "api": "ok"
            }
        }

    return app


app = create_app()
