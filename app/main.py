import logging
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from app.database import create_db_and_tables
from app.config import settings
from app.exceptions import EngineError
from app.routes import (
    addresses,
    admin_offers,
    admin_orders,
    admin_pickups,
    admin_settings,
    cart,
    checkout,
    delivery,
    health,
    offers,
    orders,
    pickups,
    public_settings,
    restaurant,
)

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Run DB creation ONLY in local
    if settings.env == "local":
        create_db_and_tables()
    yield

app = FastAPI(title="QuickBite Order Engine API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(EngineError)
async def engine_error_handler(request: Request, exc: EngineError):
    if exc.status_code >= 500:
        logger.warning(f"{request.method} {request.url.path} refused: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))


app.include_router(cart.router, prefix="/cart", tags=["Cart"])
app.include_router(addresses.router, prefix="/addresses", tags=["Addresses"])
app.include_router(offers.router, prefix="/offers", tags=["Offers"])
app.include_router(checkout.router, prefix="/checkout", tags=["Checkout"])
app.include_router(orders.router, prefix="/orders", tags=["Orders"])
app.include_router(pickups.router, prefix="/pickups", tags=["Pickups"])
app.include_router(delivery.router, prefix="/delivery", tags=["Delivery"])
app.include_router(restaurant.router, prefix="/restaurant", tags=["Restaurant"])
app.include_router(public_settings.router, prefix="/settings", tags=["Public Settings"])
app.include_router(admin_settings.router, prefix="/admin/settings", tags=["Admin Settings"])
app.include_router(admin_offers.router, prefix="/admin/offers", tags=["Admin Offers"])
app.include_router(admin_orders.router, prefix="/admin/orders", tags=["Admin Orders"])
app.include_router(admin_pickups.router, prefix="/admin/pickups", tags=["Admin Pickups"])
app.include_router(health.router, prefix="/health", tags=["Health"])


@app.get("/")
def root():
    return {
        "checkout": ["/checkout/price", "/checkout/place-order"],
        "orders": [
            "/orders/my-orders", "/orders/{id}", "/orders/{id}/track",
            "/orders/{id}/status", "/orders/{id}/items/{item_id}/review"
        ],
        "pickups": ["/pickups", "/pickups/mine", "/pickups/{id}", "/pickups/{id}/status"],
        "delivery": ["/delivery/estimate", "/delivery/orders", "/delivery/pickups"],
        "cart": [
            "/cart", "/cart/add", "/cart/update/{id}",
            "/cart/remove/{id}", "/cart/clear", "/cart/offer"
        ],
        "health": ["/health/check"],
    }
