# store_rating/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from store_rating.config import settings
from store_rating.core.bootstrap import ensure_default_admin
from store_rating.core.db import close_db, init_db
from store_rating.core.errors import install_exception_handlers
from store_rating.api.v1.routers import auth, ratings, stores, users

logger = logging.getLogger("uvicorn.error")

app = FastAPI(title=settings.APP_NAME)

# CORS for the single-page client (token travels in the Authorization header)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

install_exception_handlers(app)


@app.on_event("startup")
async def on_startup():
    await init_db()
    # Ensure there's an admin account on first run
    await ensure_default_admin()
    logger.info("[startup] %s ready (env=%s)", settings.APP_NAME, settings.env)


@app.on_event("shutdown")
async def on_shutdown():
    await close_db()


# REST
app.include_router(auth.router, prefix="/api")
app.include_router(stores.router, prefix="/api")
app.include_router(ratings.router, prefix="/api")
app.include_router(users.router, prefix="/api")


@app.get("/healthz")
def healthz():
    return {"ok": True}
