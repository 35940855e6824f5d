import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from easylaptop.core.config import get_settings
from easylaptop.core.database import Base, engine
from easylaptop.core.errors import register_exception_handlers
from easylaptop.core.logging import configure_logging
from easylaptop.models import listing, listing_image, user  # noqa: F401  (register tables)
from easylaptop.routers import auth, listings, users

logger = logging.getLogger(__name__)

# --- Load settings ---
settings = get_settings()
configure_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # --- Create DB tables ---
    Base.metadata.create_all(bind=engine)
    if settings.app_env != "dev" and len(settings.secret_key) < 32:
        logger.warning("SECRET_KEY is shorter than 32 characters; use a longer secret outside dev")
    logger.info("%s started (env=%s)", settings.app_name, settings.app_env)
    yield


# --- Create FastAPI app ---
app = FastAPI(title=settings.app_name, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# --- Routers ---
app.include_router(auth.router, prefix=settings.api_prefix)
app.include_router(listings.router, prefix=settings.api_prefix)
app.include_router(users.router, prefix=settings.api_prefix)

# --- Uploaded images ---
settings.media_root.mkdir(parents=True, exist_ok=True)
app.mount(
    settings.media_url,                          # "/uploads"
    StaticFiles(directory=settings.media_root),
    name="uploads",
)


# --- Root endpoint ---
@app.get("/")
def root():
    return {"message": "EasyLaptop API is running"}
