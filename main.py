import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import Session, SQLModel

import models  # noqa: F401  (ensure every table is known to SQLModel before create_all)
from api.admin_perimeter_routes import router as admin_perimeter_router
from api.admin_worker_routes import router as admin_worker_router
from api.perimeter_routes import router as perimeter_router
from api.time_routes import router as time_router
from core.config import APP_LOG_LEVEL, DEV_DOMAIN, PRODUCTION_DOMAIN
from db.session import engine
from services.perimeter_config import get_work_zone

# Configure logging
logging.basicConfig(
    level=APP_LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

# This file is the control center of the whole application

# Construct the list of allowed origins
allowed_origins_list = [
    DEV_DOMAIN,
    PRODUCTION_DOMAIN,
    "http://127.0.0.1:3000",  # Additional fallback for local dev
]

# Remove any None values and duplicates
allowed_origins_list = list(set([origin for origin in allowed_origins_list if origin]))

logger.info(f"CORS: Allowing origins: {allowed_origins_list}")


# When We Start, Create the DB Tables if they don't exist
@asynccontextmanager
async def lifespan(app: FastAPI):

    SQLModel.metadata.create_all(engine)

    # Seed the work zone before any request reads it
    with Session(engine) as session:
        get_work_zone(session)

    # (would do shutdown cleanup here if needed)
    yield


# Starts Fast API Up; Init
app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Connects Routes From Time_Routes (clock-in / out) to main app
app.include_router(time_router, prefix="/time", tags=["Time"])
app.include_router(perimeter_router, prefix="/perimeter", tags=["Perimeter"])
app.include_router(admin_perimeter_router, prefix="/admin/perimeter", tags=["Admin", "Perimeter"])
app.include_router(admin_worker_router, prefix="/admin", tags=["Admin", "Workers"])
