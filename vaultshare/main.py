import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from vaultshare.errors import register_error_handlers
from vaultshare.routers.access import router as access_router
from vaultshare.routers.vaults import router as vaults_router
from vaultshare.services.object_store import ObjectStoreError, get_object_store

logger = logging.getLogger("vaultshare")

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",")
    if origin.strip()
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        get_object_store().ensure_bucket()
    except ObjectStoreError as exc:
        logger.error("MinIO bucket error: %s", exc)
    yield


app = FastAPI(title="vaultshare", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_error_handlers(app)
app.include_router(access_router)
app.include_router(vaults_router)


@app.get("/")
def read_root():
    return {"message": "vaultshare"}
