"""
Schema Drift Server
====================
FastAPI application exposing the schema inference and compatibility engine.

Run:
    cd src && uvicorn schema_server:app --reload
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core import config
import core.state as state
from routers import schemas

# Logging Setup
logging.basicConfig(level=config.LOG_LEVEL, format='%(asctime)s [%(levelname)s] %(message)s')
logger = logging.getLogger("schema_platform")

app = FastAPI(title="Schema Drift Platform")

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(schemas.router)


@app.on_event("startup")
async def startup():
    logger.info(
        f"✅ Schema engine ready (max depth {config.SCHEMA_MAX_DEPTH}, "
        f"{len(state.schema_cache)} cached schema(s))"
    )


@app.on_event("shutdown")
async def shutdown():
    state.schema_cache.flush()


@app.get("/health")
async def health():
    return {"status": "ok", "cached_schemas": len(state.schema_cache)}
