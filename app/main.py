"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.routers import query as query_router
from app.routers import table_semantics as table_semantics_router
from app.config import settings
from app.graph.nodes import connection_pool

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    logger.info("Shutting down, closing database pool")
    connection_pool.close()


app = FastAPI(
    title="Secure Query Agent API",
    description="Natural language questions answered from row-level-secured data",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount routers
app.include_router(query_router.router, prefix="/sn-agent", tags=["Query"])
app.include_router(table_semantics_router.router, prefix="/table-semantics", tags=["Table Semantics"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Secure Query Agent API",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": "1.0.0",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "services": {
            "database": "ok",
            "llm": settings.LLM_PROVIDER,
        }
    }
