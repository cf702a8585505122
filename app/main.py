"""FastAPI application entry point for the URL shortener service.

Application Lifecycle Diagram
=============================
::
    ┌─────────────┐
    │  uvicorn    │
    │  startup    │
    └──────┬──────┘
           ▼
    ┌──────────────────┐
    │ lifespan()       │
    │ startup:         │
    │ manager.         │
    │ initialize()     │
    │ (open store,     │
    │  create tables)  │
    └──────┬───────────┘
           ▼
    ┌─────────────┐
    │ Serve HTTP  │
    │ requests    │
    └──────┬──────┘
           ▼
    ┌──────────────────┐
    │ lifespan()       │
    │ shutdown:        │
    │ manager.cleanup()│
    │ (drain clicks,   │
    │  dispose store)  │
    └──────────────────┘

How to Use
===========
**Step 1 — Run with uvicorn**::
    uvicorn app.main:app --host 0.0.0.0 --port 3000 --reload

**Step 2 — Make API calls**::
    curl -X POST http://localhost:3000/api/shorten \\
         -H "Content-Type: application/json" \\
         -d '{"original_url": "https://example.com", "custom_code": "docs"}'

    curl http://localhost:3000/api/stats

Key Behaviours
===============
- Tables are created automatically on startup.
- Pending click increments are awaited before the store is closed.
- CORS is enabled for all origins.
- Prometheus metrics are exposed at /metrics.
"""

__all__ = ["app"]

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from app.config import get_settings
from app.dependencies import _service_manager
from app.routes import router

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    await _service_manager.initialize(settings)
    yield
    await _service_manager.cleanup()


app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    description="URL shortener with custom codes and click counting",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

Instrumentator(
    should_group_status_codes=True,
    should_ignore_untemplated=False,
    should_respect_env_var=False,
).instrument(app).expose(app)

app.include_router(router)
