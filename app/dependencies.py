"""Dependency injection with a process-level service manager.

The service manager owns everything that lives for the whole process: settings,
the logger, the ``Database`` store client, the registry, the shortening service
and the redirect resolver. Routes receive these through FastAPI dependencies,
plus a lightweight per-request context for logging.
"""

import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Optional

from fastapi import Depends, Request

from app.config import Settings, get_settings
from app.database import Database
from app.registry import URLRegistry
from app.resolver import RedirectResolver
from app.service import ShorteningService


# ============================================================================
# SERVICE MANAGER
# ============================================================================


class ServiceManager:
    """Owner of shared resources and their open/close lifecycle.

    The application lifespan calls ``initialize()`` on startup and
    ``cleanup()`` on shutdown; tests build their own manager against a
    throwaway database and override ``get_service_manager``.
    """

    def __init__(self) -> None:
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self, settings: Optional[Settings] = None) -> None:
        """Initialize shared resources once at startup."""
        if self._initialized:
            return
        self.settings = settings or get_settings()
        self.logger = self._setup_logger()
        self.database = Database.from_settings(self.settings)
        await self.database.create_all()
        self.registry = URLRegistry(self.database, self.logger)
        self.shortening_service = ShorteningService(self.registry, self.logger)
        self.resolver = RedirectResolver(self.registry, self.logger)
        self._initialized = True
        self.logger.info(f"Service manager initialized ({self.settings.APP_ENV})")

    def _setup_logger(self) -> logging.Logger:
        """Setup logger once."""
        logger = logging.getLogger("urlshortener")
        if not logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
            handler.setFormatter(formatter)
            logger.addHandler(handler)
        logger.setLevel(self.settings.LOG_LEVEL)
        return logger

    async def cleanup(self) -> None:
        """Flush pending click increments and close the store."""
        if not self._initialized:
            return
        pending = self.resolver.pending
        if pending:
            self.logger.info(f"Waiting for {pending} pending click increments")
        await self.resolver.drain()
        await self.database.dispose()
        self._initialized = False


# Process-wide instance driven by the application lifespan
_service_manager = ServiceManager()


# ============================================================================
# REQUEST CONTEXT
# ============================================================================


@dataclass
class RequestContext:
    """Per-request tracking information and shared resource access.

    Attributes:
        service_manager: Process-level service manager with shared resources
        request_id: Unique identifier for this request
        user_agent: Client user agent string
        client_ip: Client IP address
        base_url: Scheme and host the request arrived on, without trailing slash
        start_time: Request start timestamp
    """

    service_manager: ServiceManager
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    user_agent: Optional[str] = None
    client_ip: Optional[str] = None
    base_url: str = ""
    start_time: float = field(default_factory=lambda: time.time())

    @property
    def settings(self) -> Settings:
        return self.service_manager.settings

    @property
    def logger(self) -> logging.LoggerAdapter:
        """Shared logger with request context attached."""
        return logging.LoggerAdapter(
            self.service_manager.logger,
            {
                "request_id": self.request_id,
                "client_ip": self.client_ip,
                "user_agent": self.user_agent,
            },
        )

    def short_url(self, short_code: str) -> str:
        """Compose the public short URL, preferring the configured BASE_URL."""
        base = self.settings.BASE_URL.rstrip("/") or self.base_url
        return f"{base}/{short_code}"

    def get_duration(self) -> float:
        """Get request duration in milliseconds."""
        return (time.time() - self.start_time) * 1000


# ============================================================================
# DEPENDENCY FUNCTIONS
# ============================================================================


async def get_service_manager() -> ServiceManager:
    if not _service_manager.initialized:
        await _service_manager.initialize()
    return _service_manager


async def get_request_context(
    request: Request,
    manager: ServiceManager = Depends(get_service_manager),
) -> RequestContext:
    return RequestContext(
        service_manager=manager,
        request_id=request.headers.get("x-request-id") or str(uuid.uuid4()),
        user_agent=request.headers.get("user-agent"),
        client_ip=request.client.host if request.client else None,
        base_url=str(request.base_url).rstrip("/"),
    )


def get_shortening_service(manager: ServiceManager = Depends(get_service_manager)) -> ShorteningService:
    return manager.shortening_service


def get_redirect_resolver(manager: ServiceManager = Depends(get_service_manager)) -> RedirectResolver:
    return manager.resolver
