"""FastAPI application factory for Painel de Faturas."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from painel_faturas import __version__
from painel_faturas.api.middleware import request_id_middleware
from painel_faturas.api.routes import invoices, pdfs, system
from painel_faturas.config import config
from painel_faturas.core.logging import logger
from painel_faturas.core.periodic import BackgroundSupervisor, PeriodicTask
from painel_faturas.core.poller import PdfPoller
from painel_faturas.core.scheduler import build_scheduler
from painel_faturas.infrastructure.database import (
    DispatchRepository,
    PdfRepository,
    SupabaseClient,
)
from painel_faturas.infrastructure.storage import ObjectStoreClient
from painel_faturas.infrastructure.webhook import WebhookClient

SCHEDULER_TASK = "dispatch_scheduler"
POLLER_TASK = "pdf_poller"


def build_supervisor(
    dispatch_repository: DispatchRepository,
    pdf_repository: PdfRepository,
    webhook: WebhookClient,
    object_store: ObjectStoreClient,
) -> BackgroundSupervisor:
    """Wire the scheduler and poller into periodic tasks.

    A loop whose dependencies are not configured is created disabled; it logs
    once when asked to start and is never retried. An invalid
    ONCE_FAILURE_POLICY disables the scheduler the same way instead of
    failing app startup.
    """
    db_ready = dispatch_repository.is_available()
    storage_ready = pdf_repository.is_available() and object_store.is_configured()
    missing = ", ".join(config.get_missing_config()) or "Supabase client"
    scheduler_reason = None if db_ready else f"Missing configuration: {missing}"

    try:
        policy = config.once_failure_policy()
    except ValueError as e:
        logger.error("invalid_once_failure_policy", error=str(e))
        policy = "delete"
        db_ready = False
        scheduler_reason = str(e)

    scheduler = build_scheduler(
        repository=dispatch_repository,
        webhook=webhook,
        throttle_seconds=config.dispatch_throttle_seconds(),
        once_failure_policy=policy,
    )
    poller = PdfPoller(repository=pdf_repository, storage=object_store)

    return BackgroundSupervisor(
        [
            PeriodicTask(
                SCHEDULER_TASK,
                scheduler.run,
                interval=config.scheduler_interval_seconds(),
                enabled=db_ready,
                disabled_reason=scheduler_reason,
            ),
            PeriodicTask(
                POLLER_TASK,
                poller.run,
                interval=config.poller_interval_seconds(),
                enabled=storage_ready,
                disabled_reason=None if storage_ready else f"Missing configuration: {missing}",
            ),
        ]
    )


def create_app(
    supabase: Optional[SupabaseClient] = None,
    webhook: Optional[WebhookClient] = None,
    object_store: Optional[ObjectStoreClient] = None,
    start_background_tasks: Optional[bool] = None,
) -> FastAPI:
    """Create and configure FastAPI app. Factory pattern for testability.

    Args:
        supabase: Supabase client wrapper (built from env when omitted)
        webhook: Webhook client (built from env when omitted)
        object_store: Bucket client (built on top of supabase when omitted)
        start_background_tasks: Start scheduler and poller with the app
            (defaults to ENABLE_BACKGROUND_TASKS)
    """
    supabase = supabase or SupabaseClient.from_config()
    webhook = webhook or WebhookClient()
    object_store = object_store or ObjectStoreClient(supabase)
    dispatch_repository = DispatchRepository(supabase)
    pdf_repository = PdfRepository(supabase)
    supervisor = build_supervisor(dispatch_repository, pdf_repository, webhook, object_store)

    if start_background_tasks is None:
        start_background_tasks = config.enable_background_tasks()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # --- Startup ---
        if not supabase.is_configured():
            logger.warning("supabase_not_configured", missing=config.get_missing_config())

        if start_background_tasks:
            supervisor.start()

        yield

        # --- Shutdown ---
        await supervisor.stop()
        await object_store.aclose()
        logger.info("app_stopped")

    app = FastAPI(
        title="painel-faturas",
        description=(
            "Request, schedule and retrieve utility-invoice PDFs produced by the "
            "WhatsApp automation webhook and stored in Supabase Storage."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Add middleware
    app.middleware("http")(request_id_middleware)

    # Register routes
    app.include_router(system.router)
    app.include_router(invoices.router)
    app.include_router(pdfs.router)

    # Shared collaborators for route dependencies
    app.state.supabase = supabase
    app.state.webhook = webhook
    app.state.object_store = object_store
    app.state.dispatch_repository = dispatch_repository
    app.state.pdf_repository = pdf_repository
    app.state.supervisor = supervisor

    return app
