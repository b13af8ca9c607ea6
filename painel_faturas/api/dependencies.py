"""FastAPI dependencies for Painel de Faturas.

Dependency injection functions for route handlers. Every collaborator is
built once by create_app() and kept on app.state.
"""

from fastapi import Request

from painel_faturas.core.periodic import BackgroundSupervisor
from painel_faturas.infrastructure.database import (
    DispatchRepository,
    PdfRepository,
    SupabaseClient,
)
from painel_faturas.infrastructure.storage import ObjectStoreClient
from painel_faturas.infrastructure.webhook import WebhookClient


def get_supabase(request: Request) -> SupabaseClient:
    return request.app.state.supabase


def get_dispatch_repository(request: Request) -> DispatchRepository:
    """Dependency to get DispatchRepository instance."""
    return request.app.state.dispatch_repository


def get_pdf_repository(request: Request) -> PdfRepository:
    """Dependency to get PdfRepository instance."""
    return request.app.state.pdf_repository


def get_webhook_client(request: Request) -> WebhookClient:
    return request.app.state.webhook


def get_object_store(request: Request) -> ObjectStoreClient:
    return request.app.state.object_store


def get_supervisor(request: Request) -> BackgroundSupervisor:
    return request.app.state.supervisor
