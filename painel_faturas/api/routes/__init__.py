"""API routes for Painel de Faturas."""

from painel_faturas.api.routes import invoices, pdfs, system

__all__ = ["invoices", "pdfs", "system"]
