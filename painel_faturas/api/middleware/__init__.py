"""Middleware for Painel de Faturas."""

from painel_faturas.api.middleware.request_id import request_id_middleware

__all__ = ["request_id_middleware"]
