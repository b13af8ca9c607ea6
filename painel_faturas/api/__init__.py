"""API package for Painel de Faturas."""

from painel_faturas.api.app import create_app

__all__ = ["create_app"]
