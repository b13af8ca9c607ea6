"""Painel de Faturas: invoice request scheduling and PDF catalog service."""

__version__ = "1.0.0"
