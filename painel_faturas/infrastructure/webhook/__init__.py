"""Webhook module for Painel de Faturas."""

from painel_faturas.infrastructure.webhook.client import WebhookClient

__all__ = ["WebhookClient"]
