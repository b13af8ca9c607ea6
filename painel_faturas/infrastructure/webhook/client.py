"""Invoice automation webhook client.

Submits invoice requests to the n8n workflow that drives the WhatsApp bot.
"""

from typing import Any, Optional

import httpx

from painel_faturas.config import config
from painel_faturas.core.errors import WebhookError
from painel_faturas.core.logging import logger


class WebhookClient:
    """Posts {uc, cpfCnpj, birthDate} to a fixed automation endpoint."""

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize webhook client.

        Args:
            url: Webhook endpoint (defaults to WEBHOOK_URL)
            timeout: Request timeout in seconds (defaults to WEBHOOK_TIMEOUT_SECONDS)
            transport: Optional httpx transport, used by tests
        """
        self.url = url or config.webhook_url()
        self.timeout = timeout if timeout is not None else config.webhook_timeout_seconds()
        self._transport = transport

    async def submit(self, uc: str, cpf_cnpj: str, birth_date: str) -> Any:
        """Submit one invoice request.

        Args:
            uc: Consumer unit identifier
            cpf_cnpj: Tax id
            birth_date: Birth date (dd/mm/yyyy)

        Returns:
            Decoded JSON body, or the raw text when the body is not JSON

        Raises:
            WebhookError: On network failure, timeout, or non-2xx response
        """
        payload = {"uc": uc, "cpfCnpj": cpf_cnpj, "birthDate": birth_date}

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    self.url,
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise WebhookError(
                f"Webhook returned HTTP {e.response.status_code}: {_error_detail(e.response)}",
                status_code=e.response.status_code,
            ) from e
        except httpx.TimeoutException as e:
            raise WebhookError(f"Webhook timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise WebhookError(f"Webhook request failed: {e}") from e

        logger.info("webhook_submitted", uc=uc, status_code=response.status_code)

        if response.headers.get("content-type", "").startswith("application/json"):
            try:
                return response.json()
            except ValueError:
                pass
        return response.text


def _error_detail(response: httpx.Response) -> str:
    """Best effort message from an error response body."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return str(body)[:200]
