"""Main entry point for Painel de Faturas.

Builds the FastAPI app with the scheduler and poller attached to its lifespan.

Usage:
    Development: uvicorn painel_faturas.main:app --reload --port 8000
    Production: uvicorn painel_faturas.main:app --host 0.0.0.0 --port 8000

Run a single worker: the background loops keep their state in process memory.
"""

from painel_faturas.api import create_app

app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "painel_faturas.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info",
    )
