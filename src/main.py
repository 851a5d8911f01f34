"""FastAPI application entry point."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.api.errors import install_error_handlers
from src.api.router import api_router
from src.config import settings
from src.decision.store import SessionStore
from src.interpretation.llm_interpreter import LLMInterpreter
from src.services.llm_client import create_llm_client

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan management.

    Startup:
    - Create the LLM client for the configured provider
    - Initialize the interpretation collaborator
    - Initialize the in-memory session store

    Shutdown:
    - Cancel background work of open sessions
    """
    logger.info("Starting Decision Helper...")

    llm_client = create_llm_client(settings)
    collaborator = LLMInterpreter(llm_client)
    app.state.collaborator = collaborator
    logger.info(f"Interpretation collaborator initialized: {settings.llm_provider}")

    session_store = SessionStore(collaborator)
    app.state.session_store = session_store
    logger.info("Session store initialized")

    yield

    # Shutdown
    logger.info("Shutting down Decision Helper...")
    await session_store.close_all()
    logger.info("Sessions closed")


app = FastAPI(
    title=settings.app_name,
    description="Weighted decision matrix with natural-language input",
    version=settings.app_version,
    lifespan=lifespan,
)

install_error_handlers(app)
app.include_router(api_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
