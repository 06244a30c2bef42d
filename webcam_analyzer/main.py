# Standard library imports
from pathlib import Path
from contextlib import asynccontextmanager
from typing import Optional
import logging
import asyncio

# External package imports
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Local application imports
from .api.v1 import analyzer_router
from .core.config import get_settings
from .di.container import get_container, reset_container
from .processing.session import AnalyzerSession

logger = logging.getLogger(__name__)


async def load_models_in_background(session: AnalyzerSession) -> None:
    """
    Background task that loads the face analysis models.

    Failures are already reported through the session status; this only
    makes sure nothing escapes the task.
    """
    try:
        ready = await session.load_models()
        if ready:
            logger.info("Face analysis models ready")
        else:
            logger.warning("Face analysis models not loaded: %s", session.status.message)
    except asyncio.CancelledError:
        logger.info("Model loading task cancelled")
    except Exception as e:
        logger.error(f"Unexpected error while loading models: {e}", exc_info=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup/shutdown events.

    Starts model loading in the background and tears the analyzer session
    down (camera released, loop stopped) on shutdown.
    """
    settings = get_settings()
    session = get_container().get(AnalyzerSession)

    load_task: Optional[asyncio.Task] = None
    if settings.autoload_models:
        load_task = asyncio.create_task(load_models_in_background(session))
        logger.info("Model loading task started")

    yield

    # Shutdown: detach the loader first so a late stage cannot mutate state
    try:
        session.close()
    except Exception as e:
        logger.error(f"Error closing analyzer session: {e}", exc_info=True)
    finally:
        # A closed session cannot be restarted; the next startup builds a new one
        reset_container()

    if load_task and not load_task.done():
        load_task.cancel()
        try:
            await load_task
        except asyncio.CancelledError:
            pass

    logger.info("Application shutdown complete")


def create_application() -> FastAPI:
    """
    Create and configure FastAPI application.

    This function sets up the FastAPI application with:
    - Environment variable loading
    - Logging configuration
    - CORS middleware configuration
    - API route registration

    Returns:
        Configured FastAPI application instance
    """
    # Load environment variables from .env file
    env_path = Path(__file__).resolve().parent.parent / ".env"
    load_dotenv(env_path)

    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    # Create FastAPI app
    application = FastAPI(
        title="Webcam Face Analyzer API",
        version="1.0.0",
        description="Live webcam face detection, expression and age/gender analysis",
        lifespan=lifespan
    )

    # Add CORS middleware
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register API routers
    application.include_router(analyzer_router, prefix="/api/v1/analyzer")

    return application


# Create application instance
app = create_application()
