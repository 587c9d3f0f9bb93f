"""
Application entry point for meet-link.

Loads environment variables, configures logging and serves the FastAPI
application with uvicorn.
"""

from dotenv import load_dotenv

# Load environment variables before settings are read
load_dotenv()

from meetlink.main import app  # noqa: E402
from meetlink.utils.config import get_settings  # noqa: E402
from meetlink.utils.logger import setup_logging  # noqa: E402

settings = get_settings()
logger = setup_logging(settings.LOG_LEVEL, settings.DEBUG)

if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting meet-link on {settings.HOST}:{settings.PORT} (reload={settings.RELOAD})")

    uvicorn.run(
        "app:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.RELOAD,
        log_level="info"
    )
