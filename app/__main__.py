import logging
import sys
import uvicorn
from app.config import get_settings

logger = logging.getLogger(__name__)

if __name__ == "__main__":
    settings = get_settings()
    try:
        uvicorn.run("app.main:app", host=settings.backend_host, port=settings.backend_port)
    except Exception as e:
        logger.error(f"Error starting server: {str(e)}")
        sys.exit(1)
