"""
Run the API with uvicorn: ``python -m todo_api``.
"""
import logging

import uvicorn

from todo_api.config import get_settings
from todo_api.logging_setup import setup_logging
from todo_api.main import create_app

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL)

    try:
        app = create_app(settings)
    except Exception:
        logger.exception("Failed to create application")
        raise

    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_config=None)


if __name__ == "__main__":
    main()
