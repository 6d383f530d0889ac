"""Run the StoryWeaver backend: python -m storyweaver.app"""

import uvicorn

from storyweaver.app.config import settings
from storyweaver.logging_config import setup_logging

if __name__ == "__main__":
    setup_logging("storyweaver", level=settings.LOG_LEVEL)

    uvicorn.run(
        "storyweaver.app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL
    )
