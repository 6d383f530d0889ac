"""Configuration for the StoryWeaver backend."""
from storyweaver.config import get_env


class Settings:
    """Application settings."""

    # Server
    HOST = get_env("STORYWEAVER_HOST", default="127.0.0.1")
    PORT = int(get_env("STORYWEAVER_PORT", default="8000"))
    LOG_LEVEL = get_env("STORYWEAVER_LOG_LEVEL", default="info")

    # CORS for local front-end development
    CORS_ORIGINS = ["http://localhost:5173", "http://localhost:5174"]  # Vite ports

    # Offered on the empty prompt screen
    SUGGESTED_PROMPTS = [
        "A cyberpunk detective",
        "A friendly dragon",
        "Journey to Mars",
        "The secret library",
    ]


# Global settings instance
settings = Settings()
