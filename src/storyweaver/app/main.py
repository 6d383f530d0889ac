"""StoryWeaver API."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storyweaver import __version__
from storyweaver.app.config import settings
from storyweaver.app.routers import story

app = FastAPI(
    title="StoryWeaver API",
    description="Backend API that weaves illustrated stories with Gemini",
    version=__version__
)

# CORS middleware for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(story.router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "storyweaver-api"}


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "StoryWeaver API",
        "docs": "/docs",
        "health": "/health"
    }
