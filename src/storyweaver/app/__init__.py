"""StoryWeaver HTTP backend."""
