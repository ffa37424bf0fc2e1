"""Template rendering and file set construction."""
