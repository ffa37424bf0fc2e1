"""Core models, configuration and pipeline orchestration."""
