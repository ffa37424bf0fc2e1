"""Assembly of the data context and manifest from files and the environment."""
