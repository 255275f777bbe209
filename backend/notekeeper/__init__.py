"""Note-taking backend: users, categories and notepads kept consistent over a document store."""

__version__ = "0.1.0"
