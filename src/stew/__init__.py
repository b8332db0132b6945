"""Seed a fresh Gitea instance with repositories, histories and pull requests."""
