"""Persistence helpers (asyncpg)."""
