"""Seed-data connector for the clinic record collections."""

from .seed_client import SeedClient, SeedClientError
from .seeding import load_rows, seed_session

__all__ = ["SeedClient", "SeedClientError", "load_rows", "seed_session"]
