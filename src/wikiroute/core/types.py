"""Core type definitions."""

from typing import NewType

# Absolute site path (e.g., "/", "/guides/setup/")
# Distinct from filesystem Path to catch type mismatches
RouteURL = NewType("RouteURL", str)
