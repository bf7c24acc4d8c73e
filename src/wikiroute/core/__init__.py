"""Slug-resolution engine: scanning, routing, indexing and resolving."""
