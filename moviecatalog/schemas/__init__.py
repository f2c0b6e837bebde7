"""Pydantic schemas for the MovieCatalog API."""
