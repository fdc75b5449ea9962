"""Persistence package for the Catalog service."""
