"""Catalog service package."""
