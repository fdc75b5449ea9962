"""Kafka integration for the Catalog service."""
