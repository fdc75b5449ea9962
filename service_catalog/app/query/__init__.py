"""Query construction for product listings."""
