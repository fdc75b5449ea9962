"""
Cache package for the Catalog service.

Provides the Redis cache store and the cache-aside accessor that layers
read-through population and delete-based invalidation on top of it.
"""
