"""
Catalog Service package.

Serves create, read and update over products stored in PostgreSQL, with a
Redis read-through cache and a Kafka channel for image-processing tasks.

- app.main: HTTP surface (FastAPI) and component lifecycle.
- app.catalog: Product models and the CatalogService use cases.
- app.query: Filter query builder for product listings.
- app.cache: Redis cache store and the cache-aside accessor.
- app.persistence: asyncpg-backed product store.
- app.kafka: Producer for image-processing tasks.

Guidelines:
- The store is the source of truth; the cache is disposable.
- A cache outage must degrade to store reads, never to errors.
"""
