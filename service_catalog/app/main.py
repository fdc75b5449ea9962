"""
Catalog service for product create, read and update.
"""

from decimal import Decimal, InvalidOperation
from typing import List, Optional

from fastapi import Path, Query

from shared.base_service import BaseService
from shared.errors import ValidationError
from shared.logging import set_user_context

from .cache.redis_cache import RedisCache
from .catalog.models import (
    Product,
    ProductCreateRequest,
    ProductCreatedResponse,
    ProductFilter,
    ProductUpdateRequest,
    ProductUpdatedResponse,
)
from .catalog.service import CatalogService
from .kafka.producer import KafkaProducerManager
from .persistence.postgres import PostgreSQLPersistence
from .ports import CacheStore, ImageTaskPublisher, ProductStore


# Upper bound of a PostgreSQL bigint; narrower id columns are rejected by the store.
MAX_PRODUCT_ID = 2 ** 63 - 1


class CatalogAPIService(BaseService):
    """Catalog HTTP service.

    Store, cache and publisher default to the PostgreSQL, Redis and Kafka
    adapters built from configuration; any of them may be passed in instead.
    """

    def __init__(
        self,
        store: Optional[ProductStore] = None,
        cache: Optional[CacheStore] = None,
        publisher: Optional[ImageTaskPublisher] = None,
    ):
        super().__init__("catalog", 8080)

        self.store = store or PostgreSQLPersistence(
            self.config.postgres_dsn,
            min_size=self.config.postgres_min_pool,
            max_size=self.config.postgres_max_pool,
            command_timeout=self.config.postgres_command_timeout,
        )
        self.cache = cache or RedisCache(self.config.redis_url)
        self.publisher = publisher or KafkaProducerManager(
            self.config.kafka_bootstrap,
            self.config.image_processing_topic,
            send_timeout=self.config.kafka_send_timeout,
        )

        self.catalog = CatalogService(
            self.store,
            self.cache,
            self.publisher,
            cache_ttl_seconds=self.config.cache_ttl_seconds,
            metrics=self.metrics,
        )

        self._setup_catalog_routes()

    def _setup_catalog_routes(self):
        """Set up product routes."""

        @self.app.post("/products", status_code=201, response_model=ProductCreatedResponse)
        async def create_product(request: ProductCreateRequest):
            """Create a product and queue its images for processing."""
            product_id = await self.catalog.create_product(request)
            return ProductCreatedResponse(product_id=product_id)

        @self.app.get("/products/{product_id}", response_model=Product)
        async def get_product(product_id: int = Path(..., le=MAX_PRODUCT_ID)):
            """Fetch one product by ID."""
            return await self.catalog.get_product_by_id(product_id)

        @self.app.get("/products", response_model=List[Product])
        async def get_products(
            user_id: Optional[str] = Query(None, description="Owning user ID"),
            min_price: Optional[str] = Query(None, description="Minimum price, inclusive"),
            max_price: Optional[str] = Query(None, description="Maximum price, inclusive"),
            product_name: Optional[str] = Query(None, description="Case-insensitive name substring")
        ):
            """List a user's products with optional price and name filters."""
            owner_id = parse_user_id(user_id)
            set_user_context(str(owner_id))
            filters = ProductFilter(
                min_price=parse_price(min_price, "min_price"),
                max_price=parse_price(max_price, "max_price"),
                name=product_name or None,
            )
            return await self.catalog.get_products(owner_id, filters)

        @self.app.put("/products/{product_id}", response_model=ProductUpdatedResponse)
        async def update_product(
            request: ProductUpdateRequest,
            product_id: int = Path(..., le=MAX_PRODUCT_ID)
        ):
            """Update a product's name, description, price and images."""
            rows_affected = await self.catalog.update_product(product_id, request)
            return ProductUpdatedResponse(rows_affected=rows_affected)

    async def _check_dependencies(self):
        """Check catalog service dependencies."""
        dependencies = {}

        for name, component in (("postgres", self.store), ("redis", self.cache)):
            health_check = getattr(component, "health_check", None)
            if health_check is None:
                continue
            dependencies[name] = "ok" if await health_check() else "error"

        return dependencies

    async def start(self):
        """Start catalog service components."""
        for component in (self.store, self.cache, self.publisher):
            start = getattr(component, "start", None)
            if start is not None:
                await start()

        self.logger.info("Catalog service started")

    async def stop(self):
        """Stop catalog service components."""
        for component in (self.publisher, self.cache, self.store):
            stop = getattr(component, "stop", None)
            if stop is not None:
                await stop()

        self.logger.info("Catalog service stopped")


def parse_user_id(raw: Optional[str]) -> int:
    """Parse the ``user_id`` query parameter."""
    try:
        user_id = int(raw) if raw is not None else 0
    except ValueError:
        user_id = 0
    if user_id <= 0:
        raise ValidationError("Invalid user_id", details={"user_id": raw})
    return user_id


def parse_price(raw: Optional[str], field: str) -> Optional[Decimal]:
    """Parse an optional price query parameter; blank means absent."""
    if raw is None or raw == "":
        return None
    try:
        value = Decimal(raw)
    except InvalidOperation:
        raise ValidationError(f"Invalid {field}", details={field: raw})
    if not value.is_finite():
        raise ValidationError(f"Invalid {field}", details={field: raw})
    return value


def create_app():
    """Create catalog service application."""
    service = CatalogAPIService()
    return service.app


if __name__ == "__main__":
    service = CatalogAPIService()
    service.run()
