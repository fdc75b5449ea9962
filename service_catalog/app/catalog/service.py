"""
Catalog service for product operations.

Orchestrates validation, persistence, the cache-aside accessor and the
image-processing channel. All collaborators are injected so tests can run
against in-memory fakes.
"""

from typing import Any, Dict, List, Mapping, Optional, TYPE_CHECKING

from shared.logging import get_logger
from shared.errors import DependencyError, NotFoundError, ValidationError

from ..cache.accessor import CacheAsideAccessor, DEFAULT_TTL_SECONDS
from ..ports import CacheStore, ImageTaskPublisher, ProductStore
from ..query.builder import PRODUCT_COLUMNS, build_product_query
from .models import (
    Product,
    ProductAdapter,
    ProductCreateRequest,
    ProductFilter,
    ProductListAdapter,
    ProductUpdateRequest,
)

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


INSERT_PRODUCT = """
    INSERT INTO products (user_id, product_name, product_description, product_price, product_images)
    VALUES ($1, $2, $3, $4, $5)
    RETURNING id
"""

SELECT_PRODUCT = f"SELECT {PRODUCT_COLUMNS} FROM products WHERE id = $1"

UPDATE_PRODUCT = """
    UPDATE products
    SET product_name = $1, product_description = $2, product_price = $3, product_images = $4
    WHERE id = $5
"""


def product_key(product_id: int) -> str:
    """Cache key for a single product."""
    return f"product:{product_id}"


def user_products_key(user_id: int) -> str:
    """Cache key for a user's product listing."""
    return f"products:user:{user_id}"


class CatalogService:
    """Service for catalog operations.

    Example usage:
        service = CatalogService(persistence, redis_cache, producer)

        product_id = await service.create_product(ProductCreateRequest(...))
        product = await service.get_product_by_id(product_id)
        products = await service.get_products(7, ProductFilter(max_price=Decimal("50")))
    """

    def __init__(
        self,
        store: ProductStore,
        cache: CacheStore,
        publisher: ImageTaskPublisher,
        *,
        cache_ttl_seconds: int = DEFAULT_TTL_SECONDS,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.store = store
        self.publisher = publisher
        self.metrics = metrics
        self.accessor = CacheAsideAccessor(cache, cache_ttl_seconds, metrics=metrics)
        self.logger = get_logger("catalog.service")

    async def create_product(self, request: ProductCreateRequest) -> int:
        """Persist a new product and queue its images for processing.

        Returns:
            The store-assigned product ID.

        Raises:
            ValidationError: a required field is missing or invalid.
            DependencyError: the insert or the publish failed. A publish
                failure happens after the row is committed; the product
                then exists without a queued processing task.
        """
        self._validate_create(request)

        row = await self.store.query_row(
            INSERT_PRODUCT,
            request.user_id,
            request.product_name,
            request.product_description,
            request.product_price,
            request.product_images,
        )
        if row is None:
            raise DependencyError("postgres", "insert returned no product id")
        product_id = row["id"]

        task = {"product_id": product_id, "image_urls": list(request.product_images)}
        try:
            await self.publisher.publish(task, key=str(product_id))
        except DependencyError:
            self.logger.error(
                "Failed to enqueue image processing task",
                product_id=product_id,
                image_urls=task["image_urls"]
            )
            raise

        self.logger.info("Product created successfully", product_id=product_id, user_id=request.user_id)
        self._record_event("product_created")
        return product_id

    async def get_product_by_id(self, product_id: int) -> Product:
        """Return one product, served from cache when possible.

        Raises:
            NotFoundError: no product has this ID.
        """

        async def load() -> Product:
            row = await self.store.query_row(SELECT_PRODUCT, product_id)
            if row is None:
                self.logger.warning("Product not found", product_id=product_id)
                raise NotFoundError("Product not found", details={"product_id": product_id})
            return _row_to_product(row)

        return await self.accessor.read_through(product_key(product_id), load, ProductAdapter)

    async def get_products(self, user_id: int, filters: Optional[ProductFilter] = None) -> List[Product]:
        """List a user's products matching ``filters``.

        The listing always queries the store; the result is then cached under
        the user's collection key.

        Raises:
            InvalidArgumentError: ``user_id`` is not positive.
            InvalidRangeError: ``min_price`` exceeds ``max_price``.
        """
        query = build_product_query(user_id, filters)

        self.logger.debug("Executing query to fetch products", query=query.sql, params=list(query.args))
        rows = await self.store.query(query.sql, *query.args)
        products = [_row_to_product(row) for row in rows]

        await self.accessor.populate(user_products_key(user_id), products, ProductListAdapter)
        return products

    async def update_product(self, product_id: int, request: ProductUpdateRequest) -> int:
        """Overwrite a product's editable fields and drop its cache entry.

        Compressed images are never touched. No existence check is made: an
        unknown ID updates zero rows and still succeeds. Listing cache entries
        are left to expire on their TTL.

        Returns:
            Number of rows the store reported as updated.
        """
        self._validate_update(request)

        rows_affected = await self.store.execute(
            UPDATE_PRODUCT,
            request.product_name,
            request.product_description,
            request.product_price,
            request.product_images,
            product_id,
        )

        await self.accessor.invalidate(product_key(product_id))

        if rows_affected == 0:
            self.logger.warning("Update matched no product", product_id=product_id)
        else:
            self.logger.info("Product updated successfully", product_id=product_id)
            self._record_event("product_updated")
        return rows_affected

    def _validate_create(self, request: ProductCreateRequest) -> None:
        errors: Dict[str, str] = {}
        if request.user_id <= 0:
            errors["user_id"] = "must be a positive integer"
        if not request.product_name:
            errors["product_name"] = "must not be empty"
        if not request.product_images:
            errors["product_images"] = "at least one image is required"
        if request.product_price <= 0:
            errors["product_price"] = "must be greater than zero"
        if errors:
            self.logger.warning("Missing required fields or invalid data", fields=sorted(errors))
            raise ValidationError("Missing required fields or invalid data", details=errors)

    def _validate_update(self, request: ProductUpdateRequest) -> None:
        errors: Dict[str, str] = {}
        if not request.product_name:
            errors["product_name"] = "must not be empty"
        if request.product_price <= 0:
            errors["product_price"] = "must be greater than zero"
        if errors:
            self.logger.warning("Missing required fields or invalid data", fields=sorted(errors))
            raise ValidationError("Missing required fields or invalid data", details=errors)

    def _record_event(self, event_type: str) -> None:
        if self.metrics:
            self.metrics.record_business_event(event_type)


def _row_to_product(row: Mapping[str, Any]) -> Product:
    """Convert a database row to a Product."""
    return Product(
        id=row["id"],
        user_id=row["user_id"],
        product_name=row["product_name"],
        product_description=row["product_description"] or "",
        product_price=row["product_price"],
        product_images=list(row["product_images"] or []),
        compressed_product_images=(
            list(row["compressed_product_images"])
            if row["compressed_product_images"] is not None
            else None
        ),
    )
