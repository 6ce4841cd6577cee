"""
InventoryService: the only component that mutates stock.

Restock and adjust go through ProductCatalog.apply_quantity_delta, a single
conditional UPDATE, so concurrent requests for the same product cannot lose
updates. Read-side operations load an active snapshot and hand it to the pure
stock policy and forecast functions.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import (
    DuplicateSkuError,
    InsufficientQuantityError,
    InvalidInputError,
    NoEligibleProductsError,
    ProductNotFoundError,
)
from app.models.product import Product
from app.schemas import (
    ForecastReport,
    InventoryMetrics,
    ProductCreate,
    ProductUpdate,
    StockOptimizationReport,
)
from app.services import forecast as forecaster
from app.services import stock_policy
from app.services.catalog import ProductCatalog, normalize_sku
from app.tasks.alerts import dispatch_low_stock_alert

logger = logging.getLogger(__name__)

# Conditional updates tried before an adjustment is rejected
ADJUST_ATTEMPTS = 3

# Columns that may not be cleared by an explicit null in an update
REQUIRED_FIELDS = {
    "sku", "name", "category", "unit_cost", "quantity_on_hand", "reorder_level", "is_active",
}


class InventoryService:
    def __init__(self, db: AsyncSession):
        self.catalog = ProductCatalog(db)

    async def get_product(self, product_id: int) -> Product:
        product = await self.catalog.get(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    async def list_products(self, page: int = 1, limit: int = 50, **filters) -> Tuple[List[Product], int]:
        return await self.catalog.search(page=page, limit=limit, **filters)

    async def create_product(self, data: ProductCreate) -> Product:
        """
        Insert a new product.

        Raises:
            DuplicateSkuError: if any product, including a deactivated one,
                already uses the SKU.
        """
        fields = data.model_dump()
        fields["sku"] = normalize_sku(fields["sku"])

        if await self.catalog.find_by_sku(fields["sku"]):
            raise DuplicateSkuError(fields["sku"])

        try:
            product = await self.catalog.add(Product(**fields))
        except IntegrityError:
            # Lost a race with a concurrent insert of the same SKU
            await self.catalog.rollback()
            raise DuplicateSkuError(fields["sku"])

        logger.info("Created product %s (id=%s)", product.sku, product.id)
        return product

    async def update_product(self, product_id: int, patch: ProductUpdate) -> Product:
        product = await self.get_product(product_id)

        changes = {
            field: value
            for field, value in patch.model_dump(exclude_unset=True).items()
            if value is not None or field not in REQUIRED_FIELDS
        }
        if "sku" in changes:
            changes["sku"] = normalize_sku(changes["sku"])
            if await self.catalog.find_by_sku(changes["sku"], exclude_id=product_id):
                raise DuplicateSkuError(changes["sku"])

        sku = changes.get("sku", product.sku)
        for field, value in changes.items():
            setattr(product, field, value)

        try:
            product = await self.catalog.save(product)
        except IntegrityError:
            await self.catalog.rollback()
            raise DuplicateSkuError(sku)

        logger.info("Updated product %s (id=%s): %s", product.sku, product.id, sorted(changes))
        await self._check_low_stock(product)
        return product

    async def restock(self, product_id: int, quantity: int) -> Product:
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise InvalidInputError("Restock quantity must be a positive integer", field="quantity")

        if not await self.catalog.apply_quantity_delta(
            product_id, quantity, restocked_at=datetime.now(timezone.utc)
        ):
            raise ProductNotFoundError(product_id)

        product = await self.get_product(product_id)
        logger.info("Restocked %s by %d, now %d", product.sku, quantity, product.quantity_on_hand)
        await self._check_low_stock(product)
        return product

    async def adjust(self, product_id: int, delta: int, reason: Optional[str] = None) -> Product:
        """
        Apply a signed change to the quantity on hand.

        ``reason`` is recorded in the log only.

        Raises:
            ProductNotFoundError: if the product does not exist.
            InsufficientQuantityError: if the result would be negative; the
                record is left unchanged.
        """
        if isinstance(delta, bool) or not isinstance(delta, int):
            raise InvalidInputError("Adjustment must be an integer", field="quantity")

        for _ in range(ADJUST_ATTEMPTS):
            if await self.catalog.apply_quantity_delta(product_id, delta):
                break
            product = await self.get_product(product_id)
            if product.quantity_on_hand + delta < 0:
                logger.warning(
                    "Rejected adjustment of %d for %s: only %d on hand",
                    delta, product.sku, product.quantity_on_hand,
                )
                raise InsufficientQuantityError(product.quantity_on_hand, delta)
            # A concurrent restock landed between the update and the re-read
        else:
            raise InsufficientQuantityError(product.quantity_on_hand, delta)

        product = await self.get_product(product_id)
        logger.info(
            "Adjusted %s by %d, now %d (reason: %s)",
            product.sku, delta, product.quantity_on_hand, reason or "none given",
        )
        await self._check_low_stock(product)
        return product

    async def deactivate(self, product_id: int) -> Product:
        """Soft-delete a product. Deactivating twice is a no-op."""
        product = await self.get_product(product_id)
        if not product.is_active:
            return product

        product.is_active = False
        product = await self.catalog.save(product)
        logger.info("Deactivated product %s (id=%s)", product.sku, product.id)
        return product

    async def metrics(self) -> InventoryMetrics:
        return stock_policy.aggregate_metrics(await self.catalog.active_products())

    async def low_stock_products(self) -> List[Product]:
        return [p for p in await self.catalog.active_products() if p.is_low_stock]

    async def stock_optimization(self, product_ids: Optional[Sequence[int]] = None) -> StockOptimizationReport:
        return stock_policy.optimize(await self.catalog.active_products(product_ids))

    async def forecast(
        self,
        product_ids: Sequence[int],
        horizon_days: int = forecaster.DEFAULT_HORIZON_DAYS,
    ) -> ForecastReport:
        forecaster.validate_horizon(horizon_days)
        if not product_ids:
            raise NoEligibleProductsError()
        products = await self.catalog.active_products(product_ids)
        return forecaster.forecast_all(products, horizon_days)

    async def _check_low_stock(self, product: Product) -> None:
        if product.is_active and product.is_low_stock:
            # Publishing to the broker blocks; keep it off the event loop
            await run_in_threadpool(dispatch_low_stock_alert, product)
