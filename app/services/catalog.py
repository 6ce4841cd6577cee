"""
Product persistence: reads, paginated search and atomic quantity updates.
"""
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import select, func, update, or_, and_
from sqlalchemy.exc import DisconnectionError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import StorageUnavailableError
from app.models.product import Product

logger = logging.getLogger(__name__)


def normalize_sku(sku: str) -> str:
    """Canonical SKU form: surrounding whitespace removed, uppercase."""
    return sku.strip().upper()


@contextmanager
def storage_errors():
    """Re-raise connectivity failures from the database as StorageUnavailableError."""
    try:
        yield
    except (OperationalError, InterfaceError, DisconnectionError) as exc:
        logger.error("Database unavailable: %s", exc)
        raise StorageUnavailableError() from exc


class ProductCatalog:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, product_id: int) -> Optional[Product]:
        """Load a product, bypassing any stale copy in the session."""
        with storage_errors():
            result = await self.db.execute(
                select(Product)
                .where(Product.id == product_id)
                .execution_options(populate_existing=True)
            )
            return result.scalar_one_or_none()

    async def find_by_sku(self, sku: str, exclude_id: Optional[int] = None) -> Optional[Product]:
        """Find a product by SKU, active or not."""
        conditions = [Product.sku == normalize_sku(sku)]
        if exclude_id is not None:
            conditions.append(Product.id != exclude_id)
        with storage_errors():
            result = await self.db.execute(select(Product).where(and_(*conditions)))
            return result.scalars().first()

    async def search(
        self,
        page: int = 1,
        limit: int = 50,
        category: Optional[str] = None,
        active: Optional[bool] = None,
        low_stock: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[Product], int]:
        """Filtered page of products ordered by name, plus the total match count."""
        conditions = []
        if category:
            conditions.append(Product.category == category)
        if active is not None:
            conditions.append(Product.is_active == active)
        if low_stock:
            conditions.append(Product.quantity_on_hand <= Product.reorder_level)
        if search:
            pattern = f"%{search}%"
            conditions.append(or_(Product.name.ilike(pattern), Product.sku.ilike(pattern)))

        query = select(Product)
        count_query = select(func.count()).select_from(Product)
        if conditions:
            query = query.where(and_(*conditions))
            count_query = count_query.where(and_(*conditions))

        offset = (page - 1) * limit
        query = query.order_by(Product.name.asc(), Product.id.asc()).offset(offset).limit(limit)

        with storage_errors():
            total = (await self.db.execute(count_query)).scalar()
            products = (await self.db.execute(query)).scalars().all()
        return list(products), total

    async def active_products(
        self,
        product_ids: Optional[Sequence[int]] = None,
        category: Optional[str] = None,
    ) -> List[Product]:
        """
        Snapshot of active products. When ids are given the result follows
        their order, with duplicates and unknown ids dropped.
        """
        query = select(Product).where(Product.is_active.is_(True))
        if product_ids is not None:
            query = query.where(Product.id.in_(list(product_ids)))
        if category:
            query = query.where(Product.category == category)

        with storage_errors():
            products = (await self.db.execute(query.order_by(Product.id))).scalars().all()

        if product_ids is None:
            return list(products)
        by_id = {p.id: p for p in products}
        return [by_id[pid] for pid in dict.fromkeys(product_ids) if pid in by_id]

    async def add(self, product: Product) -> Product:
        with storage_errors():
            self.db.add(product)
            await self.db.commit()
            await self.db.refresh(product)
        return product

    async def save(self, product: Product) -> Product:
        with storage_errors():
            await self.db.commit()
            await self.db.refresh(product)
        return product

    async def rollback(self) -> None:
        await self.db.rollback()

    async def apply_quantity_delta(
        self,
        product_id: int,
        delta: int,
        restocked_at: Optional[datetime] = None,
    ) -> bool:
        """
        Add ``delta`` to the quantity on hand in one conditional UPDATE.

        The row only changes when it exists and the result stays >= 0, so
        concurrent adjustments never lose a delta or drive stock negative.
        Returns True if a row was updated.
        """
        values = {"quantity_on_hand": Product.quantity_on_hand + delta}
        if restocked_at is not None:
            values["last_restocked"] = restocked_at

        stmt = (
            update(Product)
            .where(Product.id == product_id, Product.quantity_on_hand + delta >= 0)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        with storage_errors():
            result = await self.db.execute(stmt)
            updated = result.rowcount == 1
            await self.db.commit()
        return updated
