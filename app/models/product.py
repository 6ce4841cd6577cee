from decimal import Decimal
from sqlalchemy import (
    Column, Integer, String, Text, Boolean, DateTime, Numeric, CheckConstraint
)
from sqlalchemy.sql import func
from app.database import Base


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("quantity_on_hand >= 0", name="ck_products_quantity_non_negative"),
        CheckConstraint("unit_cost >= 0", name="ck_products_unit_cost_non_negative"),
        CheckConstraint("reorder_level >= 0", name="ck_products_reorder_level_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    # Stored uppercased; unique across active and deactivated products
    sku = Column(String(64), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    category = Column(String(120), nullable=False, index=True)
    description = Column(Text, nullable=True)
    supplier = Column(String(255), nullable=True)
    location = Column(String(255), nullable=True)
    quantity_on_hand = Column(Integer, nullable=False, default=0)
    unit_cost = Column(Numeric(12, 2), nullable=False)
    reorder_level = Column(Integer, nullable=False, default=10)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    last_restocked = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    @property
    def is_low_stock(self) -> bool:
        return self.quantity_on_hand <= self.reorder_level

    @property
    def total_value(self) -> Decimal:
        return self.quantity_on_hand * Decimal(str(self.unit_cost))

    def __repr__(self):
        return f"<Product(id={self.id}, sku='{self.sku}', quantity_on_hand={self.quantity_on_hand})>"
