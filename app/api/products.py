from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from app.auth import ADMIN, INVENTORY, Identity, get_current_identity, require_roles
from app.database import get_db
from app.schemas import (
    AdjustRequest, DeactivateResponse, InventoryMetrics, ProductCreate,
    ProductListResponse, ProductResponse, ProductUpdate, RestockRequest,
)
from app.services.inventory import InventoryService
import math

router = APIRouter(
    prefix="/api/inventory",
    tags=["inventory"],
    dependencies=[Depends(get_current_identity)],
)

can_edit_stock = require_roles(ADMIN, INVENTORY)


def get_inventory_service(db: AsyncSession = Depends(get_db)) -> InventoryService:
    return InventoryService(db)


@router.get("/products", response_model=ProductListResponse)
async def list_products(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(50, ge=1, le=100, description="Items per page"),
    category: Optional[str] = Query(None, description="Filter by category"),
    active: Optional[bool] = Query(None, description="Filter by active status"),
    low_stock: Optional[bool] = Query(None, alias="lowStock", description="Only products at or below reorder level"),
    search: Optional[str] = Query(None, description="Match name or SKU (case-insensitive)"),
    service: InventoryService = Depends(get_inventory_service),
):
    """List products with pagination and filtering."""
    products, total = await service.list_products(
        page=page, limit=limit, category=category, active=active, low_stock=low_stock, search=search
    )
    return ProductListResponse(
        items=[ProductResponse.model_validate(p) for p in products],
        total=total,
        page=page,
        limit=limit,
        total_pages=math.ceil(total / limit) if total > 0 else 0,
    )


@router.get("/products/{product_id}", response_model=ProductResponse)
async def get_product(product_id: int, service: InventoryService = Depends(get_inventory_service)):
    """Get a single product by ID."""
    return ProductResponse.model_validate(await service.get_product(product_id))


@router.post("/products", response_model=ProductResponse, status_code=201)
async def create_product(
    product: ProductCreate,
    service: InventoryService = Depends(get_inventory_service),
    _: Identity = Depends(can_edit_stock),
):
    """Create a new product. SKUs of deactivated products stay reserved."""
    return ProductResponse.model_validate(await service.create_product(product))


@router.put("/products/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: int,
    product_update: ProductUpdate,
    service: InventoryService = Depends(get_inventory_service),
    _: Identity = Depends(can_edit_stock),
):
    """Update an existing product."""
    return ProductResponse.model_validate(await service.update_product(product_id, product_update))


@router.patch("/products/{product_id}/restock", response_model=ProductResponse)
async def restock_product(
    product_id: int,
    body: RestockRequest,
    service: InventoryService = Depends(get_inventory_service),
    _: Identity = Depends(can_edit_stock),
):
    """Add received units to the quantity on hand."""
    return ProductResponse.model_validate(await service.restock(product_id, body.quantity))


@router.patch("/products/{product_id}/adjust", response_model=ProductResponse)
async def adjust_product(
    product_id: int,
    body: AdjustRequest,
    service: InventoryService = Depends(get_inventory_service),
    _: Identity = Depends(can_edit_stock),
):
    """Increase or decrease the quantity on hand; never below zero."""
    return ProductResponse.model_validate(await service.adjust(product_id, body.quantity, body.reason))


@router.delete("/products/{product_id}", response_model=DeactivateResponse)
async def deactivate_product(
    product_id: int,
    service: InventoryService = Depends(get_inventory_service),
    _: Identity = Depends(require_roles(ADMIN)),
):
    """Soft delete: the product is deactivated, not removed."""
    product = await service.deactivate(product_id)
    return DeactivateResponse(
        message="Product deactivated successfully",
        product=ProductResponse.model_validate(product),
    )


@router.get("/metrics", response_model=InventoryMetrics)
async def get_metrics(service: InventoryService = Depends(get_inventory_service)):
    """Inventory totals across active products."""
    return await service.metrics()


@router.get("/low-stock", response_model=List[ProductResponse])
async def get_low_stock(service: InventoryService = Depends(get_inventory_service)):
    """Active products at or below their reorder level."""
    return [ProductResponse.model_validate(p) for p in await service.low_stock_products()]
