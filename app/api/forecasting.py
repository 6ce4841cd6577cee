from fastapi import APIRouter, Depends, Query
from typing import List, Optional
from app.api.products import get_inventory_service
from app.auth import get_current_identity
from app.schemas import ForecastReport, ForecastRequest, StockOptimizationReport
from app.services.inventory import InventoryService

router = APIRouter(
    prefix="/api/ml",
    tags=["forecasting"],
    dependencies=[Depends(get_current_identity)],
)


@router.post("/predict-demand", response_model=ForecastReport)
async def predict_demand(
    request: ForecastRequest,
    service: InventoryService = Depends(get_inventory_service),
):
    """
    Project demand and reorder quantities for the requested products.

    Heuristic only: daily usage is assumed to be the reorder level spread
    over 30 days. Results are ordered most urgent first.
    """
    return await service.forecast(request.product_ids, request.forecast_days)


@router.get("/stock-optimization", response_model=StockOptimizationReport)
async def stock_optimization(
    product_ids: Optional[List[int]] = Query(None, alias="productIds", description="Restrict to these products"),
    service: InventoryService = Depends(get_inventory_service),
):
    """Classify active products by stock health."""
    return await service.stock_optimization(product_ids)
