import pytest

from app.exceptions import InvalidInputError, NoEligibleProductsError
from app.services import forecast as forecaster
from tests.conftest import make_product


def test_forecast_well_stocked_product():
    result = forecaster.forecast(make_product(quantity_on_hand=450, reorder_level=100), 30)

    assert result.predicted_demand == 100
    assert result.forecasted_stock == 350
    assert result.recommended_order == 0
    # ratio 4.5 falls in the overstock confidence band
    assert result.confidence == 0.75
    assert result.forecast_period == "30 days"


def test_forecast_recommends_order_with_safety_stock():
    result = forecaster.forecast(make_product(quantity_on_hand=120, reorder_level=100), 30)

    # forecasted 20 < 100: order = 100 + 50 - 20
    assert result.forecasted_stock == 20
    assert result.recommended_order == 130
    assert result.confidence == 0.92


def test_forecast_shortfall_uses_unclamped_stock():
    result = forecaster.forecast(make_product(quantity_on_hand=10, reorder_level=60), 60)

    # demand 120, projected -110: output clamps, order does not
    assert result.predicted_demand == 120
    assert result.forecasted_stock == 0
    assert result.recommended_order == 60 + 30 + 110
    assert result.confidence == 0.70


def test_forecast_rounds_halves_up():
    # 15 / 30 * 1 = 0.5 demand, 15 * 0.5 = 7.5 safety stock
    result = forecaster.forecast(make_product(quantity_on_hand=0, reorder_level=15), 1)

    assert result.predicted_demand == 1
    assert result.recommended_order == 15 + 8 + 1

    # 5 * 0.5 = 2.5 safety stock rounds to 3, not 2
    result = forecaster.forecast(make_product(quantity_on_hand=0, reorder_level=5), 30)

    assert result.predicted_demand == 5
    assert result.recommended_order == 5 + 3 + 5


@pytest.mark.parametrize(
    "quantity, expected",
    [(49, 0.70), (50, 0.85), (99, 0.85), (100, 0.92), (200, 0.92), (250, 0.85), (300, 0.85), (301, 0.75)],
)
def test_confidence_bands(quantity, expected):
    result = forecaster.forecast(make_product(quantity_on_hand=quantity, reorder_level=100))

    assert result.confidence == expected


@pytest.mark.parametrize("horizon", [0, 91, -5, 2.5, True])
def test_invalid_horizon(horizon):
    with pytest.raises(InvalidInputError) as excinfo:
        forecaster.forecast(make_product(), horizon)

    assert excinfo.value.field == "forecastDays"


def test_forecast_all_orders_by_urgency_with_stable_ties():
    products = [
        make_product(id=1, sku="CALM", quantity_on_hand=400, reorder_level=100),
        make_product(id=2, sku="TIE-A", quantity_on_hand=150, reorder_level=100),
        make_product(id=3, sku="URGENT", quantity_on_hand=20, reorder_level=100),
        make_product(id=4, sku="TIE-B", quantity_on_hand=15, reorder_level=10),
    ]

    report = forecaster.forecast_all(products, 30)

    # urgencies: 3.0, 0.5, 0.0, 0.5
    assert [f.sku for f in report.forecasts] == ["URGENT", "TIE-A", "TIE-B", "CALM"]


def test_forecast_all_summary():
    products = [
        make_product(id=1, quantity_on_hand=120, reorder_level=100),
        make_product(id=2, quantity_on_hand=10, reorder_level=100),
        make_product(id=3, quantity_on_hand=450, reorder_level=100),
    ]

    summary = forecaster.forecast_all(products, 30).summary

    assert summary.total_products == 3
    assert summary.products_needing_reorder == 2
    assert summary.total_recommended_order == 130 + 240
    # (0.92 + 0.70 + 0.75) / 3
    assert summary.average_confidence == 0.79


def test_forecast_all_skips_inactive_products():
    report = forecaster.forecast_all(
        [make_product(id=1), make_product(id=2, is_active=False)], 30
    )

    assert [f.product_id for f in report.forecasts] == [1]


@pytest.mark.parametrize("products", [[], [make_product(is_active=False)]])
def test_forecast_all_without_eligible_products(products):
    with pytest.raises(NoEligibleProductsError):
        forecaster.forecast_all(products, 30)
