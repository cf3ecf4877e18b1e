import pytest

from carbon_calculator import (
    CONDITIONS, calculate_carbon_metrics, normalize_condition,
    CARBON_FRACTION, CO2_PER_CARBON,
)


def test_reference_tree_healthy():
    metrics = calculate_carbon_metrics(60, 25, "Healthy")

    # 0.0673 * (0.6 * 60^2 * 25)^0.976 * 1.2
    assert metrics["biomass"] == pytest.approx(3357.5, rel=1e-2)
    assert metrics["carbon_stored"] == pytest.approx(metrics["biomass"] * CARBON_FRACTION, abs=0.01)
    assert metrics["co2_sequestered"] == pytest.approx(
        metrics["carbon_stored"] * CO2_PER_CARBON, abs=0.05
    )


def test_condition_scales_biomass():
    healthy = calculate_carbon_metrics(60, 25, "Healthy")["biomass"]
    damaged = calculate_carbon_metrics(60, 25, "Damaged")["biomass"]
    dead = calculate_carbon_metrics(60, 25, "Dead")["biomass"]

    assert healthy > damaged > dead > 0
    assert damaged == pytest.approx(healthy * 0.8, abs=0.02)
    assert dead == pytest.approx(healthy * 0.5, abs=0.02)


@pytest.mark.parametrize("dbh,height", [
    (0, 10), (10, 0), (-5, 10), (10, -1), (None, 10), ("30", 10), (float("nan"), 10),
    (float("inf"), 10), (10, float("inf")), (1e200, 25), (25, 1e308), (10 ** 400, 25),
])
def test_degenerate_inputs_give_zero(dbh, height):
    assert calculate_carbon_metrics(dbh, height, "Healthy") == {
        "biomass": 0.0, "carbon_stored": 0.0, "co2_sequestered": 0.0,
    }


@pytest.mark.parametrize("condition", CONDITIONS)
def test_monotonic_in_dbh_and_height(condition):
    dbhs = [1, 5, 10, 25, 50, 100, 200]
    heights = [1, 3, 8, 15, 30, 50]

    for height in heights:
        values = [calculate_carbon_metrics(d, height, condition) for d in dbhs]
        for key in ("biomass", "carbon_stored", "co2_sequestered"):
            series = [v[key] for v in values]
            assert series == sorted(series)
            assert all(x >= 0 for x in series)

    for dbh in dbhs:
        series = [calculate_carbon_metrics(dbh, h, condition)["biomass"] for h in heights]
        assert series == sorted(series)


def test_is_deterministic():
    assert calculate_carbon_metrics(42.5, 17.3, "Damaged") == calculate_carbon_metrics(42.5, 17.3, "Damaged")


@pytest.mark.parametrize("label,expected", [
    ("Healthy", "Healthy"),
    ("Sehat", "Healthy"),
    ("rusak", "Damaged"),
    (" MATI ", "Dead"),
    ("dead", "Dead"),
    ("withered", "Healthy"),
    (None, "Healthy"),
])
def test_normalize_condition(label, expected):
    assert normalize_condition(label) == expected
