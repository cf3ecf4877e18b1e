import math

from carbon_calculator import (
    HEALTHY, DAMAGED, DEAD,
    calculate_carbon_metrics, normalize_condition, _is_positive_number,
)

PROXIMITY_OPTIONS = ("None", "Near", "Far")

# Crown radius grows roughly linearly with stem diameter
CROWN_RADIUS_M_PER_CM_DBH = 0.12
MIN_CROWN_RADIUS_M = 0.5

STORMWATER_L_PER_M2 = 45.0
POLLUTION_G_PER_M2 = 12.0
# Cooling benefit per m2 of crown, only for trees shading a building
ENERGY_KWH_PER_M2 = {"Near": 0.9, "Far": 0.3, "None": 0.0}

# How much of the canopy services a tree still delivers
SERVICE_FACTOR = {HEALTHY: 1.0, DAMAGED: 0.6, DEAD: 0.0}

# Unit prices in IDR
ELECTRICITY_IDR_PER_KWH = 1444.70
CARBON_IDR_PER_KG_CO2 = 58.8
WATER_IDR_PER_LITER = 7.0
AIR_QUALITY_IDR_PER_GRAM = 150.0
ANNUAL_SEQUESTRATION_RATE = 0.02  # share of the standing CO2 stock added per year


def _empty_services():
    return {
        "stormwater_intercepted_liters": 0.0,
        "air_pollution_removed_grams": 0.0,
        "energy_savings_idr": 0.0,
        "annual_monetary_value": {
            "total": 0.0,
            "carbon": 0.0,
            "stormwater": 0.0,
            "air_quality": 0.0,
            "energy": 0.0,
        },
    }


def crown_area_m2(dbh):
    radius = max(MIN_CROWN_RADIUS_M, CROWN_RADIUS_M_PER_CM_DBH * dbh)
    return math.pi * radius * radius


def calculate_ecosystem_services(dbh, height, proximity_to_building, condition):
    """
    Annual ecosystem services of one tree and their value in IDR.

    Stormwater, air quality and energy scale with the crown area estimated
    from DBH; the carbon component values one year of sequestration.
    Invalid or out-of-range measurements give all zeros.
    """
    if not _is_positive_number(dbh) or not _is_positive_number(height):
        return _empty_services()

    condition = normalize_condition(condition)
    factor = SERVICE_FACTOR[condition]
    try:
        area = crown_area_m2(dbh)
    except OverflowError:
        area = math.inf
    if not math.isfinite(area):
        return _empty_services()

    stormwater = STORMWATER_L_PER_M2 * area * factor
    pollution = POLLUTION_G_PER_M2 * area * factor
    energy_kwh = ENERGY_KWH_PER_M2.get(proximity_to_building, 0.0) * area * factor
    energy_idr = energy_kwh * ELECTRICITY_IDR_PER_KWH

    co2_stock = calculate_carbon_metrics(dbh, height, condition)["co2_sequestered"]
    carbon_value = co2_stock * ANNUAL_SEQUESTRATION_RATE * CARBON_IDR_PER_KG_CO2
    stormwater_value = stormwater * WATER_IDR_PER_LITER
    air_quality_value = pollution * AIR_QUALITY_IDR_PER_GRAM

    if not math.isfinite(carbon_value + stormwater_value + air_quality_value + energy_idr):
        return _empty_services()

    carbon_value = round(carbon_value, 2)
    stormwater_value = round(stormwater_value, 2)
    air_quality_value = round(air_quality_value, 2)
    energy_idr = round(energy_idr, 2)

    return {
        "stormwater_intercepted_liters": round(stormwater, 2),
        "air_pollution_removed_grams": round(pollution, 2),
        "energy_savings_idr": energy_idr,
        "annual_monetary_value": {
            "total": round(carbon_value + stormwater_value + air_quality_value + energy_idr, 2),
            "carbon": carbon_value,
            "stormwater": stormwater_value,
            "air_quality": air_quality_value,
            "energy": energy_idr,
        },
    }


def estimate_tree(dbh, height, condition, proximity_to_building):
    """Return (carbon metrics, ecosystem services) for one set of measurements."""
    return (
        calculate_carbon_metrics(dbh, height, condition),
        calculate_ecosystem_services(dbh, height, proximity_to_building, condition),
    )
