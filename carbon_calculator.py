import logging
import math

logger = logging.getLogger(__name__)

# =========================================================
# ---------------------- CONSTANTS ------------------------
# =========================================================

HEALTHY = "Healthy"
DAMAGED = "Damaged"
DEAD = "Dead"
CONDITIONS = (HEALTHY, DAMAGED, DEAD)

# Labels produced by the vision model prompt and by older saved inventories
CONDITION_ALIASES = {
    "healthy": HEALTHY,
    "sehat": HEALTHY,
    "damaged": DAMAGED,
    "rusak": DAMAGED,
    "dead": DEAD,
    "mati": DEAD,
}

# Share of the standing biomass still counted for each condition
HEALTH_FACTOR = {HEALTHY: 1.0, DAMAGED: 0.8, DEAD: 0.5}

# Chave et al. (2014) generic pantropical equation: AGB = a * (WD * DBH^2 * H)^b
ALLOMETRY_A = 0.0673
ALLOMETRY_B = 0.976
DEFAULT_WOOD_DENSITY = 0.6  # g/cm3

ROOT_TO_SHOOT_RATIO = 0.2
CARBON_FRACTION = 0.5
CO2_PER_CARBON = 3.67  # 44/12


def normalize_condition(condition):
    """Map an English or Indonesian condition label onto one of CONDITIONS."""
    if condition in CONDITIONS:
        return condition
    key = str(condition or "").strip().lower()
    if key not in CONDITION_ALIASES:
        logger.warning("Unknown tree condition %r, treating as %s", condition, HEALTHY)
        return HEALTHY
    return CONDITION_ALIASES[key]


def _zero_metrics():
    return {"biomass": 0.0, "carbon_stored": 0.0, "co2_sequestered": 0.0}


def _is_positive_number(value):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return value > 0 and (isinstance(value, int) or math.isfinite(value))


def calculate_carbon_metrics(dbh, height, condition):
    """
    Estimate biomass and carbon held by a single tree.

    Args:
        dbh (float): Diameter at breast height in centimeters.
        height (float): Tree height in meters.
        condition (str): Healthy, Damaged or Dead.

    Returns:
        dict: biomass, carbon_stored and co2_sequestered, all in kg.
        Invalid or out-of-range measurements give all zeros.
    """
    if not _is_positive_number(dbh) or not _is_positive_number(height):
        return _zero_metrics()

    try:
        agb_kg = ALLOMETRY_A * (DEFAULT_WOOD_DENSITY * dbh ** 2 * height) ** ALLOMETRY_B
    except OverflowError:
        agb_kg = math.inf
    if not math.isfinite(agb_kg):
        logger.warning("Measurements out of range (dbh=%r, height=%r), no carbon estimate", dbh, height)
        return _zero_metrics()

    biomass = agb_kg * (1 + ROOT_TO_SHOOT_RATIO) * HEALTH_FACTOR[normalize_condition(condition)]
    carbon_stored = biomass * CARBON_FRACTION
    co2 = carbon_stored * CO2_PER_CARBON
    if not math.isfinite(co2):
        return _zero_metrics()

    return {
        "biomass": round(biomass, 2),
        "carbon_stored": round(carbon_stored, 2),
        "co2_sequestered": round(co2, 2),
    }
