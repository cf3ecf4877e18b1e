# inventory_store.py - tree collection kept as one JSON document in SQLite

import json
import logging
import sqlite3
import time
from pathlib import Path

import pandas as pd

from config import SQLITE_DB, STORAGE_KEY
from carbon_calculator import normalize_condition
from ecosystem_services import estimate_tree
from seed_data import initial_trees

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("id", "dbh", "height", "condition")


# ========== LOCAL HELPERS ==========
def get_db_connection(db_path=SQLITE_DB):
    """Open the key-value store, creating the data directory and table if needed."""
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path))
    conn.execute("""
        CREATE TABLE IF NOT EXISTS kv_store (
            key TEXT PRIMARY KEY,
            value TEXT
        )
    """)
    return conn


def with_derived_metrics(tree):
    """Return a copy of `tree` with carbon and ecosystem services recomputed."""
    missing = [field for field in REQUIRED_FIELDS if field not in tree]
    if missing:
        raise KeyError(f"Tree record is missing {', '.join(missing)}")

    condition = normalize_condition(tree["condition"])
    proximity = tree.get("proximity_to_building", "None")
    carbon, services = estimate_tree(tree["dbh"], tree["height"], condition, proximity)
    return {
        **tree,
        "condition": condition,
        "proximity_to_building": proximity,
        "carbon": carbon,
        "ecosystem_services": services,
    }


def next_tree_id(trees):
    """Millisecond timestamp, bumped past existing ids on collision."""
    candidate = int(time.time() * 1000)
    existing = {t["id"] for t in trees}
    if candidate in existing:
        candidate = int(max(existing)) + 1
    return candidate


# ========== CORE STORAGE FUNCTIONS ==========

def remove_stored_trees(db_path=SQLITE_DB):
    conn = None
    try:
        conn = get_db_connection(db_path)
        conn.execute("DELETE FROM kv_store WHERE key = ?", (STORAGE_KEY,))
        conn.commit()
    except sqlite3.Error as e:
        logger.error(f"Could not clear stored trees: {e}")
    finally:
        if conn:
            conn.close()


def load_trees(db_path=SQLITE_DB):
    """
    Load the saved inventory. Absent or malformed data falls back to the
    built-in seed trees; malformed data is also removed from storage.
    """
    conn = None
    try:
        conn = get_db_connection(db_path)
        row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (STORAGE_KEY,)).fetchone()
    except sqlite3.Error as e:
        logger.exception("Could not read trees from storage: %s", e)
        return initial_trees()
    finally:
        if conn:
            conn.close()

    if row is None or not row[0]:
        logger.info("No saved inventory found, using seed data.")
        return initial_trees()

    try:
        saved_trees = json.loads(row[0])
        if not isinstance(saved_trees, list):
            raise ValueError("stored inventory is not a list")
        return [with_derived_metrics(tree) for tree in saved_trees]
    except (ValueError, TypeError, KeyError, ArithmeticError) as e:
        logger.error(f"Could not load trees from storage: {e}")
        remove_stored_trees(db_path)
        return initial_trees()


def save_trees(trees, db_path=SQLITE_DB):
    """Persist the whole collection under the single storage key."""
    conn = None
    try:
        conn = get_db_connection(db_path)
        conn.execute(
            "INSERT OR REPLACE INTO kv_store (key, value) VALUES (?, ?)",
            (STORAGE_KEY, json.dumps(trees)),
        )
        conn.commit()
        return True
    except (sqlite3.Error, TypeError, ValueError) as e:
        logger.error(f"Could not save trees to storage: {e}")
        return False
    finally:
        if conn:
            conn.close()


def add_tree(trees, tree_data, db_path=SQLITE_DB):
    """Assign an id, compute derived metrics, prepend and persist."""
    new_tree = with_derived_metrics({**tree_data, "id": next_tree_id(trees)})
    trees.insert(0, new_tree)
    save_trees(trees, db_path)
    logger.info(f"Added tree {new_tree['id']} ({new_tree.get('species', 'Unknown')})")
    return new_tree


def update_tree(trees, tree, db_path=SQLITE_DB):
    """Recompute derived metrics and replace the record with the same id in place."""
    final_tree = with_derived_metrics(tree)
    for idx, existing in enumerate(trees):
        if existing["id"] == final_tree["id"]:
            trees[idx] = final_tree
            save_trees(trees, db_path)
            logger.info(f"Updated tree {final_tree['id']}")
            return final_tree

    logger.warning(f"Tree {final_tree['id']} not found, nothing updated")
    return None


# ========== METRICS ==========

def get_inventory_metrics(trees):
    """Return inventory totals for the dashboard and the PDF report."""
    if not trees:
        return {
            'total_trees': 0, 'total_biomass': 0.0, 'total_carbon': 0.0, 'total_co2': 0.0,
            'total_stormwater': 0.0, 'total_pollution': 0.0, 'total_energy': 0.0,
            'monetary': {'total': 0.0, 'carbon': 0.0, 'stormwater': 0.0, 'air_quality': 0.0, 'energy': 0.0},
            'species_counts': {}, 'condition_counts': {},
        }

    df = pd.json_normalize(trees)

    def total(column):
        return round(float(df[column].sum()), 2) if column in df.columns else 0.0

    monetary = {
        part: total(f"ecosystem_services.annual_monetary_value.{part}")
        for part in ("total", "carbon", "stormwater", "air_quality", "energy")
    }

    return {
        'total_trees': len(df),
        'total_biomass': total("carbon.biomass"),
        'total_carbon': total("carbon.carbon_stored"),
        'total_co2': total("carbon.co2_sequestered"),
        'total_stormwater': total("ecosystem_services.stormwater_intercepted_liters"),
        'total_pollution': total("ecosystem_services.air_pollution_removed_grams"),
        'total_energy': total("ecosystem_services.energy_savings_idr"),
        'monetary': monetary,
        'species_counts': {k: int(v) for k, v in df['species'].value_counts().items()} if 'species' in df.columns else {},
        'condition_counts': {k: int(v) for k, v in df['condition'].value_counts().items()} if 'condition' in df.columns else {},
    }
