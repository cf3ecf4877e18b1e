import json

import pytest

from config import STORAGE_KEY
from ecosystem_services import estimate_tree
from inventory_store import (
    add_tree, get_db_connection, get_inventory_metrics, load_trees, next_tree_id,
    save_trees, update_tree,
)
from seed_data import initial_trees


def _store_raw(db_path, value):
    conn = get_db_connection(db_path)
    conn.execute("INSERT OR REPLACE INTO kv_store (key, value) VALUES (?, ?)", (STORAGE_KEY, value))
    conn.commit()
    conn.close()


def _read_raw(db_path):
    conn = get_db_connection(db_path)
    row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (STORAGE_KEY,)).fetchone()
    conn.close()
    return row


def test_missing_data_falls_back_to_seed(db_path):
    trees = load_trees(db_path)

    assert trees == initial_trees()
    assert [t["id"] for t in trees] == [1, 2, 3]
    assert trees[0]["dbh"] == 60 and trees[0]["height"] == 25


@pytest.mark.parametrize("raw", [
    "{not json",
    json.dumps({"trees": []}),
    json.dumps([{"id": 1, "species": "Oak"}]),
    json.dumps(["just a string"]),
])
def test_malformed_data_is_discarded(db_path, raw):
    _store_raw(db_path, raw)

    assert load_trees(db_path) == initial_trees()
    assert _read_raw(db_path) is None


def test_round_trip_preserves_sequence(db_path, tree_data):
    trees = initial_trees()
    add_tree(trees, tree_data, db_path)
    add_tree(trees, {**tree_data, "species": "Banyan", "dbh": 80.0}, db_path)

    assert load_trees(db_path) == trees


def test_empty_collection_round_trips(db_path):
    assert save_trees([], db_path)
    assert load_trees(db_path) == []


def test_save_failure_is_reported_not_raised(db_path):
    assert save_trees([{"id": 1, "photo": object()}], db_path) is False


def test_add_tree_prepends_with_derived_metrics(db_path, tree_data):
    trees = initial_trees()

    new_tree = add_tree(trees, tree_data, db_path)

    assert trees[0] is new_tree
    assert len(trees) == 4
    assert new_tree["id"] not in {1, 2, 3}
    carbon, services = estimate_tree(35.0, 18.0, "Healthy", "Near")
    assert new_tree["carbon"] == carbon
    assert new_tree["ecosystem_services"] == services
    assert json.loads(_read_raw(db_path)[0])[0]["id"] == new_tree["id"]


def test_add_tree_ignores_supplied_derived_fields(db_path, tree_data):
    trees = []
    new_tree = add_tree(trees, {**tree_data, "carbon": {"biomass": -1}}, db_path)

    assert new_tree["carbon"]["biomass"] > 0


def test_ids_stay_unique_for_quick_additions(db_path, tree_data):
    trees = []
    for _ in range(5):
        add_tree(trees, tree_data, db_path)

    assert len({t["id"] for t in trees}) == 5


def test_next_tree_id_bumps_on_collision(monkeypatch):
    monkeypatch.setattr("inventory_store.time.time", lambda: 1700000000.0)
    trees = [{"id": 1700000000000}, {"id": 1700000000005}]

    assert next_tree_id(trees) == 1700000000006
    assert next_tree_id([]) == 1700000000000


def test_update_recomputes_in_place(db_path):
    trees = initial_trees()
    edited = {**trees[1], "dbh": 90, "condition": "Damaged", "carbon": trees[1]["carbon"]}

    result = update_tree(trees, edited, db_path)

    assert trees[1] is result
    assert [t["id"] for t in trees] == [1, 2, 3]
    carbon, services = estimate_tree(90, 30, "Damaged", "Far")
    assert result["carbon"] == carbon
    assert result["ecosystem_services"] == services
    assert load_trees(db_path) == trees


def test_update_with_unchanged_measurements_keeps_metrics(db_path):
    trees = initial_trees()
    before = dict(trees[0])

    update_tree(trees, {**trees[0], "notes": "Pruned."}, db_path)

    assert trees[0]["carbon"] == before["carbon"]
    assert trees[0]["ecosystem_services"] == before["ecosystem_services"]
    assert trees[0]["notes"] == "Pruned."


def test_update_unknown_id_changes_nothing(db_path):
    trees = initial_trees()

    assert update_tree(trees, {**trees[0], "id": 999}, db_path) is None
    assert trees == initial_trees()
    assert _read_raw(db_path) is None


def test_inventory_metrics_totals():
    trees = initial_trees()

    metrics = get_inventory_metrics(trees)

    assert metrics["total_trees"] == 3
    assert metrics["total_co2"] == pytest.approx(sum(t["carbon"]["co2_sequestered"] for t in trees), abs=0.01)
    assert metrics["monetary"]["total"] == pytest.approx(
        sum(t["ecosystem_services"]["annual_monetary_value"]["total"] for t in trees), abs=0.01
    )
    assert metrics["species_counts"] == {"Teak (Jati)": 1, "Pine (Pinus)": 1, "Maple (Mapel)": 1}
    assert metrics["condition_counts"] == {"Healthy": 2, "Damaged": 1}


def test_inventory_metrics_empty():
    metrics = get_inventory_metrics([])

    assert metrics["total_trees"] == 0
    assert metrics["monetary"]["total"] == 0.0
    assert metrics["species_counts"] == {}


def test_out_of_range_record_loads_with_zero_metrics(db_path):
    _store_raw(db_path, json.dumps([
        {"id": 1, "species": "Giant", "dbh": 1e200, "height": 25, "condition": "Healthy"},
        {"id": 2, "species": "Broken", "dbh": 30, "height": 10 ** 400, "condition": "Dead"},
    ]))

    trees = load_trees(db_path)

    assert [t["id"] for t in trees] == [1, 2]
    assert all(t["carbon"]["co2_sequestered"] == 0.0 for t in trees)
    assert all(t["ecosystem_services"]["annual_monetary_value"]["total"] == 0.0 for t in trees)


def test_add_tree_with_out_of_range_dbh(db_path, tree_data):
    trees = []

    new_tree = add_tree(trees, {**tree_data, "dbh": 1e200}, db_path)

    assert new_tree["carbon"]["biomass"] == 0.0
    assert load_trees(db_path) == trees


def test_indonesian_condition_labels_are_normalized_on_load(db_path):
    _store_raw(db_path, json.dumps([
        {"id": 1, "species": "Teak", "dbh": 40, "height": 20, "condition": "Sehat"},
        {"id": 2, "species": "Teak", "dbh": 40, "height": 20, "condition": "Healthy"},
        {"id": 3, "species": "Pine", "dbh": 30, "height": 15, "condition": "mati"},
    ]))

    trees = load_trees(db_path)

    assert [t["condition"] for t in trees] == ["Healthy", "Healthy", "Dead"]
    assert trees[0]["carbon"] == trees[1]["carbon"]
    assert get_inventory_metrics(trees)["condition_counts"] == {"Healthy": 2, "Dead": 1}


def test_update_normalizes_condition(db_path):
    trees = initial_trees()

    result = update_tree(trees, {**trees[0], "condition": "Rusak"}, db_path)

    assert result["condition"] == "Damaged"
