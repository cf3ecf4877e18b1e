from pdf_report import REPORT_ERROR, REPORT_STATE_KEY, clear_report, generate_pdf_report, prepare_report
from seed_data import initial_trees
from inventory_store import with_derived_metrics


def test_report_for_seed_inventory():
    pdf = generate_pdf_report(initial_trees())

    assert pdf.startswith(b"%PDF")
    assert len(pdf) > 1000


def test_report_for_empty_inventory():
    assert generate_pdf_report([]).startswith(b"%PDF")


def test_report_escapes_markup_in_species():
    tree = with_derived_metrics({
        "id": 1, "species": "Oak <b> & Ash", "dbh": 20, "height": 8, "condition": "Dead",
    })

    assert generate_pdf_report([tree]).startswith(b"%PDF")


def test_report_without_species_names():
    trees = [
        with_derived_metrics({"id": 1, "dbh": 20, "height": 8, "condition": "Healthy"}),
        with_derived_metrics({"id": 2, "dbh": 35, "height": 12, "condition": "Damaged"}),
    ]

    assert generate_pdf_report(trees).startswith(b"%PDF")


def test_prepare_report_stores_pdf_until_cleared():
    session = {"error": None}

    prepare_report(session, initial_trees())

    assert session[REPORT_STATE_KEY].startswith(b"%PDF")
    assert session["error"] is None

    clear_report(session)
    assert session[REPORT_STATE_KEY] is None


def test_prepare_report_failure_sets_error_once(monkeypatch):
    calls = []

    def fail(trees):
        calls.append(trees)
        raise RuntimeError("disk full")

    monkeypatch.setattr("pdf_report.generate_pdf_report", fail)
    session = {"error": None, REPORT_STATE_KEY: b"old"}

    prepare_report(session, initial_trees())

    assert session["error"] == REPORT_ERROR
    assert session[REPORT_STATE_KEY] is None
    assert len(calls) == 1
