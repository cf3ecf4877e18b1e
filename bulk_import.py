# bulk_import.py - sequential ingestion of many tree photos

import logging
from datetime import datetime, timezone

from config import SQLITE_DB
from gemini_service import is_unknown_species
from image_utils import compress_image, data_url_to_base64
from inventory_store import add_tree

logger = logging.getLogger(__name__)

BULK_NOTE = "Added through bulk upload."
UNKNOWN_ERROR = "An unknown error occurred."


class BulkImportError(Exception):
    """A single photo could not be turned into a tree record."""


def new_progress(total):
    return {"total": total, "processed": 0, "successes": 0, "failures": []}


def build_tree_from_photo(file, analyze, locate):
    """Run one photo through compression, AI analysis and location fallback."""
    photo = compress_image(file.getvalue())
    result = analyze(data_url_to_base64(photo), "")

    if not result or is_unknown_species(result.get("species")):
        raise BulkImportError("AI could not identify the tree.")
    if not result.get("estimated_dbh") or not result.get("estimated_height"):
        raise BulkImportError("AI could not estimate the tree dimensions.")

    latitude, longitude = result.get("latitude"), result.get("longitude")
    if not latitude or not longitude:
        try:
            latitude, longitude = locate()
        except Exception as e:
            raise BulkImportError("AI found no GPS data and location access was denied.") from e

    return {
        "species": result["species"],
        "dbh": result["estimated_dbh"],
        "height": result["estimated_height"],
        "condition": result["condition"],
        "proximity_to_building": "None",
        "notes": BULK_NOTE,
        "photo": photo,
        "latitude": latitude,
        "longitude": longitude,
        "inventory_date": datetime.now(timezone.utc).isoformat(),
    }


def run_bulk_import(files, trees, analyze, locate, on_progress=None, db_path=SQLITE_DB):
    """
    Import `files` one at a time. A failing file is recorded in the
    progress failures and never stops the remaining files.

    Args:
        files: objects with `name` and `getvalue()` (Streamlit uploads).
        trees (list): the inventory; successful records are prepended.
        analyze: callable(base64_image, notes) -> analysis result dict.
        locate: callable() -> (latitude, longitude), raises when unavailable.
        on_progress: optional callable receiving the progress dict after each file.

    Returns:
        dict: total, processed, successes and failures ({file_name, error}).
    """
    progress = new_progress(len(files))

    for file in files:
        try:
            tree_data = build_tree_from_photo(file, analyze, locate)
            add_tree(trees, tree_data, db_path)
            progress["successes"] += 1
        except Exception as e:
            logger.warning(f"Bulk import failed for {file.name}: {e}")
            progress["failures"].append({"file_name": file.name, "error": str(e) or UNKNOWN_ERROR})
        finally:
            progress["processed"] += 1
            if on_progress:
                on_progress(progress)

    logger.info(
        f"Bulk import finished: {progress['successes']} of {progress['total']} succeeded"
    )
    return progress
