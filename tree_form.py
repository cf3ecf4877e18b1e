# tree_form.py - single tree entry, AI prefill and bulk photo upload

import logging
from datetime import datetime, timezone

import streamlit as st

from bulk_import import run_bulk_import
from carbon_calculator import CONDITIONS, HEALTHY
from ecosystem_services import PROXIMITY_OPTIONS
from gemini_service import analyze_tree_image, is_unknown_species
from geolocation import request_browser_location, make_session_locator, LOCATION_STATE_KEY
from image_utils import compress_image, data_url_to_base64
from inventory_store import add_tree

logger = logging.getLogger(__name__)

FORM_DEFAULTS = {
    "form_species": "",
    "form_dbh": 0.0,
    "form_height": 0.0,
    "form_condition": HEALTHY,
    "form_proximity": "None",
    "form_notes": "",
    "form_latitude": 0.0,
    "form_longitude": 0.0,
}


def validate_measurements(species, dbh, height):
    """Return a list of problems with the entered values (empty when valid)."""
    errors = []
    if not species or not species.strip():
        errors.append("Species is required.")
    if not dbh or dbh <= 0:
        errors.append("DBH must be greater than 0 cm.")
    if not height or height <= 0:
        errors.append("Height must be greater than 0 m.")
    return errors


def _init_form_state():
    if st.session_state.pop("reset_tree_form", False):
        for k in list(FORM_DEFAULTS) + ["form_photo_upload", "form_photo_camera"]:
            st.session_state.pop(k, None)
    for k, v in FORM_DEFAULTS.items():
        st.session_state.setdefault(k, v)


def _current_photo():
    return st.session_state.get("form_photo_camera") or st.session_state.get("form_photo_upload")


def _analyze_photo():
    """Button callback: prefill the form from the AI analysis of the photo."""
    st.session_state.error = None
    photo = _current_photo()
    if photo is None:
        st.session_state.error = "Take or upload a photo before running the AI analysis."
        return

    try:
        compressed = compress_image(photo.getvalue())
        result = analyze_tree_image(data_url_to_base64(compressed), st.session_state.get("form_notes", ""))
    except Exception as e:
        logger.error("Image analysis failed: %s", e, exc_info=True)
        st.session_state.error = "Failed to analyze the image with AI. Please check your API key and try again."
        return

    if not is_unknown_species(result["species"]):
        st.session_state.form_species = result["species"]
    st.session_state.form_condition = result["condition"]
    if result["estimated_dbh"]:
        st.session_state.form_dbh = float(result["estimated_dbh"])
    if result["estimated_height"]:
        st.session_state.form_height = float(result["estimated_height"])
    if result["latitude"] and result["longitude"]:
        st.session_state.form_latitude = float(result["latitude"])
        st.session_state.form_longitude = float(result["longitude"])


def _location_block(key):
    """Render the location request; stores the answer in the session once available."""
    if st.button("📍 Use My Location", key=f"{key}_btn"):
        st.session_state[f"{key}_pending"] = True

    if st.session_state.get(f"{key}_pending"):
        location = request_browser_location(key)
        if location:
            st.session_state[LOCATION_STATE_KEY] = location
            st.session_state[f"{key}_pending"] = False
            return location
        st.info("⏳ Waiting for the browser location... allow location access if prompted.")
    return None


def single_tree_form(trees):
    _init_form_state()

    col1, col2 = st.columns(2)
    with col1:
        st.camera_input("Take a photo", key="form_photo_camera")
    with col2:
        st.file_uploader("...or upload a photo", type=["jpg", "jpeg", "png", "webp"], key="form_photo_upload")

    st.text_area("Notes", key="form_notes", help="Notes are also passed to the AI analysis.")
    st.button("🔍 Analyze Photo with AI", on_click=_analyze_photo, disabled=_current_photo() is None)

    location = _location_block("form_geo")
    if location:
        st.session_state.form_latitude, st.session_state.form_longitude = location

    with st.form("tree_form"):
        st.text_input("Species", key="form_species")
        c1, c2 = st.columns(2)
        with c1:
            st.number_input("Diameter at Breast Height (cm)", min_value=0.0, step=0.1, key="form_dbh")
            st.selectbox("Condition", CONDITIONS, key="form_condition")
            st.number_input("Latitude", format="%.6f", key="form_latitude")
        with c2:
            st.number_input("Tree Height (m)", min_value=0.0, step=0.1, key="form_height")
            st.selectbox("Proximity to Building", PROXIMITY_OPTIONS, key="form_proximity")
            st.number_input("Longitude", format="%.6f", key="form_longitude")
        submitted = st.form_submit_button("💾 Save Tree")

    if not submitted:
        return

    errors = validate_measurements(
        st.session_state.form_species, st.session_state.form_dbh, st.session_state.form_height
    )
    if errors:
        for message in errors:
            st.error(message)
        return

    photo = _current_photo()
    try:
        photo_url = compress_image(photo.getvalue()) if photo is not None else ""
    except ValueError as e:
        st.error(f"Could not read the photo: {e}")
        return

    add_tree(trees, {
        "species": st.session_state.form_species.strip(),
        "dbh": st.session_state.form_dbh,
        "height": st.session_state.form_height,
        "condition": st.session_state.form_condition,
        "proximity_to_building": st.session_state.form_proximity,
        "notes": st.session_state.form_notes,
        "photo": photo_url,
        "latitude": st.session_state.form_latitude,
        "longitude": st.session_state.form_longitude,
        "inventory_date": datetime.now(timezone.utc).isoformat(),
    })
    st.session_state.reset_tree_form = True
    st.session_state.page = "Dashboard"
    st.rerun()


def show_bulk_progress(progress):
    finished = progress["processed"] == progress["total"]
    if finished:
        st.success("Processing complete")
    else:
        st.write(f"Processing {progress['processed']} of {progress['total']} images...")
    st.markdown(f"**Succeeded:** {progress['successes']}  \n**Failed:** {len(progress['failures'])}")
    if progress["failures"]:
        with st.expander("Failure details", expanded=True):
            for fail in progress["failures"]:
                st.markdown(f"- **{fail['file_name']}:** {fail['error']}")


def bulk_upload_section(trees):
    st.write("Upload several tree photos. Each one is analyzed by AI and added to the inventory.")
    st.caption("Your device location is used for photos where the AI finds no GPS data.")

    location = st.session_state.get(LOCATION_STATE_KEY) or _location_block("bulk_geo")
    if location:
        st.success(f"📍 Device location: {location[0]:.5f}, {location[1]:.5f}")

    files = st.file_uploader(
        "Tree photos", type=["jpg", "jpeg", "png", "webp"], accept_multiple_files=True, key="bulk_files"
    )

    if st.button("🚀 Start Processing", disabled=not files):
        bar = st.progress(0.0)
        status = st.empty()

        def on_progress(progress):
            bar.progress(progress["processed"] / progress["total"])
            status.write(f"Processing {progress['processed']} of {progress['total']} images...")

        st.session_state.bulk_progress = run_bulk_import(
            files, trees, analyze_tree_image, make_session_locator(st.session_state), on_progress=on_progress
        )
        status.empty()

    progress = st.session_state.get("bulk_progress")
    if progress:
        show_bulk_progress(progress)
        if progress["processed"] == progress["total"] and st.button("Close"):
            st.session_state.bulk_progress = None
            st.rerun()


def add_tree_section(trees):
    st.header("📷 Add a Tree")
    single_tab, bulk_tab = st.tabs(["Single Tree", "Bulk Upload"])
    with single_tab:
        single_tree_form(trees)
    with bulk_tab:
        bulk_upload_section(trees)
