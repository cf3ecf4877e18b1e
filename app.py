# app.py - JagaPohon tree & carbon inventory

import logging

import streamlit as st

from auth import is_authenticated, login_ui, logout
from dashboard import dashboard_section
from inventory_store import load_trees
from map_view import map_section
from pdf_report import REPORT_STATE_KEY, clear_report, prepare_report
from tree_form import add_tree_section

st.set_page_config(page_title="Tree & Carbon Inventory", page_icon="🌳", layout="wide")

# ---------------------- LOGGER -----------------------
logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger("jagapohon")

PAGES = ["Add Tree", "Map View", "Dashboard"]
PAGE_ICONS = {"Add Tree": "📷", "Map View": "🗺️", "Dashboard": "📊"}


# ---------------------- SESSION STATE ----------------------
def initialize_session_state():
    defaults = {
        'page': 'Add Tree',
        'error': None,
        'bulk_progress': None,
        'device_location': None,
        REPORT_STATE_KEY: None,
    }
    for k, v in defaults.items():
        if k not in st.session_state:
            st.session_state[k] = v


def get_trees():
    """The inventory lives in the session once loaded from storage."""
    if "trees" not in st.session_state:
        st.session_state.trees = load_trees()
    return st.session_state.trees


# ---------------------- STYLES ----------------------
def set_custom_css():
    st.markdown("""
    <style>
      :root {
        --primary: #1D7749;
        --primary-light: #28a745;
      }
      .block-container {
          padding-top: 1rem;
          padding-bottom: 2rem;
      }
      .app-header {
          color: var(--primary);
          font-weight: 800;
          font-size: 1.8rem;
          border-bottom: 3px solid var(--primary-light);
          padding-bottom: 5px;
          margin-bottom: 1rem;
      }
      .stButton>button {
          border-radius: 8px;
      }
    </style>
    """, unsafe_allow_html=True)


# ---------------------- HEADER ----------------------
def show_header(trees):
    title_col, report_col, logout_col = st.columns([6, 2, 1])
    with title_col:
        st.markdown("<div class='app-header'>🌳 Tree & Carbon Inventory</div>", unsafe_allow_html=True)

    with report_col:
        if st.session_state.get(REPORT_STATE_KEY):
            st.download_button(
                "📥 Download Report",
                data=st.session_state[REPORT_STATE_KEY],
                file_name="tree_inventory_report.pdf",
                mime="application/pdf",
                on_click=clear_report,
                args=(st.session_state,),
                use_container_width=True,
            )
        elif trees:
            st.button(
                "📄 Prepare Report", on_click=prepare_report, args=(st.session_state, trees),
                use_container_width=True,
            )

    with logout_col:
        if st.button("🚪 Logout", use_container_width=True):
            logout(st.session_state)
            clear_report(st.session_state)
            st.session_state.page = "Add Tree"
            st.rerun()


def show_error_banner():
    if st.session_state.error:
        st.error(f"**Error**\n\n{st.session_state.error}")
        if st.button("Dismiss", key="dismiss_error"):
            st.session_state.error = None
            st.rerun()


# ---------------------- SIDEBAR ----------------------
def show_sidebar():
    with st.sidebar:
        st.markdown("<h3 style='color:#1D7749;'>🌳 Tree Inventory</h3>", unsafe_allow_html=True)
        st.markdown("---")
        try:
            idx = PAGES.index(st.session_state.page)
        except ValueError:
            idx = 0
        st.session_state.page = st.radio(
            "Navigate to:", PAGES, index=idx, format_func=lambda p: f"{PAGE_ICONS[p]} {p}"
        )


# ---------------------- APP ENTRY ----------------------
def main():
    initialize_session_state()
    set_custom_css()

    if not is_authenticated(st.session_state):
        login_ui()
        return

    trees = get_trees()
    show_sidebar()
    show_header(trees)
    show_error_banner()

    current_page = st.session_state.page
    if current_page == "Add Tree":
        add_tree_section(trees)
    elif current_page == "Map View":
        map_section(trees)
    elif current_page == "Dashboard":
        dashboard_section(trees)

    st.markdown("---")
    st.markdown(
        "<div style='text-align:center;color:gray;font-size:0.9rem;'>"
        "<strong>JagaPohon</strong> | Every tree counts 🌱</div>",
        unsafe_allow_html=True,
    )


if __name__ == "__main__":
    main()
