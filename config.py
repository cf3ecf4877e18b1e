# config.py - settings shared by the JagaPohon modules

import os
import logging
from pathlib import Path

import streamlit as st

logger = logging.getLogger(__name__)

# ---------------------- PATHS ----------------------
BASE_DIR = Path(__file__).parent
DATA_DIR = BASE_DIR / "data"
SQLITE_DB = Path(os.getenv("TREE_DB_PATH", DATA_DIR / "trees.db"))

# Key under which the whole tree collection is stored
STORAGE_KEY = "treeInventoryData"
# Session flag marking a logged-in user
SESSION_AUTH_KEY = "isLoggedIn"

DEFAULT_ADMIN_PASSWORD = "jaga-pohon-admin"
DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"


def get_secret(name, default=None):
    """
    Read a setting from Streamlit secrets, then the environment, then `default`.
    """
    try:
        value = st.secrets.get(name)
        if value:
            return value
    except Exception as e:
        # No secrets.toml outside `streamlit run` or in CI
        logger.debug("Streamlit secrets unavailable for %s: %s", name, e)

    return os.getenv(name, default)
