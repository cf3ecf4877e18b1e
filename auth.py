# auth.py - shared-password gate for the inventory

import hmac
import logging

import streamlit as st

from config import get_secret, DEFAULT_ADMIN_PASSWORD, SESSION_AUTH_KEY

logger = logging.getLogger(__name__)


def get_admin_password():
    return get_secret("ADMIN_PASSWORD", DEFAULT_ADMIN_PASSWORD)


def is_authenticated(session_state):
    return session_state.get(SESSION_AUTH_KEY) is True


def login(session_state, password):
    """Set the session flag only when `password` matches the shared password."""
    expected = str(get_admin_password()).encode("utf-8")
    if not password or not hmac.compare_digest(str(password).encode("utf-8"), expected):
        logger.info("Rejected login attempt")
        return False
    session_state[SESSION_AUTH_KEY] = True
    logger.info("User logged in")
    return True


def logout(session_state):
    session_state.pop(SESSION_AUTH_KEY, None)
    logger.info("User logged out")


def login_ui():
    st.markdown("<div style='max-width:500px;margin:0 auto;padding:2rem;'>", unsafe_allow_html=True)
    st.header("🌳 Tree & Carbon Inventory")
    st.write("Enter the team password to continue.")

    with st.form("login_form"):
        password = st.text_input("Password", type="password", key="login_password")
        login_button = st.form_submit_button("Log In")

    if login_button:
        if not password:
            st.error("Please enter the password.")
            return
        if login(st.session_state, password):
            st.success("✅ Login successful!")
            st.rerun()
        else:
            st.error("Incorrect password.")
