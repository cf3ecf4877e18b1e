# dashboard.py - inventory totals, charts and tree editing

import pandas as pd
import plotly.express as px
import streamlit as st

from carbon_calculator import CONDITIONS, normalize_condition
from ecosystem_services import PROXIMITY_OPTIONS
from inventory_store import get_inventory_metrics, update_tree
from map_view import CONDITION_COLORS
from tree_form import validate_measurements

MONETARY_LABELS = {
    "carbon": "Carbon",
    "stormwater": "Stormwater",
    "air_quality": "Air Quality",
    "energy": "Energy",
}


@st.dialog("✏️ Edit Tree")
def edit_tree_dialog(tree, trees):
    with st.form(f"edit_tree_{tree['id']}"):
        species = st.text_input("Species", value=tree.get("species", ""))
        c1, c2 = st.columns(2)
        with c1:
            dbh = st.number_input("DBH (cm)", min_value=0.0, step=0.1, value=float(tree["dbh"]))
            condition = st.selectbox(
                "Condition", CONDITIONS, index=CONDITIONS.index(normalize_condition(tree["condition"]))
            )
        with c2:
            height = st.number_input("Height (m)", min_value=0.0, step=0.1, value=float(tree["height"]))
            proximity = tree.get("proximity_to_building", "None")
            proximity = st.selectbox(
                "Proximity to Building", PROXIMITY_OPTIONS,
                index=PROXIMITY_OPTIONS.index(proximity) if proximity in PROXIMITY_OPTIONS else 0,
            )
        notes = st.text_area("Notes", value=tree.get("notes", ""))
        save_col, cancel_col = st.columns(2)
        saved = save_col.form_submit_button("💾 Save", use_container_width=True)
        cancelled = cancel_col.form_submit_button("Cancel", use_container_width=True)

    if cancelled:
        st.rerun()
    if saved:
        errors = validate_measurements(species, dbh, height)
        if errors:
            for message in errors:
                st.error(message)
            return
        update_tree(trees, {
            **tree,
            "species": species.strip(),
            "dbh": dbh,
            "height": height,
            "condition": condition,
            "proximity_to_building": proximity,
            "notes": notes,
        })
        st.rerun()


def show_tree_card(tree, trees):
    services = tree["ecosystem_services"]
    title = f"🌳 {tree.get('species', 'Unknown')} | {tree['condition']} | {tree['dbh']:g} cm × {tree['height']:g} m"
    with st.expander(title):
        col1, col2 = st.columns([1, 2])
        with col1:
            if tree.get("photo"):
                st.image(tree["photo"], use_container_width=True)
            else:
                st.caption("No photo")
        with col2:
            st.markdown(f"**📅 Recorded:** {str(tree.get('inventory_date', ''))[:10]}")
            st.markdown(f"**📍 Location:** {tree.get('latitude')}, {tree.get('longitude')}")
            st.markdown(f"**🏠 Proximity to building:** {tree.get('proximity_to_building', 'None')}")
            st.markdown(f"**🌱 Biomass:** {tree['carbon']['biomass']:,.2f} kg")
            st.markdown(f"**🪵 Carbon stored:** {tree['carbon']['carbon_stored']:,.2f} kg")
            st.markdown(f"**💨 CO₂ sequestered:** {tree['carbon']['co2_sequestered']:,.2f} kg")
            st.markdown(f"**💧 Stormwater intercepted:** {services['stormwater_intercepted_liters']:,.2f} L/year")
            st.markdown(f"**🌬️ Air pollution removed:** {services['air_pollution_removed_grams']:,.2f} g/year")
            st.markdown(f"**💰 Annual value:** Rp {services['annual_monetary_value']['total']:,.0f}")
            if tree.get("notes"):
                st.markdown(f"**📝 Notes:** {tree['notes']}")
            if st.button("✏️ Edit", key=f"edit_{tree['id']}"):
                edit_tree_dialog(tree, trees)


def dashboard_section(trees):
    st.header("📊 Dashboard")
    metrics = get_inventory_metrics(trees)

    if not metrics["total_trees"]:
        st.info("No trees recorded yet. Add one from the 'Add Tree' page.")
        return

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("🌳 Trees Recorded", metrics["total_trees"])
    with col2:
        st.metric("💨 CO₂ Sequestered", f"{metrics['total_co2']:,.0f} kg")
    with col3:
        st.metric("💧 Stormwater", f"{metrics['total_stormwater']:,.0f} L/yr")
    with col4:
        st.metric("💰 Annual Value", f"Rp {metrics['monetary']['total']:,.0f}")

    chart_col1, chart_col2 = st.columns(2)
    with chart_col1:
        st.subheader("Species Distribution")
        species_df = pd.DataFrame(list(metrics["species_counts"].items()), columns=["Species", "Count"])
        fig = px.bar(species_df, x="Species", y="Count", color_discrete_sequence=[CONDITION_COLORS["Healthy"]])
        st.plotly_chart(fig, use_container_width=True)
    with chart_col2:
        st.subheader("Annual Monetary Value")
        value_df = pd.DataFrame(
            [(label, metrics["monetary"][key]) for key, label in MONETARY_LABELS.items()],
            columns=["Component", "IDR"],
        )
        if value_df["IDR"].sum() > 0:
            fig = px.pie(value_df, names="Component", values="IDR", hole=0.4)
            st.plotly_chart(fig, use_container_width=True)
        else:
            st.info("No monetary value to show.")

    st.subheader("Trees")
    for tree in trees:
        show_tree_card(tree, trees)
