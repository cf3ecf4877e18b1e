import pandas as pd
import plotly.express as px
import streamlit as st

CONDITION_COLORS = {"Healthy": "#1D7749", "Damaged": "#f59e0b", "Dead": "#6b7280"}


def trees_to_map_frame(trees):
    """Flatten tree records into the columns shown on the map."""
    rows = [
        {
            "species": t.get("species", "Unknown"),
            "condition": t.get("condition"),
            "latitude": t.get("latitude"),
            "longitude": t.get("longitude"),
            "dbh_cm": t.get("dbh"),
            "height_m": t.get("height"),
            "co2_kg": t["carbon"]["co2_sequestered"],
            "value_idr": t["ecosystem_services"]["annual_monetary_value"]["total"],
        }
        for t in trees
    ]
    df = pd.DataFrame(rows, columns=[
        "species", "condition", "latitude", "longitude", "dbh_cm", "height_m", "co2_kg", "value_idr",
    ])
    return df.dropna(subset=["latitude", "longitude"])


def map_section(trees):
    st.header("🗺️ Map View")
    map_df = trees_to_map_frame(trees)
    if map_df.empty:
        st.info("No tree location data available yet.")
        return

    fig = px.scatter_mapbox(
        map_df,
        lat="latitude",
        lon="longitude",
        color="condition",
        color_discrete_map=CONDITION_COLORS,
        hover_name="species",
        hover_data={"dbh_cm": True, "height_m": True, "co2_kg": ":.2f", "value_idr": ":,.0f",
                    "latitude": False, "longitude": False},
        zoom=14, height=600,
    )
    fig.update_layout(mapbox_style="open-street-map", margin={"r": 0, "t": 0, "l": 0, "b": 0})
    st.plotly_chart(fig, use_container_width=True)
    st.caption(f"{len(map_df)} of {len(trees)} trees have coordinates.")
