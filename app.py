"""
Streamlit Community Cloud entrypoint.
Builds the normalized paresthesia table from the REDCap exports and runs the viewer.
"""
from pathlib import Path

import streamlit as st

from paresthesia import pipeline


@st.cache_data(show_spinner=False)
def load_table(records_path: str, devices_path: str):
    return pipeline.build_normalized_table(records_path, devices_path)


def ensure_exports():
    missing = [p for p in (pipeline.RECORDS_FILE, pipeline.DEVICES_FILE) if not Path(p).exists()]
    if missing:
        st.error(
            f"{', '.join(missing)} not found. "
            "Export the paresthesia and device instruments from REDCap as CSV first."
        )
        st.stop()


ensure_exports()

try:
    table, diagnostics = load_table(pipeline.RECORDS_FILE, pipeline.DEVICES_FILE)
except ValueError as exc:
    st.error(f"Failed to build the paresthesia table: {exc}")
    st.stop()

from paresthesia.viewer import main

main(table, diagnostics)
