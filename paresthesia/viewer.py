"""
Streamlit UI to browse paresthesia thresholds per subject and visit.
Run: streamlit run app.py
"""
from __future__ import annotations

from typing import List, Optional

import pandas as pd
import plotly.graph_objects as go
import streamlit as st
from plotly.colors import qualitative

from paresthesia.loader import LoadDiagnostics
from paresthesia.reports import (
    amplitude_frequency,
    body_part_frequency,
    body_part_label,
    combined_setting_frequency,
    describe_numeric,
    face_and_upper_extremity_cohort,
    laterality_frequency,
    stimulation_type_frequency,
)
from paresthesia.settings import unmapped_settings
from paresthesia.vocabulary import (
    COMBINED_SETTING_ORDER,
    PARESTHESIA_SHAPES,
    SEVERITY_COLORS,
    SEVERITY_RANGE,
)

GRID_KEYS = ["study_id", "visit", "combined_setting", "device"]
COLOR_CHANNELS = {"severity": "Severity", "body_part": "Body part"}
MISSING_COLOR = "#B0B0B0"
AMPLITUDE_RANGE = [0, 5]


def subject_visits(table: pd.DataFrame, study_id: str) -> List[str]:
    visits = table.loc[table["study_id"] == study_id, "visit"].dropna()
    return list(dict.fromkeys(visits))


def selection_frame(
    table: pd.DataFrame,
    study_id: str,
    visit: str,
    buckets: List[str] = COMBINED_SETTING_ORDER,
) -> pd.DataFrame:
    """
    Records for one subject and visit, left-joined onto every
    (combined setting x device) combination so untested settings still
    show up. Grid rows with no record have placeholder=True.
    """
    selected = table[(table["study_id"] == study_id) & (table["visit"] == visit)]
    selected = selected.sort_values("order_type", kind="stable")
    subject_devices = table.loc[table["study_id"] == study_id, "device"]
    devices = sorted(subject_devices.dropna().unique()) or [None]

    grid = pd.MultiIndex.from_product(
        [[study_id], [visit], list(buckets), devices], names=GRID_KEYS
    ).to_frame(index=False)
    grid["device"] = grid["device"].astype(object)
    records = selected.astype({"device": object})

    frame = grid.merge(records, on=GRID_KEYS, how="left", indicator=True)
    frame["placeholder"] = frame.pop("_merge") == "left_only"
    frame = frame.sort_values(["placeholder", "order_type"], kind="stable", na_position="last")
    frame["combined_setting"] = pd.Categorical(
        frame["combined_setting"], categories=list(buckets), ordered=True
    )
    return frame.reset_index(drop=True)


def marker_symbol(para_type) -> str:
    return PARESTHESIA_SHAPES.get(para_type, "diamond")


def severity_traces(tested: pd.DataFrame) -> List[go.Scatter]:
    traces = []
    show_scale = True
    for para_type, subset in tested.groupby("para_type", sort=False, dropna=False):
        label = para_type if isinstance(para_type, str) else "Unknown"
        scored = subset[subset["severity"].notna()]
        unscored = subset[subset["severity"].isna()]
        if not scored.empty:
            severity = scored["severity"].astype(float)
            traces.append(
                go.Scatter(
                    x=scored["combined_setting"].astype(str),
                    y=scored["amplitude"],
                    mode="markers+text",
                    name=label,
                    legendgroup=label,
                    text=scored["severity"].astype("Int64").astype(str),
                    textposition="middle right",
                    marker=dict(
                        symbol=marker_symbol(para_type),
                        size=12,
                        color=severity,
                        colorscale=[[0, SEVERITY_COLORS[0]], [1, SEVERITY_COLORS[1]]],
                        cmin=SEVERITY_RANGE[0],
                        cmax=SEVERITY_RANGE[1],
                        showscale=show_scale,
                        colorbar=dict(title="Severity"),
                    ),
                )
            )
            show_scale = False
        if not unscored.empty:
            traces.append(
                go.Scatter(
                    x=unscored["combined_setting"].astype(str),
                    y=unscored["amplitude"],
                    mode="markers",
                    name=f"{label} (no severity)",
                    legendgroup=label,
                    marker=dict(symbol=marker_symbol(para_type), size=12, color=MISSING_COLOR),
                )
            )
    return traces


def body_part_traces(tested: pd.DataFrame) -> List[go.Scatter]:
    traces = []
    labels = tested["body_part"].map(lambda p: body_part_label(p) or "none reported")
    palette = qualitative.Plotly
    colors = {label: palette[i % len(palette)] for i, label in enumerate(sorted(labels.unique()))}
    for (label, para_type), subset in tested.assign(part=labels).groupby(["part", "para_type"], dropna=False):
        type_label = para_type if isinstance(para_type, str) else "Unknown"
        traces.append(
            go.Scatter(
                x=subset["combined_setting"].astype(str),
                y=subset["amplitude"],
                mode="markers",
                name=f"{label} ({type_label})",
                legendgroup=label,
                marker=dict(symbol=marker_symbol(para_type), size=12, color=colors[label]),
            )
        )
    return traces


def build_figure(
    frame: pd.DataFrame,
    study_id: str,
    visit: str,
    color_by: str = "severity",
    buckets: List[str] = COMBINED_SETTING_ORDER,
) -> go.Figure:
    if color_by not in COLOR_CHANNELS:
        raise ValueError(f"color_by must be one of {list(COLOR_CHANNELS)}")

    fig = go.Figure()
    tested = frame[~frame["placeholder"]]
    placeholders = frame[frame["placeholder"]].drop_duplicates("combined_setting")
    placeholders = placeholders[~placeholders["combined_setting"].isin(tested["combined_setting"])]
    if not placeholders.empty:
        fig.add_trace(
            go.Scatter(
                x=placeholders["combined_setting"].astype(str),
                y=[0] * len(placeholders),
                mode="markers",
                name="Not tested",
                marker=dict(symbol="circle-open", size=10, color=MISSING_COLOR),
                hoverinfo="x",
            )
        )

    if not tested.empty:
        traces = severity_traces(tested) if color_by == "severity" else body_part_traces(tested)
        for trace in traces:
            fig.add_trace(trace)

    fig.update_layout(
        title=f"Paresthesia thresholds for subject {study_id} during {visit}",
        xaxis=dict(
            title="Settings (Ordered by type)",
            type="category",
            categoryorder="array",
            categoryarray=list(buckets),
        ),
        yaxis=dict(title="mA (amplitude)", range=AMPLITUDE_RANGE),
        legend_title_text=f"Paresthesia type / {COLOR_CHANNELS[color_by]}",
        template="plotly_white",
        margin=dict(t=60, l=10, r=10, b=10),
        height=600,
    )
    if color_by == "severity":
        fig.add_annotation(
            text="Note: Gray points without values indicate missing severity data",
            xref="paper",
            yref="paper",
            x=1,
            y=1.05,
            showarrow=False,
            font=dict(size=11),
        )
    return fig


def display_table(table: pd.DataFrame) -> pd.DataFrame:
    return table.assign(body_part=table["body_part"].map(body_part_label))


def main(table: pd.DataFrame, diagnostics: Optional[LoadDiagnostics] = None):
    st.set_page_config(layout="wide", page_title="Paresthesia Threshold Browser")
    st.title("Paresthesia Threshold Browser")

    if table.empty:
        st.info("No paresthesia records found in the exports.")
        return

    st.sidebar.header("Selection")
    subjects = sorted(table["study_id"].dropna().unique())
    subject = st.sidebar.selectbox("Choose a Subject:", subjects)
    visits = subject_visits(table, subject)
    visit = st.sidebar.selectbox("Choose a Visit:", visits)
    color_by = st.sidebar.radio(
        "Color points by",
        options=list(COLOR_CHANNELS),
        format_func=COLOR_CHANNELS.get,
    )

    tab_viewer, tab_reports, tab_review = st.tabs(["Viewer", "Reports", "Review"])

    with tab_viewer:
        if visit is None:
            st.info("No visits recorded for this subject.")
        else:
            frame = selection_frame(table, subject, visit)
            st.plotly_chart(build_figure(frame, subject, visit, color_by=color_by), use_container_width=True)
            with st.expander("Records", expanded=False):
                tested = frame[~frame["placeholder"]].drop(columns="placeholder")
                st.dataframe(display_table(tested), use_container_width=True, hide_index=True)

    with tab_reports:
        st.subheader("Summary statistics")
        st.dataframe(describe_numeric(table), use_container_width=True)
        col1, col2 = st.columns(2)
        with col1:
            st.subheader("Body part frequency")
            st.caption("A record reporting several body parts counts once per body part.")
            st.dataframe(body_part_frequency(table), use_container_width=True, hide_index=True)
            st.subheader("Laterality")
            st.dataframe(laterality_frequency(table), use_container_width=True, hide_index=True)
        with col2:
            st.subheader("Amplitude frequency")
            st.dataframe(amplitude_frequency(table), use_container_width=True, hide_index=True)
            st.subheader("Stimulation type")
            st.dataframe(stimulation_type_frequency(table), use_container_width=True, hide_index=True)
        st.subheader("Combined setting")
        st.dataframe(combined_setting_frequency(table), use_container_width=True, hide_index=True)
        st.subheader("Unipolar face + upper extremity")
        min_count = st.number_input("Minimum occurrences", min_value=1, value=5)
        cohort = face_and_upper_extremity_cohort(table, min_count=int(min_count))
        if cohort.empty:
            st.info("No body-part combination reaches the minimum count.")
        else:
            st.dataframe(cohort, use_container_width=True, hide_index=True)

    with tab_review:
        st.subheader("Settings without a combined setting")
        st.caption("Excluded, unknown or device-less settings. These rows are left out of the chart.")
        review = unmapped_settings(table)
        if review.empty:
            st.info("Every settings entry maps to a combined setting.")
        else:
            st.dataframe(review, use_container_width=True, hide_index=True)
        if diagnostics is not None:
            st.subheader("Load diagnostics")
            for line in diagnostics.lines():
                st.markdown(f"- {line}")
