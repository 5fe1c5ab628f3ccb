"""
Read-only summaries over the normalized paresthesia table.
"""
from __future__ import annotations

from typing import Iterable, List

import pandas as pd

from paresthesia.vocabulary import (
    BODY_PART_ORDER,
    COMBINED_SETTING_ORDER,
    FACE_GROUP,
    UPPER_EXTREMITY_GROUP,
)


def body_part_label(parts) -> str:
    return ", ".join(parts) if parts else ""


def describe_numeric(table: pd.DataFrame, columns: Iterable[str] = ("amplitude", "severity")) -> pd.DataFrame:
    numeric = pd.DataFrame(
        {c: pd.to_numeric(table[c], errors="coerce").astype(float) for c in columns}
    )
    return numeric.describe()


def frequency(values: pd.Series, name: str, order: List[str] | None = None) -> pd.DataFrame:
    counts = values.value_counts(dropna=False)
    if order is not None:
        counts = counts.reindex(order, fill_value=0)
    else:
        counts = counts.sort_index()
    counts.index.name = name
    return counts.rename("n").reset_index()


def amplitude_frequency(table: pd.DataFrame) -> pd.DataFrame:
    return frequency(table["amplitude"], "amplitude")


def body_part_frequency(table: pd.DataFrame) -> pd.DataFrame:
    """One count per category per record; records without a match are skipped."""
    exploded = table["body_part"].explode().dropna()
    return frequency(exploded, "body_part", order=BODY_PART_ORDER)


def laterality_frequency(table: pd.DataFrame) -> pd.DataFrame:
    return frequency(table["laterality"], "laterality", order=["ipsilateral", "contralateral", "unknown"])


def stimulation_type_frequency(table: pd.DataFrame) -> pd.DataFrame:
    return frequency(table["stimulation_type"].dropna(), "stimulation_type", order=["unipolar", "bipolar"])


def combined_setting_frequency(table: pd.DataFrame) -> pd.DataFrame:
    return frequency(table["combined_setting"].dropna(), "combined_setting", order=COMBINED_SETTING_ORDER)


def face_and_upper_extremity_cohort(table: pd.DataFrame, min_count: int = 5) -> pd.DataFrame:
    """
    Unipolar tests where the face/tongue and the upper extremity tingled
    together, summarized per body-part combination.

    Only combinations seen at least ``min_count`` times are kept.
    """
    parts = table["body_part"].map(lambda p: set(p) if isinstance(p, (tuple, list, set)) else set())
    mask = (
        (table["stimulation_type"] == "unipolar")
        & parts.map(lambda p: bool(p & FACE_GROUP))
        & parts.map(lambda p: bool(p & UPPER_EXTREMITY_GROUP))
    )
    cohort = table[mask].assign(body_part=table.loc[mask, "body_part"].map(body_part_label))
    columns = ["body_part", "n", "mean_amplitude", "sd_amplitude", "subjects"]
    if cohort.empty:
        return pd.DataFrame(columns=columns)

    summary = (
        cohort.groupby("body_part")
        .agg(
            n=("study_id", "size"),
            mean_amplitude=("amplitude", "mean"),
            sd_amplitude=("amplitude", "std"),
            subjects=("study_id", "nunique"),
        )
        .reset_index()
    )
    summary = summary[summary["n"] >= min_count]
    return summary.sort_values(["n", "body_part"], ascending=[False, True]).reset_index(drop=True)[columns]


def format_report(table: pd.DataFrame) -> str:
    sections = [
        ("Summary statistics", describe_numeric(table)),
        ("Amplitude frequency", amplitude_frequency(table)),
        ("Body part frequency", body_part_frequency(table)),
        ("Laterality", laterality_frequency(table)),
        ("Stimulation type", stimulation_type_frequency(table)),
        ("Combined setting", combined_setting_frequency(table)),
        ("Unipolar face + upper extremity (n >= 5)", face_and_upper_extremity_cohort(table)),
    ]
    lines: List[str] = []
    for title, frame in sections:
        lines.append(f"# {title}")
        if frame.empty:
            lines.append("none")
        else:
            lines.append(frame.to_string(index=title == "Summary statistics"))
        lines.append("")
    return "\n".join(lines)
