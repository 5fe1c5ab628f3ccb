"""
Batch run: load the exports, annotate notes, normalize settings and print
the reports.
Run: python -m paresthesia.pipeline
"""
from __future__ import annotations

import logging
from typing import Tuple

import pandas as pd

from paresthesia.annotators import annotate
from paresthesia.loader import LoadDiagnostics, load_tables
from paresthesia.reports import format_report
from paresthesia.settings import normalize_settings, unmapped_settings

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# File paths
RECORDS_FILE = "paresthesia_records.csv"
DEVICES_FILE = "device_records.csv"

NORMALIZED_COLUMNS = [
    "study_id",
    "visit",
    "order_type",
    "config_number",
    "settings_raw",
    "settings",
    "contact_lead",
    "stimulation_type",
    "combined_setting",
    "amplitude",
    "para_type",
    "para_length",
    "notes",
    "device",
    "body_part",
    "brain_side",
    "laterality",
    "severity",
]


def normalize_table(joined: pd.DataFrame) -> pd.DataFrame:
    """Annotate and settings-normalize a joined canonical table."""
    table = normalize_settings(annotate(joined))
    return table[NORMALIZED_COLUMNS]


def build_normalized_table(
    records_path: str = RECORDS_FILE,
    devices_path: str = DEVICES_FILE,
) -> Tuple[pd.DataFrame, LoadDiagnostics]:
    logger.info(f"Building normalized table from {records_path} and {devices_path}")
    joined, diagnostics = load_tables(records_path, devices_path)
    table = normalize_table(joined)
    logger.info(f"Normalized {len(table)} records for {table['study_id'].nunique()} subjects")
    return table, diagnostics


def run(records_path: str = RECORDS_FILE, devices_path: str = DEVICES_FILE) -> pd.DataFrame:
    table, diagnostics = build_normalized_table(records_path, devices_path)

    print("# Load diagnostics")
    for line in diagnostics.lines():
        print(f"- {line}")
    print("")
    print(format_report(table))

    review = unmapped_settings(table)
    print("# Settings without a combined setting (manual review)")
    if review.empty:
        print("none")
    else:
        print(review.to_string(index=False))
    return table


if __name__ == "__main__":
    try:
        run()
    except FileNotFoundError as e:
        print(f"Error: {e}")
        print(f"   Make sure {RECORDS_FILE} and {DEVICES_FILE} exist in the current directory.")
        raise SystemExit(1)
    except ValueError as e:
        print(f"Error: {e}")
        raise SystemExit(1)
