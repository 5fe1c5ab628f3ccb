"""
Record loader for the REDCap paresthesia exports.

Reads the test-instance export and the device export, drops the blank
administrative rows, renames columns into the canonical schema and joins
the device onto every test instance.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

import pandas as pd

from paresthesia.vocabulary import DEVICE_NAMES

logger = logging.getLogger(__name__)

RECORD_COLUMNS: Dict[str, str] = {
    "Study ID": "study_id",
    "Event Name": "visit",
    "Repeat Instance": "order_type",
    "Configuration number": "config_number",
    "Full settings": "settings_raw",
    "Amplitude (mA)": "amplitude",
    "Type of paresthesia?": "para_type",
    "Length of paresthesia (sec)": "para_length",
    "Notes": "notes",
}
REPEAT_INSTRUMENT = "Repeat Instrument"

DEVICE_COLUMNS: Dict[str, str] = {
    "Study ID": "study_id",
    "1. Which device does this patient have?": "device",
}

CANONICAL_COLUMNS: List[str] = list(RECORD_COLUMNS.values()) + ["device"]


@dataclass
class LoadDiagnostics:
    rows_read: int = 0
    rows_dropped_blank_instrument: int = 0
    amplitude_not_numeric: int = 0
    unknown_devices: List[str] = field(default_factory=list)
    unmatched_device_subjects: List[str] = field(default_factory=list)
    conflicting_device_subjects: List[str] = field(default_factory=list)

    def lines(self) -> List[str]:
        return [
            f"Rows read: {self.rows_read}",
            f"Blank repeat-instrument rows dropped: {self.rows_dropped_blank_instrument}",
            f"Amplitude values not numeric: {self.amplitude_not_numeric}",
            f"Unknown device names: {', '.join(self.unknown_devices) or 'none'}",
            f"Subjects without a device: {', '.join(self.unmatched_device_subjects) or 'none'}",
            f"Subjects with conflicting devices: {', '.join(self.conflicting_device_subjects) or 'none'}",
        ]


def require_columns(df: pd.DataFrame, required, source: str) -> None:
    missing = [c for c in required if c not in df.columns]
    if missing:
        logger.error(f"{source} is missing required columns: {missing}")
        raise ValueError(f"{source} is missing required columns: {', '.join(missing)}")


def read_export(path: str) -> pd.DataFrame:
    try:
        df = pd.read_csv(path, dtype=str, keep_default_na=False, na_values=[""])
        logger.info(f"Loaded {len(df)} rows from {path}")
        return df
    except FileNotFoundError:
        logger.error(f"Export not found at {path}")
        raise
    except Exception as e:
        logger.error(f"Error reading {path}: {e}")
        raise


def normalize_records(raw: pd.DataFrame, diagnostics: LoadDiagnostics | None = None) -> pd.DataFrame:
    """
    Canonicalize the test-instance export.

    Rows without a repeat instrument are REDCap's per-event administrative
    rows and carry no test. Amplitudes that do not parse become NaN and are
    counted rather than guessed.
    """
    diagnostics = diagnostics if diagnostics is not None else LoadDiagnostics()
    require_columns(raw, list(RECORD_COLUMNS) + [REPEAT_INSTRUMENT], "Record export")
    diagnostics.rows_read = len(raw)

    instrument = raw[REPEAT_INSTRUMENT].fillna("").astype(str).str.strip()
    kept = raw[instrument != ""]
    diagnostics.rows_dropped_blank_instrument = len(raw) - len(kept)

    df = kept[list(RECORD_COLUMNS)].rename(columns=RECORD_COLUMNS).reset_index(drop=True)
    df["study_id"] = df["study_id"].astype(str).str.strip()
    df["settings_raw"] = df["settings_raw"].str.strip().str.lower()
    df["order_type"] = pd.to_numeric(df["order_type"], errors="coerce")
    df["para_length"] = pd.to_numeric(df["para_length"], errors="coerce")

    amplitude_text = df["amplitude"]
    df["amplitude"] = pd.to_numeric(amplitude_text, errors="coerce")
    failed = amplitude_text.notna() & (amplitude_text.astype(str).str.strip() != "") & df["amplitude"].isna()
    diagnostics.amplitude_not_numeric = int(failed.sum())
    if diagnostics.amplitude_not_numeric:
        logger.warning(
            f"{diagnostics.amplitude_not_numeric} amplitude values could not be converted: "
            f"{sorted(amplitude_text[failed].astype(str).unique())}"
        )
    return df


def normalize_devices(raw: pd.DataFrame, diagnostics: LoadDiagnostics | None = None) -> pd.DataFrame:
    diagnostics = diagnostics if diagnostics is not None else LoadDiagnostics()
    require_columns(raw, list(DEVICE_COLUMNS), "Device export")

    df = raw[list(DEVICE_COLUMNS)].rename(columns=DEVICE_COLUMNS)
    df["study_id"] = df["study_id"].astype(str).str.strip()
    names = df["device"].str.strip()
    df["device"] = names.map(DEVICE_NAMES)

    unknown = names[names.notna() & df["device"].isna()]
    if not unknown.empty:
        diagnostics.unknown_devices = sorted(unknown.unique())
        logger.warning(f"Unknown device names left unmapped: {diagnostics.unknown_devices}")

    answered = df.dropna(subset=["device"])
    per_subject = answered.groupby("study_id")["device"].nunique()
    conflicting = per_subject[per_subject > 1]
    if not conflicting.empty:
        diagnostics.conflicting_device_subjects = sorted(conflicting.index)
        logger.warning(
            f"Conflicting device answers, keeping the first: {diagnostics.conflicting_device_subjects}"
        )

    # Event exports repeat the subject; the first non-empty answer wins.
    return (
        answered
        .drop_duplicates(subset="study_id", keep="first")
        .reset_index(drop=True)
    )


def join_devices(
    records: pd.DataFrame,
    devices: pd.DataFrame,
    diagnostics: LoadDiagnostics | None = None,
) -> pd.DataFrame:
    diagnostics = diagnostics if diagnostics is not None else LoadDiagnostics()
    joined = records.merge(devices[["study_id", "device"]], on="study_id", how="left")
    unmatched = joined.loc[joined["device"].isna(), "study_id"]
    if not unmatched.empty:
        diagnostics.unmatched_device_subjects = sorted(unmatched.unique())
        logger.warning(f"No device recorded for subjects: {diagnostics.unmatched_device_subjects}")
    return joined[CANONICAL_COLUMNS]


def load_tables(records_path: str, devices_path: str) -> Tuple[pd.DataFrame, LoadDiagnostics]:
    """Read both exports and return the joined canonical table."""
    diagnostics = LoadDiagnostics()
    records = normalize_records(read_export(records_path), diagnostics)
    devices = normalize_devices(read_export(devices_path), diagnostics)
    return join_devices(records, devices, diagnostics), diagnostics
