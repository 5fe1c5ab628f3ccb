"""
Settings normalizer: canonicalizes the hand-entered stimulation settings
codes, splits out the contact lead and polarity, and maps each setting to
a device-independent contact group so both vendors can be compared.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional

import pandas as pd

from paresthesia.annotators import is_missing
from paresthesia.vocabulary import (
    DEVICE_SETTING_BUCKETS,
    SETTINGS_CORRECTIONS,
    Correction,
)

logger = logging.getLogger(__name__)

UNIPOLAR = "unipolar"
BIPOLAR = "bipolar"

# A slash between two digits joins contacts of one group ("2/3/4"); any
# other slash separates cathode from anode.
SEPARATOR = re.compile(r"(?<!\d)/|/(?!\d)")
COMMON_ANODE = re.compile(r"(?<![a-z0-9])c\+")
COMMON_ANODE_TOKEN = re.compile(r"/?(?<![a-z0-9])c\+/?")


@dataclass(frozen=True)
class ParsedSettings:
    settings: str
    contact_lead: str
    stimulation_type: str


def canonicalize_settings(
    raw,
    corrections: List[Correction] = SETTINGS_CORRECTIONS,
) -> Optional[str]:
    """
    Apply the first matching correction to a lower-cased settings string.

    Returns None for missing or excluded values; strings no rule matches
    come back stripped but otherwise untouched.
    """
    if is_missing(raw):
        return None
    value = str(raw).strip().lower()
    if not value:
        return None
    for pattern, replacement in corrections:
        if isinstance(pattern, str):
            if value != pattern:
                continue
            return replacement
        match = pattern.fullmatch(value)
        if match:
            return match.expand(replacement) if replacement is not None else None
    return value


def has_separator(settings: str) -> bool:
    return SEPARATOR.search(settings) is not None


def split_contact_lead(settings: str) -> str:
    return SEPARATOR.split(settings, maxsplit=1)[0]


def classify_stimulation(settings: str) -> str:
    if COMMON_ANODE.search(settings):
        return UNIPOLAR
    if has_separator(settings):
        return BIPOLAR
    if "-" in settings and "+" in settings:
        return BIPOLAR
    return UNIPOLAR


def clean_settings(settings: str) -> str:
    cleaned = COMMON_ANODE_TOKEN.sub("", settings)
    cleaned = re.sub(r"\+{2,}", "+", cleaned)
    if not has_separator(cleaned) and cleaned.endswith("-") and not cleaned.endswith("--"):
        cleaned = cleaned[:-1]
    return cleaned


def parse_settings(canonical: Optional[str]) -> Optional[ParsedSettings]:
    if is_missing(canonical):
        return None
    return ParsedSettings(
        settings=clean_settings(canonical),
        contact_lead=split_contact_lead(COMMON_ANODE_TOKEN.sub("", canonical)),
        stimulation_type=classify_stimulation(canonical),
    )


def bucket_settings(
    settings: Optional[str],
    device: Optional[str],
    buckets: Dict[str, Dict[str, str]] = DEVICE_SETTING_BUCKETS,
) -> Optional[str]:
    if is_missing(settings) or is_missing(device):
        return None
    return buckets.get(device, {}).get(settings)


def normalize_settings(table: pd.DataFrame) -> pd.DataFrame:
    """Add settings, contact_lead, stimulation_type and combined_setting."""
    out = table.copy()
    parsed = [parse_settings(canonicalize_settings(raw)) for raw in out["settings_raw"]]

    out["settings"] = [p.settings if p else None for p in parsed]
    out["contact_lead"] = [p.contact_lead if p else None for p in parsed]
    out["stimulation_type"] = [p.stimulation_type if p else None for p in parsed]
    out["combined_setting"] = [
        bucket_settings(s, d) for s, d in zip(out["settings"], out["device"])
    ]

    unmapped = unmapped_settings(out)
    if not unmapped.empty:
        logger.warning(
            f"{int(unmapped['n'].sum())} rows ({len(unmapped)} distinct settings) "
            "have no combined setting; see the review list"
        )
    return out


def unmapped_settings(table: pd.DataFrame) -> pd.DataFrame:
    """
    Rows with a settings entry but no combined setting, for manual review.
    Excluded values, unknown codes and subjects without a device all land here.
    """
    columns = ["settings_raw", "settings", "device"]
    has_raw = table["settings_raw"].map(lambda v: not is_missing(v) and str(v).strip() != "")
    missing = table[has_raw & table["combined_setting"].isna()]
    if missing.empty:
        return pd.DataFrame(columns=columns + ["n"])
    review = (
        missing[columns]
        .groupby(columns, dropna=False)
        .size()
        .reset_index(name="n")
        .sort_values(["n", "settings_raw"], ascending=[False, True])
        .reset_index(drop=True)
    )
    return review
