"""
Free-text annotators for the paresthesia notes field.
Each annotator looks at a single notes string, so they can be mapped
over the table column by column.
"""
from __future__ import annotations

import re
from typing import Dict, List, Optional, Tuple

import pandas as pd

from paresthesia.vocabulary import BODY_PART_KEYWORDS

IPSILATERAL = "ipsilateral"
CONTRALATERAL = "contralateral"
UNKNOWN = "unknown"

RIGHT_STRICT = re.compile(r"\bright\b|\br\b")
LEFT_STRICT = re.compile(r"\bleft\b|\bl\b")
# Used for the contralateral checks; "right" may sit inside a longer word.
RIGHT_LOOSE = re.compile(r"right|\br\b")
LEFT_LOOSE = re.compile(r"left|\bl\b")

# A score glued to other digits ("15/10", "3/100") is not a severity.
SEVERITY_PATTERN = re.compile(r"(?<!\d)(10/10|\d/10)(?!\d)")


def is_missing(value) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def extract_body_parts(
    notes: Optional[str],
    keywords: Dict[str, List[str]] = BODY_PART_KEYWORDS,
) -> Tuple[str, ...]:
    """Return the dermatome categories mentioned in notes, in table order."""
    if is_missing(notes):
        return ()
    text = str(notes)
    return tuple(
        category
        for category, words in keywords.items()
        if any(word in text for word in words)
    )


def brain_side(study_id) -> Optional[str]:
    if is_missing(study_id):
        return None
    text = str(study_id).strip()
    if not text:
        return None
    return text[-1].upper()


def classify_laterality(study_id, notes: Optional[str]) -> str:
    """
    Relate the side of the reported sensation to the stimulated hemisphere.

    The hemisphere comes from the trailing letter of the subject id. Same
    side wins over opposite side when notes mention both.
    """
    if is_missing(notes):
        return UNKNOWN
    side = brain_side(study_id)
    text = str(notes).lower()

    if (RIGHT_STRICT.search(text) and side == "R") or (LEFT_STRICT.search(text) and side == "L"):
        return IPSILATERAL
    if RIGHT_LOOSE.search(text) and side == "L":
        return CONTRALATERAL
    if LEFT_LOOSE.search(text) and side == "R":
        return CONTRALATERAL
    return UNKNOWN


def extract_severity(notes: Optional[str]) -> Optional[int]:
    if is_missing(notes):
        return None
    match = SEVERITY_PATTERN.search(str(notes))
    if not match:
        return None
    return int(match.group(1).split("/", 1)[0])


def annotate(table: pd.DataFrame) -> pd.DataFrame:
    """Add body_part, brain_side, laterality and severity columns."""
    out = table.copy()
    notes = out["notes"]
    out["body_part"] = notes.map(extract_body_parts)
    out["brain_side"] = out["study_id"].map(brain_side)
    out["laterality"] = [
        classify_laterality(sid, note) for sid, note in zip(out["study_id"], notes)
    ]
    out["severity"] = pd.array(notes.map(extract_severity).tolist(), dtype="Int64")
    return out
