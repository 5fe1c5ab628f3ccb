"""
Fixed vocabularies used to normalize the paresthesia threshold exports.
Every table here was reviewed by hand against the exported notes and
settings strings; extend the tables rather than adding conditionals.
"""
from __future__ import annotations

import re
from typing import Dict, List, Optional, Tuple, Union

# Canonical dermatome category -> literal keywords. Matching is a
# case-sensitive substring test, so cased variants are listed explicitly.
BODY_PART_KEYWORDS: Dict[str, List[str]] = {
    "arm": ["arm", "Arm", "ARM", "bicep", "Bicep", "tricep", "Tricep"],
    "forearm_and_elbow": ["forearm", "Forearm", "elbow", "Elbow", "wrist", "Wrist"],
    "leg": ["leg", "Leg", "LEG", "thigh", "Thigh", "knee", "Knee", "calf", "Calf", "shin", "Shin"],
    "head": ["head", "Head", "scalp", "Scalp", "temple", "Temple", "skull"],
    "hand": ["hand", "Hand", "HAND", "palm", "Palm"],
    "foot_or_ankle": ["foot", "Foot", "feet", "Feet", "ankle", "Ankle", "heel", "sole"],
    "fingers": ["finger", "Finger", "thumb", "Thumb", "fingertip", "digits"],
    "toe": ["toe", "Toe"],
    "tongue": ["tongue", "Tongue"],
    "face": [
        "face", "Face", "facial", "Facial", "cheek", "Cheek", "lip", "Lip",
        "jaw", "Jaw", "chin", "Chin", "mouth", "Mouth", "eye", "Eye", "nose",
    ],
    "chest_entire_body": [
        "chest", "Chest", "entire body", "Entire body", "whole body",
        "Whole body", "all over", "torso", "Torso", "trunk",
    ],
    "back": ["back", "Back"],
    "shoulder": ["shoulder", "Shoulder"],
}

BODY_PART_ORDER: List[str] = list(BODY_PART_KEYWORDS.keys())

FACE_GROUP = {"face", "tongue"}
UPPER_EXTREMITY_GROUP = {"arm", "forearm_and_elbow", "hand", "fingers", "shoulder"}

# Single-pass correction table for lower-cased, stripped settings strings.
# Plain strings match exactly, compiled patterns must match the whole value.
# A None replacement marks the value as unparseable; it is excluded, not guessed.
Correction = Tuple[Union[str, re.Pattern], Optional[str]]

SETTINGS_CORRECTIONS: List[Correction] = [
    # Lone contact codes entered once without a polarity sign (cathodic).
    ("2", "2-"),
    ("8", "8-"),
    ("10a", "10a-"),
    # Common anode typed without a separator: "2- c+" / "2-c+".
    (re.compile(r"(\S+-)\s*c\+"), r"\1/c+"),
    # Dual contacts separated by whitespace: "10b- 11b" -> "10b-/11b+".
    (re.compile(r"(\w+)-\s+(\w+)\+?"), r"\1-/\2+"),
    # Segments listed one by one: "2a/2b/2c-" -> "2abc-".
    (re.compile(r"(\d+)a/\1b/\1c(-?)"), r"\1abc\2"),
    # Comma separated Boston Scientific groups: "2,3,4-" -> "2/3/4-".
    (re.compile(r"(\d+),\s*(\d+),\s*(\d+)(-?)"), r"\1/\2/\3\4"),
    # Unparseable entries.
    ("?", None),
    ("n/a", None),
    ("na", None),
    ("unknown", None),
    ("see notes", None),
    ("c+", None),
]

DEVICE_NAMES: Dict[str, str] = {
    "Boston Scientific": "BS",
    "Abbott": "AB",
}

# Device-independent contact groups, in the order used on chart axes.
# Left lead contacts first, right lead contacts after the slash.
COMBINED_SETTING_ORDER: List[str] = [
    "1/9",
    "2a/10a",
    "2b/10b",
    "2c/10c",
    "2abc/10abc",
    "3a/11a",
    "3b/11b",
    "3c/11c",
    "3abc/11abc",
    "4/12",
    "1-2abc+/9-10abc+",
    "2abc-1+/10abc-9+",
    "2abc-3abc+/10abc-11abc+",
    "3abc-2abc+/11abc-10abc+",
]

# Cleaned settings string -> combined setting, per device. Abbott segments
# are recorded by level letter, Boston Scientific segments by contact number.
DEVICE_SETTING_BUCKETS: Dict[str, Dict[str, str]] = {
    "AB": {
        "1": "1/9",
        "2a": "2a/10a",
        "2b": "2b/10b",
        "2c": "2c/10c",
        "2abc": "2abc/10abc",
        "3a": "3a/11a",
        "3b": "3b/11b",
        "3c": "3c/11c",
        "3abc": "3abc/11abc",
        "4": "4/12",
        "9": "1/9",
        "10a": "2a/10a",
        "10b": "2b/10b",
        "10c": "2c/10c",
        "10abc": "2abc/10abc",
        "11a": "3a/11a",
        "11b": "3b/11b",
        "11c": "3c/11c",
        "11abc": "3abc/11abc",
        "12": "4/12",
        "1-/2abc+": "1-2abc+/9-10abc+",
        "9-/10abc+": "1-2abc+/9-10abc+",
        "2abc-/1+": "2abc-1+/10abc-9+",
        "10abc-/9+": "2abc-1+/10abc-9+",
        "2abc-/3abc+": "2abc-3abc+/10abc-11abc+",
        "10abc-/11abc+": "2abc-3abc+/10abc-11abc+",
        "3abc-/2abc+": "3abc-2abc+/11abc-10abc+",
        "11abc-/10abc+": "3abc-2abc+/11abc-10abc+",
    },
    "BS": {
        "1": "1/9",
        "2": "2a/10a",
        "3": "2b/10b",
        "4": "2c/10c",
        "2/3/4": "2abc/10abc",
        "5": "3a/11a",
        "6": "3b/11b",
        "7": "3c/11c",
        "5/6/7": "3abc/11abc",
        "8": "4/12",
        "9": "1/9",
        "10": "2a/10a",
        "11": "2b/10b",
        "12": "2c/10c",
        "10/11/12": "2abc/10abc",
        "13": "3a/11a",
        "14": "3b/11b",
        "15": "3c/11c",
        "13/14/15": "3abc/11abc",
        "16": "4/12",
        "1-/2/3/4+": "1-2abc+/9-10abc+",
        "9-/10/11/12+": "1-2abc+/9-10abc+",
        "2/3/4-/1+": "2abc-1+/10abc-9+",
        "10/11/12-/9+": "2abc-1+/10abc-9+",
        "2/3/4-/5/6/7+": "2abc-3abc+/10abc-11abc+",
        "10/11/12-/13/14/15+": "2abc-3abc+/10abc-11abc+",
        "5/6/7-/2/3/4+": "3abc-2abc+/11abc-10abc+",
        "13/14/15-/10/11/12+": "3abc-2abc+/11abc-10abc+",
    },
}

PARESTHESIA_SHAPES: Dict[str, str] = {
    "Transient": "circle",
    "Persistent": "triangle-up",
}

SEVERITY_COLORS = ("#D2EBE2", "#061F16")
SEVERITY_RANGE = (0, 10)
