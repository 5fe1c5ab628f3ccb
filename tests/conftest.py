"""
Shared pytest fixtures: small REDCap-shaped exports.
"""
import pandas as pd
import pytest

RECORD_HEADER = [
    "Study ID",
    "Event Name",
    "Repeat Instrument",
    "Repeat Instance",
    "Configuration number",
    "Full settings",
    "Amplitude (mA)",
    "Type of paresthesia?",
    "Length of paresthesia (sec)",
    "Notes",
    "Complete?",
    "Survey Identifier",
]

DEVICE_HEADER = ["Study ID", "1. Which device does this patient have?"]


def record_row(study_id, instance, settings, amplitude, para_type="Transient", notes=None,
               visit="Initial Programming", instrument="Paresthesia Threshold"):
    return {
        "Study ID": study_id,
        "Event Name": visit,
        "Repeat Instrument": instrument,
        "Repeat Instance": instance,
        "Configuration number": "1",
        "Full settings": settings,
        "Amplitude (mA)": amplitude,
        "Type of paresthesia?": para_type,
        "Length of paresthesia (sec)": "5",
        "Notes": notes,
        "Complete?": "Complete",
        "Survey Identifier": None,
    }


@pytest.fixture
def raw_records():
    rows = [
        # Administrative row REDCap emits once per event
        record_row("DBS001R", None, None, None, para_type=None, instrument=""),
        record_row("DBS001R", "1", "2A-", "1.5", notes="tingling in right hand, 3/10"),
        record_row("DBS001R", "2", "10b- 11b ", "2.0", para_type="Persistent",
                   notes="Left face and tongue"),
        record_row("DBS001R", "3", "99", "abc", notes=None),
        record_row("DBS002L", "1", "2", "1.0", notes="reports tingling on right side 10/10"),
        record_row("DBS002L", "2", "2/3/4-", "2.5", notes="Face and arm, mild"),
        record_row("DBS003L", "1", "5-", "3.0", notes="chest"),
    ]
    return pd.DataFrame(rows, columns=RECORD_HEADER)


@pytest.fixture
def raw_devices():
    return pd.DataFrame(
        [
            ["DBS001R", "Abbott"],
            ["DBS001R", None],
            ["DBS002L", "Boston Scientific"],
        ],
        columns=DEVICE_HEADER,
    )


@pytest.fixture
def export_files(tmp_path, raw_records, raw_devices):
    records_path = tmp_path / "paresthesia_records.csv"
    devices_path = tmp_path / "device_records.csv"
    raw_records.to_csv(records_path, index=False)
    raw_devices.to_csv(devices_path, index=False)
    return str(records_path), str(devices_path)


def normalized_row(study_id="DBS001R", visit="Initial Programming", order_type=1,
                   settings="2a", combined_setting="2a/10a", stimulation_type="unipolar",
                   amplitude=1.0, para_type="Transient", device="AB", body_part=(),
                   laterality="unknown", severity=None):
    return {
        "study_id": study_id,
        "visit": visit,
        "order_type": order_type,
        "config_number": "1",
        "settings_raw": settings,
        "settings": settings,
        "contact_lead": settings,
        "stimulation_type": stimulation_type,
        "combined_setting": combined_setting,
        "amplitude": amplitude,
        "para_type": para_type,
        "para_length": 5.0,
        "notes": None,
        "device": device,
        "body_part": body_part,
        "brain_side": study_id[-1],
        "laterality": laterality,
        "severity": severity,
    }


@pytest.fixture
def make_table():
    def _make(rows):
        df = pd.DataFrame([normalized_row(**r) for r in rows])
        df["severity"] = pd.array(df["severity"].tolist(), dtype="Int64")
        return df
    return _make
