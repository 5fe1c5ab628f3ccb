"""
End-to-end tests for the batch run over small CSV exports
"""
import pandas as pd
import pytest

from paresthesia.pipeline import NORMALIZED_COLUMNS, build_normalized_table, run
from paresthesia.settings import unmapped_settings


@pytest.fixture
def normalized(export_files):
    table, diagnostics = build_normalized_table(*export_files)
    return table, diagnostics


class TestBuildNormalizedTable:
    """Loader, annotators and settings normalizer wired together"""

    def test_schema_and_row_count(self, normalized):
        table, _ = normalized
        assert list(table.columns) == NORMALIZED_COLUMNS
        assert len(table) == 6

    def test_settings_fields(self, normalized):
        table, _ = normalized
        assert table["combined_setting"].tolist()[0] == "2a/10a"
        assert table["settings"].tolist()[:2] == ["2a", "10b-/11b+"]
        assert table["stimulation_type"].tolist() == [
            "unipolar", "bipolar", "unipolar", "unipolar", "unipolar", "unipolar"
        ]
        assert table["contact_lead"].tolist()[:2] == ["2a-", "10b-"]
        # Abbott "2a-" and Boston Scientific "2" land in the same contact group
        assert table["combined_setting"].iloc[3] == table["combined_setting"].iloc[0]
        assert table["combined_setting"].iloc[4] == "2abc/10abc"
        assert table["combined_setting"].iloc[[1, 2, 5]].isna().all()

    def test_annotations(self, normalized):
        table, _ = normalized
        assert table["body_part"].tolist() == [
            ("hand",), ("tongue", "face"), (), (), ("arm", "face"), ("chest_entire_body",)
        ]
        assert table["laterality"].tolist() == [
            "ipsilateral", "contralateral", "unknown", "contralateral", "unknown", "unknown"
        ]
        assert table["brain_side"].tolist() == ["R", "R", "R", "L", "L", "L"]
        assert table["severity"].iloc[0] == 3
        assert table["severity"].iloc[3] == 10
        assert pd.isna(table["severity"].iloc[1])

    def test_diagnostics(self, normalized):
        _, diagnostics = normalized
        assert diagnostics.rows_dropped_blank_instrument == 1
        assert diagnostics.amplitude_not_numeric == 1
        assert diagnostics.unmatched_device_subjects == ["DBS003L"]


def test_run_prints_reports_and_review_list(export_files, capsys):
    table = run(*export_files)
    out = capsys.readouterr().out
    assert len(table) == 6
    assert "# Load diagnostics" in out
    assert "Amplitude values not numeric: 1" in out
    assert "# Body part frequency" in out
    assert "manual review" in out
    assert "99" in out


def test_missing_export_is_fatal(tmp_path, export_files):
    _, devices_path = export_files
    with pytest.raises(FileNotFoundError):
        build_normalized_table(str(tmp_path / "nope.csv"), devices_path)


def test_na_like_settings_reach_the_review_list(tmp_path, raw_records, raw_devices):
    raw_records.loc[1, "Full settings"] = "N/A"
    raw_records.loc[4, "Full settings"] = "n/a"
    records_path = tmp_path / "records.csv"
    devices_path = tmp_path / "devices.csv"
    raw_records.to_csv(records_path, index=False)
    raw_devices.to_csv(devices_path, index=False)

    table, _ = build_normalized_table(str(records_path), str(devices_path))
    review = unmapped_settings(table)
    listed = review[review["settings_raw"] == "n/a"]
    assert listed["n"].sum() == 2
    assert set(listed["device"]) == {"AB", "BS"}
    assert listed["settings"].isna().all()
