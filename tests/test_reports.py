"""
Tests for the aggregation and reporting views
"""
import pytest

from paresthesia.reports import (
    amplitude_frequency,
    body_part_frequency,
    combined_setting_frequency,
    describe_numeric,
    face_and_upper_extremity_cohort,
    format_report,
    laterality_frequency,
    stimulation_type_frequency,
)
from paresthesia.vocabulary import BODY_PART_ORDER, COMBINED_SETTING_ORDER


class TestFrequencies:
    """Counting views over the normalized table"""

    def test_body_part_fan_out(self, make_table):
        table = make_table([
            {"body_part": ("arm", "face")},
            {"body_part": ("face",)},
            {"body_part": ()},
        ])
        freq = body_part_frequency(table)
        counts = dict(zip(freq["body_part"], freq["n"]))
        assert counts["face"] == 2
        assert counts["arm"] == 1
        assert counts["leg"] == 0
        assert list(freq["body_part"]) == BODY_PART_ORDER
        assert freq["n"].sum() == 3

    def test_amplitude_frequency_sorted_with_missing(self, make_table):
        table = make_table([
            {"amplitude": 2.0},
            {"amplitude": 1.0},
            {"amplitude": 2.0},
            {"amplitude": None},
        ])
        freq = amplitude_frequency(table)
        assert freq["amplitude"].tolist()[:2] == [1.0, 2.0]
        assert freq["n"].tolist() == [1, 2, 1]

    def test_categorical_frequencies_follow_fixed_order(self, make_table):
        table = make_table([
            {"laterality": "contralateral", "combined_setting": "4/12", "stimulation_type": "bipolar"},
            {"laterality": "ipsilateral", "combined_setting": None},
        ])
        assert laterality_frequency(table)["n"].tolist() == [1, 1, 0]
        assert stimulation_type_frequency(table)["n"].tolist() == [1, 1]
        settings = combined_setting_frequency(table)
        assert settings["combined_setting"].tolist() == COMBINED_SETTING_ORDER
        assert settings["n"].sum() == 1

    def test_describe_numeric(self, make_table):
        table = make_table([
            {"amplitude": 1.0, "severity": 2},
            {"amplitude": 3.0, "severity": None},
        ])
        stats = describe_numeric(table)
        assert stats.loc["count", "amplitude"] == 2
        assert stats.loc["mean", "amplitude"] == pytest.approx(2.0)
        assert stats.loc["count", "severity"] == 1
        assert "50%" in stats.index


class TestCohort:
    """Unipolar face + upper extremity co-occurrence"""

    def rows(self, n, body_part, study_prefix="DBS00", **extra):
        return [
            dict({"study_id": f"{study_prefix}{i % 2}R", "amplitude": 1.0 + i, "body_part": body_part}, **extra)
            for i in range(n)
        ]

    def test_grouped_summary(self, make_table):
        table = make_table(
            self.rows(5, ("hand", "face"))
            + self.rows(3, ("arm", "tongue"))
            + self.rows(6, ("face",))
            + self.rows(6, ("hand", "face"), stimulation_type="bipolar")
        )
        cohort = face_and_upper_extremity_cohort(table)
        assert cohort["body_part"].tolist() == ["hand, face"]
        row = cohort.iloc[0]
        assert row["n"] == 5
        assert row["mean_amplitude"] == pytest.approx(3.0)
        assert row["sd_amplitude"] > 0
        assert row["subjects"] == 2

    def test_min_count_is_configurable(self, make_table):
        table = make_table(self.rows(3, ("arm", "tongue")))
        assert face_and_upper_extremity_cohort(table).empty
        assert face_and_upper_extremity_cohort(table, min_count=3)["n"].tolist() == [3]

    def test_empty_cohort(self, make_table):
        cohort = face_and_upper_extremity_cohort(make_table([{"body_part": ("leg",)}]))
        assert cohort.empty
        assert "subjects" in cohort.columns


def test_format_report_lists_every_section(make_table):
    table = make_table([{"body_part": ("face", "hand"), "severity": 4}])
    text = format_report(table)
    for title in ("Summary statistics", "Amplitude frequency", "Body part frequency",
                  "Laterality", "Stimulation type", "Combined setting"):
        assert f"# {title}" in text
