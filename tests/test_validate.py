"""Row validation report: structure errors, ragged rows, data density."""

import pytest

from greenbuttonlogic import validate, transform, ingest
from greenbuttonlogic.config import EncoderConfig
from greenbuttonlogic.exceptions import ValidationFailure


@pytest.mark.parametrize("rows", [None, [], "not rows", 42, ["a string row"]])
def test_structurally_invalid_inputs(rows):
    report = validate.validate_rows(rows)
    assert report["is_valid"] is False
    assert report["errors"]
    assert report["stats"]["total_columns"] == 0


def test_none_and_empty_have_empty_stats():
    for rows in (None, []):
        report = validate.validate_rows(rows)
        assert report["stats"] == {
            "total_rows": 0,
            "total_columns": 0,
            "empty_values": 0,
            "null_values": 0,
        }


def test_clean_rows_are_valid():
    rows = [{"a": 1, "b": "x"}, {"a": 2, "b": "y"}]
    report = validate.validate_rows(rows)
    assert report["is_valid"] is True
    assert report["errors"] == []
    assert report["warnings"] == []
    assert report["stats"]["total_rows"] == 2
    assert report["stats"]["total_columns"] == 2


def test_ragged_rows_warn_but_stay_valid():
    rows = [{"a": 1, "b": 2}, {"a": 1, "b": 2, "c": 3}, {"a": 1, "b": 2}]
    report = validate.validate_rows(rows)
    assert report["is_valid"] is True
    assert "Row 2 has 3 columns, expected 2" in report["warnings"]


def test_non_mapping_later_row_is_a_warning():
    report = validate.validate_rows([{"a": 1}, ["oops"]])
    assert report["is_valid"] is True
    assert "Row 2 is not a mapping" in report["warnings"]


def test_null_and_empty_counts_and_warnings():
    rows = [
        {"a": None, "b": "  "},
        {"a": 1, "b": ""},
        {"a": 2, "b": "ok"},
        {"a": 3, "b": "ok"},
    ]
    report = validate.validate_rows(rows)
    assert report["stats"]["null_values"] == 1
    assert report["stats"]["empty_values"] == 2
    # 1/8 null and 2/8 empty are both above 10%
    assert "25.0% of values are empty" in report["warnings"]
    assert "12.5% of values are null" in report["warnings"]


def test_threshold_is_configurable():
    rows = [{"a": None}] + [{"a": i} for i in range(4)]
    assert validate.validate_rows(rows, EncoderConfig(quality_warning_pct=50.0))[
        "warnings"
    ] == []
    assert validate.validate_rows(rows)["warnings"] == ["20.0% of values are null"]


def test_sample_rows_validate(sample_xml):
    rows = transform.flatten(ingest.parse(sample_xml))
    report = validate.validate_rows(rows)
    assert report["is_valid"] is True
    assert report["stats"]["total_rows"] == 4
    assert report["stats"]["total_columns"] == 17
    # quality flags, one cost pair, one missing time period
    assert report["stats"]["null_values"] == 8


def test_assert_valid_raises():
    with pytest.raises(ValidationFailure, match="Data validation failed"):
        validate.assert_valid([])
