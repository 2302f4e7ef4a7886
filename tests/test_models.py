from datetime import date

import pytest

from models import parse_entry_date
from storage.models import Entry


def test_parse_entry_date_accepts_iso_date():
    assert parse_entry_date("2024-05-01") == date(2024, 5, 1)
    assert parse_entry_date(None) is None


@pytest.mark.parametrize("value", ["2024-05-01\n", " 2024-05-01", "2024/05/01", "2024-5-1", 20240501])
def test_parse_entry_date_rejects_bad_format(value):
    with pytest.raises(ValueError, match="YYYY-MM-DD"):
        parse_entry_date(value)


def test_parse_entry_date_rejects_impossible_date():
    with pytest.raises(ValueError, match="日期不存在"):
        parse_entry_date("2024-02-30")


def test_entry_author_date_is_indexed_once():
    author_date_indexes = [
        index for index in Entry.__table__.indexes
        if {column.name for column in index.columns} == {"author_id", "entry_date"}
    ]
    assert author_date_indexes == []
    assert any(
        {column.name for column in constraint.columns} == {"author_id", "entry_date"}
        for constraint in Entry.__table__.constraints
        if constraint.name == "uq_entry_author_date"
    )
