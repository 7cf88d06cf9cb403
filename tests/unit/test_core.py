"""Tests for wcs11.core helpers."""

import pytest
from hypothesis import given, strategies as st

from wcs11.core import UniqueNameList, format_number, format_numbers, split_list


@pytest.mark.unit
class TestUniqueNameList:
    """Test the ordered, case-insensitive unique list."""

    def test_keeps_first_spelling_and_order(self):
        names = UniqueNameList(["image/tiff", "Image/Tiff", "image/png"])

        assert names.to_list() == ["image/tiff", "image/png"]
        assert names.join(",") == "image/tiff,image/png"

    def test_add_reports_duplicates(self):
        names = UniqueNameList()

        assert names.add("dem") is True
        assert names.add("DEM") is False
        assert len(names) == 1
        assert "Dem" in names

    def test_empty_list_is_falsy(self):
        assert not UniqueNameList()
        assert UniqueNameList().join() == ""


@pytest.mark.property
@given(st.lists(st.text(alphabet="abcABC/", max_size=4)))
def test_unique_name_list_matches_first_seen_filter(values):
    seen = set()
    expected = []
    for value in values:
        if value.casefold() not in seen:
            seen.add(value.casefold())
            expected.append(value)

    assert UniqueNameList(values).to_list() == expected


def test_split_list():
    assert split_list("a,b,,c") == ["a", "b", "c"]
    assert split_list(" GTiff  PNG ", " ") == ["GTiff", "PNG"]
    assert split_list(None) == []
    assert split_list("") == []


def test_format_number_matches_printf_g():
    assert format_number(115.0) == "115"
    assert format_number(-30.0) == "-30"
    assert format_number(0.1) == "0.1"
    assert format_numbers((115.0, 185.0)) == "115 185"
