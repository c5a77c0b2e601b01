import pytest

from grid import Table
from header_resolver import (apply_well_name_fallbacks, extract_well_header, is_well_name_label,
                             search_well_name_in_tables, well_name_from_text)
from models import WellHeader


def test_well_name_and_report_no_from_same_row():
    table = Table.from_rows([["Well Name/No.", "", "ACME-12", "Report No.", "", "R-104"]])
    header = extract_well_header(table)
    assert header.well_name == "ACME-12"
    assert header.report_no == "R-104"


def test_dates_times_and_depths():
    table = Table.from_rows([
        ["Report date", "9/26/2025", "Report time", "6:00", "Spud date", "9/1/2025"],
        ["MD(ft)", "9,850", "TVD(ft)", "9,700", "Inc (deg)", "1.2"],
        ["Azi (deg)", ":", "245.3", "API well No.", "42-123-45678", ""],
    ])
    header = extract_well_header(table)
    assert header.report_date == "9/26/2025"
    assert header.report_time == "6:00"
    assert header.spud_date == "9/1/2025"
    assert header.md == "9,850"
    assert header.tvd == "9,700"
    assert header.inc == "1.2"
    assert header.azi == "245.3"
    assert header.api_well_no == "42-123-45678"


def test_api_label_is_not_a_well_name():
    assert not is_well_name_label("API Well No.")
    assert is_well_name_label("Well No.")
    table = Table.from_rows([["API well No.", "42-123"]])
    header = extract_well_header(table)
    assert header.well_name is None
    assert header.api_well_no == "42-123"


def test_rig_and_activity():
    table = Table.from_rows([["Rig", "Nabors 22", "Activity", "Drilling"]])
    header = extract_well_header(table)
    assert header.rig == "Nabors 22"
    assert header.activity == "Drilling"


def test_md_prefers_non_zero_candidate():
    table = Table.from_rows([["MD(ft)", "0", "Inc", "3.5", "deg"]])
    assert extract_well_header(table).md == "3.5"


def test_md_keeps_zero_when_nothing_better():
    table = Table.from_rows([["MD(ft)", "0", ""]])
    assert extract_well_header(table).md == "0"


def test_md_zero_replaced_by_later_label_row():
    table = Table.from_rows([
        ["MD(ft)", "0"],
        ["x", ""],
        ["MD (ft)", "9,850"],
    ])
    assert extract_well_header(table).md == "9,850"


def test_first_match_wins_for_text_fields():
    table = Table.from_rows([
        ["Report No.", "12"],
        ["Report No.", "13"],
    ])
    assert extract_well_header(table).report_no == "12"


def test_well_name_noise_falls_through_to_cell_below():
    table = Table.from_rows([
        ["Well Name", "Field: Permian"],
        ["ACME 7H", ""],
    ])
    assert extract_well_header(table).well_name == "ACME 7H"


def test_missing_labels_leave_fields_empty():
    header = extract_well_header(Table.from_rows([["nothing", "here"]]))
    assert header == WellHeader()
    assert extract_well_header(None) == WellHeader()


def test_search_well_name_in_other_tables():
    tables = [
        Table.from_rows([["Operator", "X"]]),
        Table.from_rows([["Well No.", "", "BRAVO-3"]]),
    ]
    assert search_well_name_in_tables(tables) == "BRAVO-3"
    assert search_well_name_in_tables([]) == ""


@pytest.mark.parametrize("text, expected", [
    ("Daily Mud Report\nWell Name: ECHO 5H\nReport No. 12", "ECHO 5H"),
    ("API Well No. 42-123\nWell No. FOX-9\n", "FOX-9"),
    ("Well Name\nGOLF 2\n", "GOLF 2"),
    ("Well Name: Report pending\n", ""),
    ("", ""),
])
def test_well_name_from_text(text, expected):
    assert well_name_from_text(text) == expected


def test_fallbacks_skip_page_text_when_name_known():
    header = WellHeader(well_name="ACME-12")

    def page_text():
        raise AssertionError("page text should not be read")

    assert apply_well_name_fallbacks(header, [], page_text).well_name == "ACME-12"


def test_fallbacks_use_page_text_last():
    header = WellHeader()
    tables = [Table.from_rows([["Operator", "X"]])]
    apply_well_name_fallbacks(header, tables, lambda: "Well Name: ZULU 1\n")
    assert header.well_name == "ZULU 1"


def test_fallbacks_leave_none_when_nothing_found():
    header = apply_well_name_fallbacks(WellHeader(), [], lambda: "")
    assert header.well_name is None


def test_md_only_takes_plain_numeric_tokens():
    table = Table.from_rows([["MD(ft)", "9850'", "9,850"]])
    assert extract_well_header(table).md == "9,850"


def _label_at(row_index, label, value):
    return Table.from_rows([["", ""]] * row_index + [[label, value]])


def test_header_labels_searched_in_first_25_rows():
    assert extract_well_header(_label_at(24, "Report No.", "R-1")).report_no == "R-1"
    assert extract_well_header(_label_at(25, "Report No.", "R-1")).report_no is None


def test_table_search_covers_first_15_rows():
    assert search_well_name_in_tables([_label_at(14, "Well No.", "BRAVO-3")]) == "BRAVO-3"
    assert search_well_name_in_tables([_label_at(15, "Well No.", "BRAVO-3")]) == ""


def test_rig_walk_is_not_the_rig_label():
    table = Table.from_rows([["Rig Walk", "Yes", "Rig", "Nabors 22"]])
    assert extract_well_header(table).rig == "Nabors 22"


def test_rig_activity_is_activity_only():
    header = extract_well_header(Table.from_rows([["Rig Activity", "Tripping"]]))
    assert header.activity == "Tripping"
    assert header.rig is None


def test_label_below_empty_value_is_not_taken():
    table = Table.from_rows([
        ["Report No.", ""],
        ["Report date", "9/26/2025"],
    ])
    header = extract_well_header(table)
    assert header.report_no is None
    assert header.report_date == "9/26/2025"
