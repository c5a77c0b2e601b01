from grid import Table
from models import Loss, VolumeTrack
from section_resolver import (SectionKind, extract_mud_properties, extract_section_list,
                              find_mud_properties_row, find_section_start)


def _mud_table(*tail):
    return Table.from_rows([
        ["Properties", "Sample 1", "Sample 2", "Sample 3", "Sample 4"],
        ["MW (ppg)", "9.6", "9.7", "", ""],
        ["Funnel visc (s/qt)", "55", "56", "", ""],
        *tail,
    ])


def test_mud_properties_stop_at_blank_row():
    table = _mud_table(["", "", "", "", ""], ["Chlorides (mg/L)", "1", "", "", ""])
    row = find_mud_properties_row(table)
    assert row == 0
    props = extract_mud_properties(table, row)
    assert [p.property_name for p in props] == ["MW (ppg)", "Funnel visc (s/qt)"]
    assert props[0].sample2 == "9.7"
    assert props[0].unit == "ppg"
    assert props[1].unit == "s/qt"


def test_mud_properties_stop_at_remarks():
    table = _mud_table(["REMARKS", "", "", "", ""], ["Chlorides (mg/L)", "1", "", "", ""])
    assert len(extract_mud_properties(table, 0)) == 2


def test_mud_properties_header_found_via_sample_column():
    table = Table.from_rows([
        ["", "Sample 1", "Sample 2"],
        ["", "Sample", ""],
    ])
    assert find_mud_properties_row(table) == 0
    assert find_mud_properties_row(Table.from_rows([["nothing"]])) == -1


def test_loss_list_with_annular_row_and_stop():
    table = Table.from_rows([
        ["LOSS (bbl)", ""],
        ["Cuttings/retention", "12"],
        ["Seepage", "3.5"],
        ["ANNULAR HYDRAULICS", "Formation"],
        ["Surface", "0"],
        ["Rig-up", ""],
        ["Other", "1"],
    ])
    start = find_section_start(table, SectionKind.LOSS)
    assert start == 1
    assert extract_section_list(table, start, SectionKind.LOSS) == [
        Loss("Cuttings/retention", "12"),
        Loss("Seepage", "3.5"),
        Loss("Formation", ""),
        Loss("Surface", "0"),
    ]


def test_volume_track_list():
    table = Table.from_rows([
        ["VOL. TRACK", ""],
        ["Start vol.", "1,200"],
        ["Mud received", "300"],
        ["ANNULAR HYDRAULICS", "Returned"],
        ["End vol.", "1,450"],
        ["TIME DISTRIBUTION", ""],
        ["Later", "9"],
    ])
    start = find_section_start(table, SectionKind.VOLUME_TRACK)
    items = extract_section_list(table, start, SectionKind.VOLUME_TRACK)
    assert items == [
        VolumeTrack("Start vol.", "1,200"),
        VolumeTrack("Mud received", "300"),
        VolumeTrack("Returned", ""),
        VolumeTrack("End vol.", "1,450"),
    ]


def test_category_read_from_neighbouring_column():
    table = Table.from_rows([
        ["", "Cuttings/retention", "12"],
        ["Seepage", "", "2"],
    ])
    items = extract_section_list(table, 0, SectionKind.LOSS)
    assert items == [Loss("Cuttings/retention", "12"), Loss("Seepage", "2")]


def test_section_start_falls_back_to_header_row():
    table = Table.from_rows([["LOSS"], ["Seepage", "2"]])
    assert find_section_start(table, SectionKind.LOSS) == 1
    # no anchor in the start row, nothing to read
    assert extract_section_list(table, 1, SectionKind.LOSS) == []


def test_missing_section_is_empty():
    table = Table.from_rows([["nothing"]])
    assert find_section_start(table, SectionKind.VOLUME_TRACK) == -1
    assert extract_section_list(table, -1, SectionKind.VOLUME_TRACK) == []


def test_loss_stop_word_ends_list():
    table = Table.from_rows([
        ["Cuttings/retention", "12"],
        ["BIT", "4"],
        ["Seepage", "3"],
    ])
    assert extract_section_list(table, 0, SectionKind.LOSS) == [Loss("Cuttings/retention", "12")]


def test_section_walk_reads_30_rows_from_start():
    rows = [["Cuttings/retention", "0"]] + [[f"Item {i}", str(i)] for i in range(1, 31)]
    items = extract_section_list(Table.from_rows(rows), 0, SectionKind.LOSS)
    assert len(items) == 30
    assert items[-1] == Loss("Item 29", "29")
    assert Loss("Item 30", "30") not in items
