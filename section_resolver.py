# Mud properties table and the LOSS / VOL. TRACK category lists.

import logging
from dataclasses import dataclass
from enum import Enum

from grid import (cell_text, find_col_with_text, find_row_with_text, smart_cell_text)
from models import Loss, MudProperty, VolumeTrack, unit_from_property_name

log = logging.getLogger(__name__)

HEADER_MUD_PROPERTIES = 'Properties'
HEADER_MUD_SAMPLE_1 = 'Sample 1'
KEYWORD_SAMPLE = 'Sample'
MUD_PROPERTY_STOPS = ('REMARKS', 'ANNULAR')

HEADER_ANNULAR_HYDRAULICS = 'ANNULAR HYDRAULICS'
SECTION_SCAN_ROWS = 30


class SectionKind(Enum):
    LOSS = 'loss'
    VOLUME_TRACK = 'volume_track'


@dataclass(frozen=True)
class SectionLayout:
    header: str
    anchor: str
    annular_cell: str
    noise: tuple
    stop_words: tuple
    record: type


SECTION_LAYOUTS = {
    SectionKind.LOSS: SectionLayout(
        header='LOSS',
        anchor='Cuttings/retention',
        annular_cell='Formation',
        noise=('LOSS', 'bbl'),
        stop_words=('Rig-up', 'LGS', 'HGS', 'OBM chemicals', 'SOLIDS', 'BIT',
                    'TIME', 'Drilling', 'Circulating'),
        record=Loss,
    ),
    SectionKind.VOLUME_TRACK: SectionLayout(
        header='VOL. TRACK',
        anchor='Start vol.',
        annular_cell='Returned',
        noise=('VOL', 'TRACK'),
        stop_words=('TIME', 'DISTRIBUTION'),
        record=VolumeTrack,
    ),
}


def find_mud_properties_row(table):
    row = find_row_with_text(table, HEADER_MUD_PROPERTIES)
    if row == -1:
        row = find_row_with_text(table, HEADER_MUD_SAMPLE_1)
    return row


def extract_mud_properties(table, header_row):
    properties = []
    name_col = find_col_with_text(table.row(header_row), (HEADER_MUD_PROPERTIES, KEYWORD_SAMPLE))
    if name_col == -1:
        name_col = 0

    for i in range(header_row + 1, table.row_count):
        text = table.row_text(i)
        if not text.strip() or any(stop in text for stop in MUD_PROPERTY_STOPS):
            break
        row = table.row(i)
        if len(row) <= name_col:
            continue
        name = cell_text(row, name_col)
        if not name or HEADER_MUD_PROPERTIES in name:
            continue
        properties.append(MudProperty(
            property_name=name,
            sample1=cell_text(row, name_col + 1),
            sample2=cell_text(row, name_col + 2),
            sample3=cell_text(row, name_col + 3),
            sample4=cell_text(row, name_col + 4),
            unit=unit_from_property_name(name),
        ))
    log.info("Extracted %d mud properties", len(properties))
    return properties


def find_section_start(table, kind):
    # data row holding the anchor, else the row after the section header
    layout = SECTION_LAYOUTS[kind]
    row = find_row_with_text(table, layout.anchor)
    if row != -1:
        return row
    row = find_row_with_text(table, layout.header)
    return row + 1 if row != -1 else -1


def extract_section_list(table, start_row, kind):
    layout = SECTION_LAYOUTS[kind]
    items = []
    if start_row < 0 or start_row >= table.row_count:
        return items

    category_col = find_col_with_text(table.row(start_row), (layout.anchor,))
    if category_col == -1:
        log.warning("Could not find %s anchor column", kind.value)
        return items
    log.info("Found %s category column at index %d (via anchor)", kind.value, category_col)

    for i in range(start_row, min(start_row + SECTION_SCAN_ROWS, table.row_count)):
        row = table.row(i)

        if HEADER_ANNULAR_HYDRAULICS in table.row_text(i):
            if any(cell_text(row, c) == layout.annular_cell for c in range(len(row))):
                items.append(layout.record(category=layout.annular_cell, value=''))
                log.info("Found %s in ANNULAR HYDRAULICS row", layout.annular_cell)
            continue

        category = smart_cell_text(row, category_col)
        if not category or any(n in category for n in layout.noise):
            continue
        if any(stop in category for stop in layout.stop_words):
            break
        items.append(layout.record(category=category, value=cell_text(row, category_col + 1)))

    log.info("Extracted %d %s entries", len(items), kind.value)
    return items
