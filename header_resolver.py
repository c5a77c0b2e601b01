# Well header resolution: label rules over the top rows of the main table,
# then document-level fallbacks for the well name.

import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional

from grid import (FULL_CHAIN, TEXT_CHAIN, cell_text, first_match, is_numeric_token, resolve_value,
                  row_text)
from models import WellHeader

log = logging.getLogger(__name__)

HEADER_SEARCH_ROWS = 25
WELL_NAME_SEARCH_ROWS = 15

# a well name holding these drifted into the next header column
WELL_NAME_NOISE = ('Field', 'Block', 'Section')

# md/azi holding "0" stay open for a better value
REVALIDATED_FIELDS = ('md', 'azi')

WELL_NAME_PATTERNS = (
    re.compile(r'(?:Well Name(?:/No\.?|/No|\.| )?)\s*[:~\-]?\s*(.*?)(?:\r?\n|$)', re.IGNORECASE),
    re.compile(r'(?<!API )Well No\.?\s*[:~\-]?\s*(.*?)(?:\r?\n|$)', re.IGNORECASE),
)
WELL_NAME_LINE_LABELS = ('well name', 'well name/no.', 'well no.')


def is_well_name_label(text):
    low = text.lower()
    return ('well name' in low or 'well no' in low) and 'api' not in low


def is_good_well_name(value):
    return not any(noise in value for noise in WELL_NAME_NOISE)


def _non_zero_token(value):
    return is_numeric_token(value) and value != '0'


@dataclass(frozen=True)
class LabelRule:
    field: str
    matches: Callable[[str], bool]
    numeric_only: bool = False
    chain: tuple = TEXT_CHAIN
    accept: Optional[Callable[[str], bool]] = None


# order matters: the first rule matching a cell consumes it
HEADER_RULES = (
    LabelRule('well_name', is_well_name_label, accept=is_good_well_name),
    LabelRule('report_no', lambda t: 'Report No.' in t or t == 'Report No'),
    LabelRule('report_date', lambda t: 'Report date' in t),
    LabelRule('report_time', lambda t: 'Report time' in t),
    LabelRule('spud_date', lambda t: 'Spud date' in t),
    LabelRule('rig', lambda t: t == 'Rig' or ('Rig' in t and 'Activity' not in t and 'Walk' not in t)),
    LabelRule('activity', lambda t: 'Activity' in t),
    LabelRule('md', lambda t: t in ('MD(ft)', 'MD (ft)'), True, FULL_CHAIN, _non_zero_token),
    LabelRule('tvd', lambda t: t in ('TVD(ft)', 'TVD (ft)'), True, FULL_CHAIN),
    LabelRule('inc', lambda t: 'Inc' in t and 'deg' in t, True, FULL_CHAIN),
    LabelRule('azi', lambda t: ('AZI' in t or 'Azi' in t) and ('deg' in t or '(' in t),
              True, FULL_CHAIN, _non_zero_token),
    LabelRule('api_well_no', lambda t: 'API well No' in t),
)


def match_rule(text):
    for rule in HEADER_RULES:
        if rule.matches(text):
            return rule
    return None


def is_header_label(text):
    return match_rule(text) is not None


def _is_open(header, field):
    current = getattr(header, field)
    if field in REVALIDATED_FIELDS:
        return not current or current == '0'
    return not current


def resolve_field(table, row_index, col, rule):
    value = resolve_value(table, row_index, col, rule.numeric_only, rule.chain, rule.accept,
                          is_header_label)
    if not value and rule.field in REVALIDATED_FIELDS:
        # no non-zero candidate in reach, settle for whatever is there
        value = resolve_value(table, row_index, col, rule.numeric_only, rule.chain, is_numeric_token,
                              is_header_label)
    return value


def extract_well_header(table):
    header = WellHeader()
    if table is None:
        return header

    for i in range(min(10, table.row_count)):
        row = table.row(i)
        log.debug("Row %d: %s", i, ' | '.join(f"[{c}]={cell_text(row, c)}" for c in range(len(row))))

    for i in range(min(HEADER_SEARCH_ROWS, table.row_count)):
        row = table.row(i)
        for col in range(len(row)):
            text = cell_text(row, col)
            if not text:
                continue
            rule = match_rule(text)
            if rule is None or not _is_open(header, rule.field):
                continue
            value = resolve_field(table, i, col, rule)
            if not value:
                log.debug("Row %d: label %r at col %d gave no value", i, text, col)
                continue
            setattr(header, rule.field, value)
            log.info("Row %d: %s = %r (label %r at col %d)", i, rule.field, value, text, col)
            if rule.field == 'well_name':
                log.info("Full row content: %s", row_text(row))
    return header


def _any_name_cell(row):
    for col in range(len(row)):
        value = cell_text(row, col)
        if (value and len(value) > 2 and 'Well Name' not in value
                and 'Well No.' not in value and 'Report' not in value):
            return value
    return ''


def search_well_name_in_tables(tables):
    # first 15 rows of every table, label then adjacent/next-row/any cell
    log.info("Searching %d tables for Well Name...", len(tables or []))
    for t_idx, table in enumerate(tables or []):
        for i in range(min(WELL_NAME_SEARCH_ROWS, table.row_count)):
            row = table.row(i)
            for col in range(len(row)):
                text = cell_text(row, col)
                if not is_well_name_label(text):
                    continue
                log.info("Table %d, row %d, col %d: well name label %r", t_idx, i, col, text)
                value = resolve_value(table, i, col, chain=TEXT_CHAIN, accept=is_good_well_name,
                                      is_label=is_header_label)
                if not value:
                    log.warning("Adjacent cells empty, searching all cells in row...")
                    value = _any_name_cell(row)
                if value:
                    log.info("Found Well Name in table %d: %r", t_idx, value)
                    return value
    log.warning("Well Name not found in any of the %d tables", len(tables or []))
    return ''


def _plausible_text_name(value):
    return bool(value) and 'report' not in value.lower() and len(value) > 2


def well_name_from_text(text):
    if not text:
        return ''
    for n, pattern in enumerate(WELL_NAME_PATTERNS, 1):
        m = pattern.search(text)
        if m and _plausible_text_name(m.group(1).strip()):
            log.info("Found Well Name via raw text (pattern %d): %r", n, m.group(1).strip())
            return m.group(1).strip()

    # label alone on its line, value on the next one
    lines = re.split(r'\r?\n', text)
    for i, line in enumerate(lines[:-1]):
        if line.strip().lower() in WELL_NAME_LINE_LABELS:
            nxt = lines[i + 1].strip()
            if _plausible_text_name(nxt):
                log.info("Found Well Name via raw text (next line): %r", nxt)
                return nxt
    return ''


def apply_well_name_fallbacks(header, tables, page_text):
    # page_text is called lazily, only when the tables gave nothing
    if header.well_name:
        return header
    log.warning("Well Name not found in main table, trying document-level fallbacks")
    value = first_match([
        lambda: search_well_name_in_tables(tables),
        lambda: well_name_from_text(page_text()),
    ])
    header.well_name = value or None
    return header
