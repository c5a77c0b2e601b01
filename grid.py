# Grid access, anchor search and value probing over extracted report tables.

import logging
import re
from dataclasses import dataclass

log = logging.getLogger(__name__)

# cells examined to the right of a label
RIGHT_VALUE_WINDOW = 6

NUMERIC_RE = re.compile(r'[0-9,./\s-]+')
UNIT_TOKENS = {':', '(ft)', '(deg)'}

# value resolution tiers, tried in this order
RIGHT = 'right'
BELOW = 'below'
ROW_SCAN = 'row_scan'
FULL_CHAIN = (RIGHT, BELOW, ROW_SCAN)
TEXT_CHAIN = (RIGHT, BELOW)


@dataclass(frozen=True)
class Table:
    rows: tuple = ()

    @classmethod
    def from_rows(cls, rows):
        # pdfplumber rows are lists of str or None
        return cls(tuple(
            tuple('' if c is None else str(c) for c in (row or ()))
            for row in (rows or ())
        ))

    @property
    def row_count(self):
        return len(self.rows)

    def row(self, index):
        if 0 <= index < len(self.rows):
            return self.rows[index]
        return ()

    def cell(self, row_index, col):
        return cell_text(self.row(row_index), col)

    def row_text(self, index):
        return row_text(self.row(index))


def cell_text(row, col):
    if 0 <= col < len(row):
        return (row[col] or '').strip()
    return ''


def row_text(row):
    return ' '.join((c or '').strip() for c in row)


def joined_cells_from(row, col):
    # non-empty cells from col to row end, space-joined
    return ' '.join(t for t in (cell_text(row, c) for c in range(col, len(row))) if t).strip()


def table_to_string(table):
    lines = [f"Table with {table.row_count} rows:"]
    for row in table.rows:
        lines.append('\t'.join(row))
    return '\n'.join(lines) + '\n'


def main_table(tables):
    # most rows wins, first one on ties
    best = None
    for table in tables or []:
        if table.row_count and (best is None or table.row_count > best.row_count):
            best = table
    return best


def find_row_with_text(table, text, start=0):
    for i in range(max(start, 0), table.row_count):
        if text in table.row_text(i):
            return i
    return -1


def find_col_with_text(row, texts, exclude=()):
    for col in range(len(row)):
        value = cell_text(row, col)
        if any(t in value for t in texts) and not any(x in value for x in exclude):
            return col
    return -1


def is_numeric_token(value):
    return bool(value) and NUMERIC_RE.fullmatch(value) is not None


def accepts_numeric(value):
    if is_numeric_token(value):
        return True
    return bool(re.search(r'\d', value)) and not re.search(r'[A-Za-z]', value)


def accepts_free_text(value):
    # short "(ft)"-style units are not values
    return '(' not in value or len(value) > 5


def extract_value_from_row(row, label_col, numeric_only=False):
    window = min(RIGHT_VALUE_WINDOW, len(row) - label_col - 1)
    log.debug("Cells right of col %d: %s", label_col,
              [cell_text(row, label_col + k) for k in range(1, window + 1)])
    for offset in range(1, window + 1):
        value = cell_text(row, label_col + offset)
        if not value or value in UNIT_TOKENS:
            continue
        if numeric_only:
            if accepts_numeric(value):
                return value
        elif accepts_free_text(value):
            return value
    return ''


def value_below(table, row_index, col, numeric_only=False, is_label=None):
    value = table.cell(row_index + 1, col)
    if value and ((numeric_only and not accepts_numeric(value)) or (is_label and is_label(value))):
        return ''
    return value


def find_numeric_value_in_row(row, label_col, accept=None):
    for col in range(label_col + 1, len(row)):
        value = cell_text(row, col)
        if is_numeric_token(value) and (accept is None or accept(value)):
            log.debug("Numeric value %r at col %d", value, col)
            return value
    return ''


def smart_cell_text(row, col):
    # target column, then one left, then one right
    for c in (col, col - 1, col + 1):
        if c < 0:
            continue
        text = cell_text(row, c)
        if text:
            return text
    return ''


def first_match(strategies, accept=None):
    # first non-empty, accepted result of an ordered strategy list
    for strategy in strategies:
        value = strategy()
        if value and (accept is None or accept(value)):
            return value
    return ''


def resolve_value(table, row_index, label_col, numeric_only=False, chain=FULL_CHAIN, accept=None,
                  is_label=None):
    # is_label rejects a cell below that is itself another label
    row = table.row(row_index)
    tiers = {
        RIGHT: lambda: extract_value_from_row(row, label_col, numeric_only),
        BELOW: lambda: value_below(table, row_index, label_col, numeric_only, is_label),
        ROW_SCAN: lambda: find_numeric_value_in_row(row, label_col, accept),
    }
    return first_match([tiers[name] for name in chain], accept)
