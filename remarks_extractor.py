# Remarks narrative: table walk, region text slicing, and arbitration
# between the two candidates.

import logging
import re
from dataclasses import replace

from grid import find_col_with_text, first_match, joined_cells_from
from models import Remark

log = logging.getLogger(__name__)

LABEL_REMARKS = 'REMARKS'
LABEL_RECOMMENDED = 'RECOMMENDED'
REMARKS_CONTENT_ANCHORS = ('Run production casing', 'Circulate casing')
CONTENT_ANCHOR_ROWS = 4
REMARKS_SCAN_ROWS = 30
REMARKS_TABLE_STOPS = ('ADDITION', 'LOSS', 'VOL. TRACK')

OBM_LABEL = 'OBM on Location/Lease'
WBM_LABEL = 'WBM Tanks'
PATTERN_OBM = re.compile(r'(OBM on Location/Lease.*?:\s*([\d,/.\s]+))')
PATTERN_WBM = re.compile(r'(WBM Tanks.*?:\s*(.+))')
PUNCTUATION_ONLY = re.compile(r'^[\s,:]+$')

# sections that can follow REMARKS in page text; nearest one ends the block
NEXT_SECTION_HEADERS = (
    'RECOMMENDED TOUR TREATMENTS',
    'ADDITION',
    'LOSS',
    'VOL. TRACK',
    'SOLIDS ANALYSIS',
    'BIT HYDRAULICS',
    'TIME DISTRIBUTION',
    'ANNULAR HYDRAULICS',
    'ENGINEERING',
    'INVENTORY',
    'MUD PROPERTIES',
    'DRILL STRING',
    'CASING',
    'PUMP',
    'SOLID CONTR',
    'Cuttings/retention',
    'Start vol.',
)

# points left of the page centre still read as right half
RIGHT_HALF_MARGIN = 20


def find_remarks_column(table, header_row):
    header = table.row(header_row)
    col = find_col_with_text(header, (LABEL_REMARKS,), exclude=(LABEL_RECOMMENDED,))
    if col != -1:
        log.info("Found REMARKS header at column %d", col)
        return col

    for i in range(header_row + 1, min(header_row + 1 + CONTENT_ANCHOR_ROWS, table.row_count)):
        col = find_col_with_text(table.row(i), REMARKS_CONTENT_ANCHORS)
        if col != -1:
            log.info("Found REMARKS column via content anchor at index %d", col)
            return col

    if not header:
        return -1
    col = len(header) // 2
    log.warning("Could not find REMARKS column, defaulting to middle column index %d", col)
    return col


def _excise(line, clean, label, pattern):
    # drop "label ...: qty" from clean, return (clean, qty)
    m = pattern.search(line)
    if m:
        return clean.replace(m.group(1), ''), m.group(2).strip()
    parts = line.split(':')
    if len(parts) > 1:
        qty = parts[1].strip()
        clean = clean.replace(label, '').replace('(bbl)', '').replace(':', '')
        if qty:
            clean = clean.replace(qty, '')
        return clean, qty
    return clean, None


def strip_embedded_quantities(line):
    # returns (narrative, obm qty, wbm qty)
    clean = line
    obm = wbm = None
    if OBM_LABEL in line:
        clean, obm = _excise(line, clean, OBM_LABEL, PATTERN_OBM)
    if WBM_LABEL in line:
        clean, wbm = _excise(line, clean, WBM_LABEL, PATTERN_WBM)
    return clean.strip(), obm, wbm


def extract_remarks_from_table(table, header_row):
    remark = Remark()
    col = find_remarks_column(table, header_row)
    if col == -1:
        return remark

    lines = []
    for i in range(header_row + 1, min(header_row + REMARKS_SCAN_ROWS, table.row_count)):
        if any(stop in table.row_text(i) for stop in REMARKS_TABLE_STOPS):
            break

        # remarks spill into the columns right of the anchor
        combined = joined_cells_from(table.row(i), col)
        if not combined:
            continue

        for raw_line in re.split(r'\r?\n', combined):
            raw_line = raw_line.strip()
            if not raw_line:
                continue
            clean, obm, wbm = strip_embedded_quantities(raw_line)
            if obm and remark.obm_on_location is None:
                remark.obm_on_location = obm
            if wbm and remark.wbm_tanks is None:
                remark.wbm_tanks = wbm
            if clean and not PUNCTUATION_ONLY.match(clean) and LABEL_RECOMMENDED not in clean:
                lines.append(clean)

    remark.remark_text = '\n'.join(lines)
    log.info("Table remarks: %d lines, %d chars", len(lines), len(remark.remark_text))
    return remark


def clean_remarks_text(text):
    if not text:
        return ''
    text = re.sub(r'\r\n?', '\n', text)
    # adjacent table values, not narrative
    text = re.sub(r'(?:OBM on Location/Lease|WBM Tanks).*', '', text)
    text = re.sub(r'[ \t]+', ' ', text)
    text = '\n'.join(line.strip() for line in text.split('\n'))
    text = re.sub(r'\n{2,}', '\n', text)
    return text.strip()


def extract_remarks_from_text(text):
    if not text or not text.strip():
        return ''
    m = re.search(LABEL_REMARKS, text, re.IGNORECASE)
    if not m:
        log.debug("REMARKS header not found in text")
        return ''
    after = text[m.end():]

    stop = len(after)
    for header in NEXT_SECTION_HEADERS:
        idx = after.find(header)
        if idx != -1 and idx < stop:
            stop = idx
    return clean_remarks_text(after[:stop])


def parse_region_remarks(text):
    # fixed crops (text or ocr) usually hold the remarks body without its header
    if text and re.search(LABEL_REMARKS, text, re.IGNORECASE):
        return extract_remarks_from_text(text)
    return clean_remarks_text(text)


def _guarded(name, fetch):
    def run():
        try:
            value = fetch()
        except Exception as e:
            log.error("Remarks source '%s' failed: %s", name, e)
            return ''
        log.info("Remarks source '%s': %d chars", name, len(value or ''))
        return value
    return run


def remarks_text_sources(document, config):
    # ordered text sources for the remarks block on page 1
    def right_half():
        width, height = document.page_size(1)
        bbox = (width / 2 - RIGHT_HALF_MARGIN, 0, width, height)
        return extract_remarks_from_text(document.extract_region_text(1, bbox))

    sources = []
    if config.remarks_region:
        sources.append(('fixed region', lambda: parse_region_remarks(
            document.extract_region_text(1, config.remarks_bbox()))))
    sources.append(('right half', right_half))
    sources.append(('whole page', lambda: extract_remarks_from_text(
        document.extract_text(1, 1))))
    if config.ocr_enabled and config.remarks_region:
        sources.append(('ocr', lambda: parse_region_remarks(
            document.ocr_region(1, config.remarks_region, config.source_dpi))))
    return [_guarded(name, fetch) for name, fetch in sources]


def extract_region_remarks(document, config):
    if not config.text_remarks_enabled:
        return ''
    return first_match(remarks_text_sources(document, config))


def arbitrate_remarks(table_remark, text_remarks):
    # longer narrative wins, ties keep the table result
    table_text = (table_remark.remark_text if table_remark else '') or ''
    text_remarks = text_remarks or ''
    if len(text_remarks) > len(table_text):
        log.info("Text extraction is better (text: %d chars vs table: %d chars)",
                 len(text_remarks), len(table_text))
        return replace(table_remark or Remark(), remark_text=text_remarks)
    log.info("Table extraction is better or equal (text: %d chars vs table: %d chars)",
             len(text_remarks), len(table_text))
    return table_remark or Remark()
