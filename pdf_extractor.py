#!/usr/bin/env python3
# Extract daily mud report data (header, mud properties, remarks, losses,
# volume track) from PDFs into SQLite and tilde/JSON exports.

import argparse
import logging
import os
import sqlite3
from concurrent.futures import ProcessPoolExecutor
from pathlib import Path

import pdfplumber
import pytesseract
from pdf2image import convert_from_path

from config import ExtractionConfig
from file_export import export_all
from grid import Table, find_row_with_text, main_table, table_to_string
from header_resolver import apply_well_name_fallbacks, extract_well_header
from models import ExtractionResult
from mud_report import export_mud_report_json
from remarks_extractor import LABEL_REMARKS, arbitrate_remarks, extract_region_remarks, extract_remarks_from_table
from section_resolver import (SectionKind, extract_mud_properties, extract_section_list,
                              find_mud_properties_row, find_section_start)

PDF_DIR = "pdfs"
DB_PATH = "mud_reports.db"

log = logging.getLogger(__name__)


def setup_logging(level=logging.INFO):
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-8s %(message)s",
        datefmt="%H:%M:%S"
    )
    # pdfminer logs every font and layout decision
    logging.getLogger("pdfminer").setLevel(logging.ERROR)


class PdfDocument:
    # pdfplumber-backed reader the resolvers pull tables and text from

    def __init__(self, path, config=None):
        self.path = str(path)
        self.config = config or ExtractionConfig()
        if self.config.tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = self.config.tesseract_cmd
        self._pdf = pdfplumber.open(self.path)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def close(self):
        self._pdf.close()

    def _page(self, page_no):
        return self._pdf.pages[page_no - 1]

    def extract_tables(self):
        tables = []
        for n, page in enumerate(self._pdf.pages, 1):
            found = [Table.from_rows(t) for t in page.extract_tables()]
            log.info("Extracted %d tables from page %d", len(found), n)
            tables.extend(found)
        return tables

    def extract_text(self, first_page=1, last_page=1):
        pages = self._pdf.pages[first_page - 1:last_page]
        return "\n".join(page.extract_text() or "" for page in pages)

    def page_size(self, page_no):
        page = self._page(page_no)
        return float(page.width), float(page.height)

    def extract_region_text(self, page_no, bbox):
        # clamp to the page box, pdfplumber rejects crops outside it
        page = self._page(page_no)
        px0, ptop, px1, pbottom = page.bbox
        x0, top, x1, bottom = bbox
        box = (max(x0, px0), max(top, ptop), min(x1, px1), min(bottom, pbottom))
        if box[0] >= box[2] or box[1] >= box[3]:
            return ""
        return page.crop(box).extract_text() or ""

    def ocr_region(self, page_no, pixel_box, dpi):
        images = convert_from_path(self.path, dpi=dpi, first_page=page_no, last_page=page_no)
        if not images:
            return ""
        image = images[0]
        x, y, w, h = pixel_box
        crop = image.crop((max(x, 0), max(y, 0), min(x + w, image.width), min(y + h, image.height)))
        if self.config.ocr_debug_image:
            crop.save(self.config.ocr_debug_image)
            log.info("Saved OCR crop to %s", self.config.ocr_debug_image)
        return pytesseract.image_to_string(crop).strip()


def resolve_main_table(table, result):
    # header first, then each section from its own anchor
    result.well_header = extract_well_header(table)

    row = find_mud_properties_row(table)
    if row != -1:
        result.mud_properties = extract_mud_properties(table, row)

    row = find_row_with_text(table, LABEL_REMARKS)
    if row != -1:
        result.remark = extract_remarks_from_table(table, row)

    result.losses = extract_section_list(table, find_section_start(table, SectionKind.LOSS), SectionKind.LOSS)
    result.volume_tracks = extract_section_list(
        table, find_section_start(table, SectionKind.VOLUME_TRACK), SectionKind.VOLUME_TRACK)
    return result


def resolve_document(document, source_name, config):
    """Run every resolver over one opened document.

    A document whose tables cannot be read comes back with success=False and
    the error message; everything past that point degrades to empty fields.
    """
    result = ExtractionResult(source_file_name=source_name)
    try:
        tables = document.extract_tables()
    except Exception as e:
        log.error("Error extracting tables from %s: %s", source_name, e)
        result.error_message = str(e)
        return result

    result.raw_text = "".join(table_to_string(t) + "\n\n" for t in tables)

    def page_text():
        try:
            return document.extract_text(1, 1)
        except Exception as e:
            log.error("Error extracting raw text from %s: %s", source_name, e)
            return ""

    table = main_table(tables)
    if table is not None:
        log.info("Processing main table with %d rows", table.row_count)
        resolve_main_table(table, result)
        apply_well_name_fallbacks(result.well_header, tables, page_text)
    else:
        log.warning("No main data table found in %s", source_name)

    if config.text_remarks_enabled:
        result.remark = arbitrate_remarks(result.remark, extract_region_remarks(document, config))

    result.success = True
    log.info("Extracted %s: %d mud properties, %d losses, %d volume entries",
             source_name, len(result.mud_properties), len(result.losses), len(result.volume_tracks))
    return result


def extract_from_pdf(pdf_path, config=None):
    config = config or ExtractionConfig.from_env()
    name = os.path.basename(str(pdf_path))
    log.info("Extracting tables from PDF: %s", name)
    try:
        document = PdfDocument(pdf_path, config)
    except Exception as e:
        log.error("Error opening %s: %s", name, e)
        return ExtractionResult(source_file_name=name, error_message=str(e))
    with document:
        return resolve_document(document, name, config)


def setup_db(conn):
    # reports plus one child table per repeated section
    conn.executescript("""
    CREATE TABLE IF NOT EXISTS reports (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        pdf_source TEXT UNIQUE,
        well_name TEXT,
        report_no TEXT,
        report_date TEXT,
        report_time TEXT,
        spud_date TEXT,
        rig TEXT,
        activity TEXT,
        md TEXT,
        tvd TEXT,
        inc TEXT,
        azi TEXT,
        api_well_no TEXT,
        remark_text TEXT,
        obm_on_location TEXT,
        wbm_tanks TEXT,
        success INTEGER,
        error_message TEXT,
        extraction_timestamp TEXT,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    );
    CREATE TABLE IF NOT EXISTS mud_properties (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        report_id INTEGER NOT NULL,
        property_name TEXT,
        unit TEXT,
        sample1 TEXT,
        sample2 TEXT,
        sample3 TEXT,
        sample4 TEXT,
        FOREIGN KEY (report_id) REFERENCES reports(id)
    );
    CREATE TABLE IF NOT EXISTS losses (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        report_id INTEGER NOT NULL,
        category TEXT,
        value TEXT,
        FOREIGN KEY (report_id) REFERENCES reports(id)
    );
    CREATE TABLE IF NOT EXISTS volume_tracks (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        report_id INTEGER NOT NULL,
        category TEXT,
        value TEXT,
        FOREIGN KEY (report_id) REFERENCES reports(id)
    );
    CREATE INDEX IF NOT EXISTS idx_reports_well ON reports(well_name);
    CREATE INDEX IF NOT EXISTS idx_mud_report ON mud_properties(report_id);
    CREATE INDEX IF NOT EXISTS idx_loss_report ON losses(report_id);
    CREATE INDEX IF NOT EXISTS idx_vol_report ON volume_tracks(report_id);
    """)


HEADER_COLS = (
    'well_name', 'report_no', 'report_date', 'report_time', 'spud_date', 'rig',
    'activity', 'md', 'tvd', 'inc', 'azi', 'api_well_no',
)

REPORT_COLS = HEADER_COLS + (
    'remark_text', 'obm_on_location', 'wbm_tanks', 'success', 'error_message',
    'extraction_timestamp', 'pdf_source',
)

MUD_COLS = ('report_id', 'property_name', 'unit', 'sample1', 'sample2', 'sample3', 'sample4')
CATEGORY_COLS = ('report_id', 'category', 'value')


def _report_row(result):
    header = result.well_header
    remark = result.remark
    data = {c: getattr(header, c) for c in HEADER_COLS}
    data.update(
        remark_text=remark.remark_text if remark else None,
        obm_on_location=remark.obm_on_location if remark else None,
        wbm_tanks=remark.wbm_tanks if remark else None,
        success=int(result.success),
        error_message=result.error_message,
        extraction_timestamp=result.extraction_timestamp,
        pdf_source=result.source_file_name,
    )
    return tuple(data[c] for c in REPORT_COLS)


def _insert_many(cur, table, cols, rows):
    cur.executemany(
        f"INSERT INTO {table} ({','.join(cols)}) VALUES ({','.join(['?'] * len(cols))})",
        rows,
    )


def save_result(conn, result):
    # same pdf: overwrite the report and its child rows
    cur = conn.cursor()
    update_str = ','.join(f'{c}=excluded.{c}' for c in REPORT_COLS if c != 'pdf_source')
    cur.execute(
        f"INSERT INTO reports ({','.join(REPORT_COLS)}) VALUES ({','.join(['?'] * len(REPORT_COLS))}) "
        f"ON CONFLICT(pdf_source) DO UPDATE SET {update_str}",
        _report_row(result),
    )
    cur.execute("SELECT id FROM reports WHERE pdf_source=?", (result.source_file_name,))
    report_id = cur.fetchone()[0]

    for table in ('mud_properties', 'losses', 'volume_tracks'):
        cur.execute(f"DELETE FROM {table} WHERE report_id=?", (report_id,))
    _insert_many(cur, 'mud_properties', MUD_COLS, [
        (report_id, p.property_name, p.unit, p.sample1, p.sample2, p.sample3, p.sample4)
        for p in result.mud_properties
    ])
    _insert_many(cur, 'losses', CATEGORY_COLS,
                 [(report_id, item.category, item.value) for item in result.losses])
    _insert_many(cur, 'volume_tracks', CATEGORY_COLS,
                 [(report_id, item.category, item.value) for item in result.volume_tracks])
    return report_id


def _extract_one(args):
    pdf_path, config = args
    return extract_from_pdf(pdf_path, config)


def extract_many(pdf_paths, config, workers=1):
    # results come back in input order
    jobs = [(str(p), config) for p in pdf_paths]
    if workers and workers > 1:
        with ProcessPoolExecutor(max_workers=workers) as pool:
            return list(pool.map(_extract_one, jobs))
    return [_extract_one(job) for job in jobs]


def main(argv=None):
    # discover PDFs, extract each, upsert reports and section rows
    parser = argparse.ArgumentParser(description="Extract daily mud report data from PDFs")
    parser.add_argument('--pdf-dir', default=PDF_DIR)
    parser.add_argument('--db-path', default=DB_PATH)
    parser.add_argument('--limit', type=int, default=None, help="Only process first N PDFs")
    parser.add_argument('--files', type=str, default=None, help="Comma-separated PDF filenames (e.g. report_01.pdf,report_02.pdf)")
    parser.add_argument('--output-dir', default=None, help="Export directory (default: EXPORT_OUTPUT_DIR or 'output')")
    parser.add_argument('--export-txt', action='store_true', help="Write tilde-separated section files per PDF")
    parser.add_argument('--json', action='store_true', help="Write a mud report JSON file per PDF")
    parser.add_argument('--workers', type=int, default=1, help="Parallel worker processes")
    args = parser.parse_args(argv)

    setup_logging()
    config = ExtractionConfig.from_env()
    output_dir = args.output_dir or config.output_dir

    pdf_dir = Path(args.pdf_dir).resolve()
    if not pdf_dir.exists():
        log.error("Directory not found: %s", pdf_dir)
        return 1

    pdf_files = sorted(pdf_dir.glob('*.pdf'))
    if args.files:
        names = {n.strip() for n in args.files.split(',') if n.strip()}
        pdf_files = [p for p in pdf_files if p.name in names]
    if args.limit:
        pdf_files = pdf_files[:args.limit]
    if not pdf_files:
        log.error("No PDFs found in %s", pdf_dir)
        return 1

    conn = sqlite3.connect(str(Path(args.db_path).resolve()))
    setup_db(conn)

    saved = failed = 0
    for pdf_path, result in zip(pdf_files, extract_many(pdf_files, config, args.workers)):
        if not result.success:
            log.warning("  %s failed: %s", pdf_path.name, result.error_message)
            failed += 1
        try:
            save_result(conn, result)
            saved += 1
        except sqlite3.Error as e:
            log.warning("  Could not save %s: %s", pdf_path.name, e)
            continue

        base_name = pdf_path.stem
        if args.export_txt and result.success:
            export_all(result, base_name, output_dir)
        if args.json and result.success:
            export_mud_report_json(result, output_dir, base_name)

    conn.commit()
    log.info("Done. Saved %d reports (%d failed).", saved, failed)
    cur = conn.execute("SELECT COUNT(*) FROM reports")
    log.info("Total reports: %d", cur.fetchone()[0])
    cur = conn.execute("SELECT COUNT(*) FROM mud_properties")
    log.info("Mud property rows: %d", cur.fetchone()[0])
    conn.close()
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
