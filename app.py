import logging
import os
import sqlite3
import tempfile

from flask import Flask, current_app, g, jsonify, request
from flask_cors import CORS
from werkzeug.utils import secure_filename

from config import ExtractionConfig
from file_export import export_all
from mud_report import build_mud_reports
from pdf_extractor import extract_from_pdf, save_result, setup_db, setup_logging

DB_PATH = os.environ.get("MUD_REPORT_DB", "mud_reports.db")

log = logging.getLogger(__name__)

app = Flask(__name__)
app.config["DB_PATH"] = DB_PATH
CORS(app)


def get_db():
    db = getattr(g, "_db", None)
    if db is None:
        db = g._db = sqlite3.connect(current_app.config["DB_PATH"], timeout=10, check_same_thread=False)
        db.row_factory = sqlite3.Row
        setup_db(db)
    return db


@app.teardown_appcontext
def close_db(_):
    db = getattr(g, "_db", None)
    if db is not None:
        db.close()


def _is_pdf(upload):
    return bool(upload and upload.filename and upload.filename.lower().endswith(".pdf"))


def _extract_upload(upload, config):
    # pdfplumber and pdf2image want a path, not a stream
    fd, path = tempfile.mkstemp(suffix=".pdf")
    os.close(fd)
    try:
        upload.save(path)
        result = extract_from_pdf(path, config)
    finally:
        os.remove(path)
    result.source_file_name = upload.filename
    return result


def _store(result):
    db = get_db()
    report_id = save_result(db, result)
    db.commit()
    return report_id


@app.get("/api/health")
def health():
    return jsonify({"ok": True})


@app.post("/api/extract")
def extract():
    upload = request.files.get("file")
    if not _is_pdf(upload):
        return jsonify({"error": "a PDF file is required"}), 400

    config = ExtractionConfig.from_env()
    result = _extract_upload(upload, config)
    if not result.success:
        return jsonify({"error": result.error_message or "extraction failed"}), 500

    base_name = os.path.splitext(secure_filename(upload.filename))[0] or "report"
    files = export_all(result, base_name, config.output_dir)
    report_id = _store(result)
    return jsonify({
        "report_id": report_id,
        "source_file_name": result.source_file_name,
        "well_name": result.well_header.well_name,
        "mud_properties": len(result.mud_properties),
        "losses": len(result.losses),
        "volume_tracks": len(result.volume_tracks),
        "remarks_chars": len(result.remark.remark_text or ""),
        "files": files,
    })


@app.post("/api/extract-json")
def extract_json():
    upload = request.files.get("file")
    if not _is_pdf(upload):
        return jsonify({"error": "a PDF file is required"}), 400

    result = _extract_upload(upload, ExtractionConfig.from_env())
    if not result.success:
        return jsonify(result.to_dict()), 500
    _store(result)
    return jsonify(result.to_dict(include_raw=request.args.get("raw") == "1"))


@app.post("/api/extract-mud-report")
def extract_mud_report():
    # one or many uploads, one flat record per report
    uploads = request.files.getlist("files") or request.files.getlist("file")
    uploads = [u for u in uploads if u and u.filename]
    if not uploads:
        return jsonify({"error": "no files uploaded"}), 400
    bad = [u.filename for u in uploads if not _is_pdf(u)]
    if bad:
        return jsonify({"error": "only PDF files are accepted", "files": bad}), 400

    config = ExtractionConfig.from_env()
    records, errors = [], []
    for upload in uploads:
        result = _extract_upload(upload, config)
        if not result.success:
            log.warning("Extraction failed for %s: %s", upload.filename, result.error_message)
            errors.append({"file": upload.filename, "error": result.error_message})
            continue
        records.extend(r.to_dict() for r in build_mud_reports(result))

    if errors and not records:
        return jsonify({"error": "extraction failed", "errors": errors}), 500
    return jsonify({"mud_data_list": records, "errors": errors})


@app.get("/api/reports")
def reports():
    db = get_db()
    rows = db.execute("""
        SELECT id, pdf_source, well_name, report_no, report_date, report_time, md, success
        FROM reports
        ORDER BY report_date IS NULL, report_date, id
    """).fetchall()
    return jsonify([dict(r) for r in rows])


@app.get("/api/reports/<int:report_id>")
def report_detail(report_id: int):
    db = get_db()
    report = db.execute("SELECT * FROM reports WHERE id = ?", (report_id,)).fetchone()
    if report is None:
        return jsonify({"error": "not found"}), 404

    def children(table):
        rows = db.execute(f"SELECT * FROM {table} WHERE report_id = ? ORDER BY id", (report_id,)).fetchall()
        return [dict(r) for r in rows]

    return jsonify({
        "report": dict(report),
        "mud_properties": children("mud_properties"),
        "losses": children("losses"),
        "volume_tracks": children("volume_tracks"),
    })


if __name__ == "__main__":
    setup_logging()
    app.run(host="127.0.0.1", port=5050, debug=True)
