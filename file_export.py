# Tilde-separated text exports of one extraction result.

import logging
import os
from datetime import datetime

log = logging.getLogger(__name__)

MUD_PROPERTIES_HEADER = 'Property Name~Sample 1~Sample 2~Sample 3~Sample 4'
REMARKS_HEADER = 'Remark Text~OBM on Location/Lease (bbl)~WBM Tanks (bbl)'
CATEGORY_HEADER = 'Category~Value (bbl)'


def _write_lines(path, header, records):
    with open(path, 'w', encoding='utf-8') as f:
        f.write(header + '\n')
        for record in records:
            f.write(record.to_tilde_separated() + '\n')
    log.info("Wrote %d records to %s", len(records), path)


def export_raw_text(text, path):
    with open(path, 'w', encoding='utf-8') as f:
        f.write(text)
    return path


def export_all(result, base_name, output_dir):
    """Write the four section files (and raw text when present) for one result.

    Returns the list of written paths.
    """
    os.makedirs(output_dir, exist_ok=True)
    ts = datetime.now().strftime('%Y%m%d_%H%M%S')

    def path_for(suffix):
        return os.path.join(output_dir, f"{base_name}_{ts}_{suffix}")

    written = []
    sections = (
        ('mud_properties.txt', MUD_PROPERTIES_HEADER, result.mud_properties or []),
        ('remarks.txt', REMARKS_HEADER, [result.remark] if result.remark is not None else []),
        ('loss.txt', CATEGORY_HEADER, result.losses or []),
        ('volume_track.txt', CATEGORY_HEADER, result.volume_tracks or []),
    )
    for suffix, header, records in sections:
        path = path_for(suffix)
        _write_lines(path, header, records)
        written.append(path)

    if result.raw_text is not None:
        written.append(export_raw_text(result.raw_text, path_for('raw_text.txt')))

    log.info("Exported %s to %d files in %s", base_name, len(written), output_dir)
    return written
