# Flat mud report record built from the latest mud sample of a report.

import json
import logging
import os
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Optional

log = logging.getLogger(__name__)

SAMPLE_SLOTS = (4, 3, 2, 1)
DATE_FORMATS = ('%m/%d/%Y',)
TIME_FORMATS = ('%H:%M',)
DEFAULT_TEXT = 'NA'


@dataclass
class MudReport:
    mud_weight: Optional[float] = None
    depth: Optional[float] = None
    api_water_loss: Optional[float] = None
    company_name: Optional[str] = None
    check_date: Optional[str] = None
    fluid_name: Optional[str] = None
    gels_10_min: Optional[float] = None
    gels_10_sec: Optional[float] = None
    gels_30_min: Optional[float] = None
    percent_water: Optional[float] = None
    percent_oil: Optional[float] = None
    plastic_viscosity: Optional[float] = None
    viscosity_funnel: Optional[float] = None
    yield_point: Optional[float] = None
    percent_high_gravity_solids: Optional[float] = None
    percent_low_gravity_solids: Optional[float] = None
    ph_value: Optional[float] = None
    chlorides_conc: Optional[float] = None
    electro_static_stability: Optional[float] = None
    hthp_water_loss: Optional[float] = None
    phase: Optional[str] = None
    filter_cake_hthp: Optional[float] = None
    filter_cake_ltlp: Optional[float] = None
    report_date: Optional[int] = None  # epoch millis, local time
    remarks: Optional[str] = None
    file_path: Optional[str] = None
    days: Optional[float] = None

    def to_dict(self):
        return asdict(self)


def _has(*words):
    return lambda name: all(w in name for w in words)


def _any(*tests):
    return lambda name: any(t(name) for t in tests)


# first matching rule wins; a rule may fill several fields
PROPERTY_RULES = (
    (_has('MW', 'ppg'), ('mud_weight',)),
    (_has('Depth', 'ft'), ('depth',)),
    (_has('Gel str.', '10min'), ('gels_10_min',)),
    (_has('Gel str.', '10sec'), ('gels_10_sec',)),
    (_has('Gel str.', '30min'), ('gels_30_min',)),
    (_has('Water', '%'), ('percent_water',)),
    (_has('Oil', '%'), ('percent_oil',)),
    (_has('PV', 'cP'), ('plastic_viscosity',)),
    (_has('Funnel visc'), ('viscosity_funnel',)),
    (_has('YP', 'lbf'), ('yield_point',)),
    (_has('High gravity solids'), ('percent_high_gravity_solids',)),
    (_any(_has('Low gravity solids'), _has('Solids', 'adjusted')), ('percent_low_gravity_solids',)),
    (_any(_has('pH'), _has('Alkalinity', 'mud')), ('ph_value',)),
    (_has('Chlorides'), ('chlorides_conc',)),
    (_any(_has('Electrostatic'), _has('ESS'), _has('Electrical')), ('electro_static_stability',)),
    (_has('HTHP', 'filtrate'), ('api_water_loss', 'hthp_water_loss')),
    (_has('Filter cake', 'HTHP'), ('filter_cake_hthp',)),
    (_has('Filter cake', 'LTLP'), ('filter_cake_ltlp',)),
)


def parse_float(value):
    if value is None or not value.strip():
        return None
    try:
        return float(value.strip().replace(',', ''))
    except ValueError:
        log.debug("Could not parse %r as float", value)
        return None


def _parse_with(value, formats):
    for fmt in formats:
        try:
            return datetime.strptime(value.strip(), fmt)
        except ValueError:
            continue
    raise ValueError(f"unrecognised value {value!r}")


def convert_to_epoch(date_str, time_str):
    # "9/26/2025" + "6:00" -> epoch millis in local time, None when unparseable
    try:
        date = _parse_with(date_str, DATE_FORMATS)
        time = _parse_with(time_str, TIME_FORMATS)
    except (ValueError, AttributeError) as e:
        log.warning("Could not parse date/time: %s %s (%s)", date_str, time_str, e)
        return None
    moment = datetime.combine(date.date(), time.time())
    return int(moment.timestamp() * 1000)


def _has_sample_data(properties, index):
    return any((p.sample(index) or '').strip() for p in properties)


def find_latest_sample(properties):
    # highest slot 4..1 holding any value, 0 when all are empty
    for index in SAMPLE_SLOTS:
        if _has_sample_data(properties, index):
            return index
    return 0


def map_property(report, property_name, value):
    name = property_name.strip()
    for matches, fields in PROPERTY_RULES:
        if matches(name):
            number = parse_float(value)
            for f in fields:
                setattr(report, f, number)
            return fields
    return ()


def build_mud_report(result, sample_index):
    report = MudReport()
    header = result.well_header
    if header is not None:
        if header.report_date and header.report_time:
            report.report_date = convert_to_epoch(header.report_date, header.report_time)
        if header.report_date:
            report.check_date = header.report_date

    if sample_index > 0:
        for prop in result.mud_properties or []:
            value = prop.sample(sample_index)
            if value and value.strip():
                map_property(report, prop.property_name, value)

    if result.remark is not None and result.remark.remark_text:
        report.remarks = result.remark.remark_text
    report.file_path = result.source_file_name

    report.company_name = report.company_name or DEFAULT_TEXT
    report.fluid_name = report.fluid_name or DEFAULT_TEXT
    report.phase = report.phase or DEFAULT_TEXT
    return report


def build_mud_reports(result):
    if result is None or not result.mud_properties:
        log.warning("No mud properties found in extraction result")
        return []

    index = find_latest_sample(result.mud_properties)
    if index:
        log.info("Mud report from latest sample %d of %s", index, result.source_file_name)
    else:
        log.warning("Samples 1-4 empty, mud report carries header information only")
    return [build_mud_report(result, index)]


def export_mud_reports_json(reports, output_path):
    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump([r.to_dict() for r in reports], f, indent=2)
    log.info("Exported %d mud reports to %s", len(reports), output_path)
    return output_path


def export_mud_report_json(result, output_dir, base_name):
    os.makedirs(output_dir, exist_ok=True)
    ts = datetime.now().strftime('%Y%m%d_%H%M%S')
    path = os.path.join(output_dir, f"{base_name}_{ts}_mud_report.json")
    return export_mud_reports_json(build_mud_reports(result), path)
