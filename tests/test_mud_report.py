import json
from datetime import datetime

from models import ExtractionResult, MudProperty, Remark, WellHeader
from mud_report import (build_mud_reports, convert_to_epoch, export_mud_report_json, find_latest_sample,
                        parse_float)


def _result(*properties, header=None):
    return ExtractionResult(
        source_file_name="test.pdf",
        well_header=header or WellHeader(),
        mud_properties=list(properties),
        success=True,
    )


def test_prefers_latest_sample_4():
    result = _result(MudProperty("MW (ppg)", "8.5", "9.0", "9.5", "10.0"))
    reports = build_mud_reports(result)
    assert len(reports) == 1
    assert reports[0].mud_weight == 10.0


def test_prefers_sample_3_when_sample_4_empty():
    result = _result(MudProperty("MW (ppg)", "8.5", "9.0", "9.5", ""))
    assert build_mud_reports(result)[0].mud_weight == 9.5


def test_falls_back_to_sample_1_when_others_blank():
    props = [MudProperty("MW (ppg)", "8.5", "", "", "   ")]
    assert find_latest_sample(props) == 1
    assert build_mud_reports(_result(*props))[0].mud_weight == 8.5


def test_all_samples_empty_keeps_header_only_record():
    header = WellHeader(report_date="01/01/2026", report_time="10:00")
    result = _result(MudProperty("MW (ppg)", "", " ", "", ""), header=header)
    assert find_latest_sample(result.mud_properties) == 0
    reports = build_mud_reports(result)
    assert len(reports) == 1
    assert reports[0].report_date is not None
    assert reports[0].check_date == "01/01/2026"
    assert reports[0].mud_weight is None


def test_no_mud_properties_gives_no_records():
    assert build_mud_reports(_result()) == []
    assert build_mud_reports(None) == []


def test_property_mapping_and_defaults():
    result = _result(
        MudProperty("Depth (ft)", "9,850"),
        MudProperty("Gel str. 10sec (lbf/100ft2)", "6"),
        MudProperty("YP (lbf/100ft2)", "14"),
        MudProperty("HTHP filtrate (mL/30min)", "4.2"),
        MudProperty("Electrical stability (V)", "650"),
        MudProperty("Chlorides (mg/L)", "n/a"),
        MudProperty("Unknown thing", "1"),
    )
    result.remark = Remark("Drilled ahead")
    report = build_mud_reports(result)[0]
    assert report.depth == 9850.0
    assert report.gels_10_sec == 6.0
    assert report.yield_point == 14.0
    assert report.api_water_loss == 4.2
    assert report.hthp_water_loss == 4.2
    assert report.electro_static_stability == 650.0
    assert report.chlorides_conc is None
    assert report.remarks == "Drilled ahead"
    assert report.file_path == "test.pdf"
    assert (report.company_name, report.fluid_name, report.phase) == ("NA", "NA", "NA")


def test_parse_float():
    assert parse_float(" 1,250.5 ") == 1250.5
    assert parse_float("") is None
    assert parse_float("abc") is None


def test_convert_to_epoch_accepts_single_digits():
    expected = int(datetime(2025, 9, 26, 6, 0).timestamp() * 1000)
    assert convert_to_epoch("9/26/2025", "6:00") == expected
    assert convert_to_epoch("09/26/2025", "06:00") == expected
    assert convert_to_epoch("26.09.2025", "6:00") is None


def test_export_json(tmp_path):
    result = _result(MudProperty("MW (ppg)", "9.6"))
    path = export_mud_report_json(result, str(tmp_path), "report_01")
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    assert len(data) == 1
    assert data[0]["mud_weight"] == 9.6
    assert path.endswith("_mud_report.json")
