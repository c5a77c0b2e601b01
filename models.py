# Records produced by the mud report extractor.

import re
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import List, Optional

WELL_HEADER_FIELDS = (
    'well_name', 'report_no', 'report_date', 'report_time', 'spud_date',
    'rig', 'activity', 'md', 'tvd', 'inc', 'azi', 'api_well_no',
)


def _tilde(*values):
    return '~'.join(v if v is not None else '' for v in values)


@dataclass
class WellHeader:
    well_name: Optional[str] = None
    report_no: Optional[str] = None
    report_date: Optional[str] = None
    report_time: Optional[str] = None
    spud_date: Optional[str] = None
    rig: Optional[str] = None
    activity: Optional[str] = None
    md: Optional[str] = None  # measured depth (ft)
    tvd: Optional[str] = None  # true vertical depth (ft)
    inc: Optional[str] = None  # inclination (deg)
    azi: Optional[str] = None  # azimuth (deg)
    api_well_no: Optional[str] = None

    def to_tilde_separated(self):
        return _tilde(self.well_name, self.report_no, self.report_date, self.report_time,
                      self.spud_date, self.md, self.tvd, self.inc, self.azi)


@dataclass
class MudProperty:
    property_name: str
    sample1: str = ''
    sample2: str = ''
    sample3: str = ''
    sample4: str = ''
    unit: Optional[str] = None

    def sample(self, index):
        # 1-based sample slot, None outside 1..4
        if index not in (1, 2, 3, 4):
            return None
        return getattr(self, f'sample{index}')

    def to_tilde_separated(self):
        return _tilde(self.property_name, self.sample1, self.sample2, self.sample3, self.sample4)


def unit_from_property_name(name):
    # "MW (ppg)" -> "ppg"
    m = re.search(r'\(([^()]{1,12})\)\s*$', name or '')
    return m.group(1).strip() if m else None


@dataclass
class Remark:
    remark_text: str = ''
    obm_on_location: Optional[str] = None
    wbm_tanks: Optional[str] = None

    def to_tilde_separated(self):
        return _tilde(self.remark_text, self.obm_on_location, self.wbm_tanks)


@dataclass
class Loss:
    category: str
    value: str = ''

    def to_tilde_separated(self):
        return _tilde(self.category, self.value)


@dataclass
class VolumeTrack:
    category: str
    value: str = ''

    def to_tilde_separated(self):
        return _tilde(self.category, self.value)


@dataclass
class ExtractionResult:
    source_file_name: str
    extraction_timestamp: str = field(
        default_factory=lambda: datetime.now().strftime('%Y-%m-%d %H:%M:%S'))
    well_header: WellHeader = field(default_factory=WellHeader)
    mud_properties: List[MudProperty] = field(default_factory=list)
    remark: Remark = field(default_factory=Remark)
    losses: List[Loss] = field(default_factory=list)
    volume_tracks: List[VolumeTrack] = field(default_factory=list)
    success: bool = False
    error_message: Optional[str] = None
    raw_text: Optional[str] = None

    def to_dict(self, include_raw=False):
        data = asdict(self)
        if not include_raw:
            data.pop('raw_text', None)
        return data
