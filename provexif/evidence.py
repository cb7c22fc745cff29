# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Provenance evidence record

The EvidenceRecord groups everything extracted from one JPEG into
sections (temporal, GPS, device, image, camera, processing, authorship,
authenticity). Sections start empty and are filled field by field while
the IFDs are walked; a field that cannot be decoded keeps its zero value.

Copyright 2025 DNAi inc.
"""

import base64
from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional


class ValueKind(Enum):
    """Kinds of values a decoded MakerNote field may hold"""
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    FLOAT_ARRAY = "float_array"
    BOOLEAN = "boolean"
    GROUP = "group"


@dataclass(frozen=True)
class FieldValue:
    """
    A typed MakerNote value.

    GROUP values hold a mapping of names to further FieldValues, which is
    how nested payload messages (device info, image info) are kept.
    """
    kind: ValueKind
    value: Any

    @classmethod
    def string(cls, value: str) -> 'FieldValue':
        return cls(ValueKind.STRING, str(value))

    @classmethod
    def integer(cls, value: int) -> 'FieldValue':
        return cls(ValueKind.INTEGER, int(value))

    @classmethod
    def float_(cls, value: float) -> 'FieldValue':
        return cls(ValueKind.FLOAT, float(value))

    @classmethod
    def float_array(cls, values) -> 'FieldValue':
        return cls(ValueKind.FLOAT_ARRAY, tuple(float(v) for v in values))

    @classmethod
    def boolean(cls, value: bool) -> 'FieldValue':
        return cls(ValueKind.BOOLEAN, bool(value))

    @classmethod
    def group(cls, values: Mapping[str, 'FieldValue']) -> 'FieldValue':
        return cls(ValueKind.GROUP, dict(values))

    def to_python(self) -> Any:
        """Convert to plain JSON-compatible Python values."""
        if self.kind is ValueKind.GROUP:
            return {name: item.to_python() for name, item in self.value.items()}
        if self.kind is ValueKind.FLOAT_ARRAY:
            return list(self.value)
        return self.value


@dataclass
class MakerNoteResult:
    """Raw MakerNote bytes, the manufacturer they were attributed to, and decoded fields."""
    raw: bytes = b''
    manufacturer: str = ''
    parsed_fields: Dict[str, FieldValue] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.raw and not self.manufacturer and not self.parsed_fields

    def to_dict(self) -> Dict[str, Any]:
        return {
            'raw': base64.b64encode(self.raw).decode('ascii') if self.raw else None,
            'manufacturer': self.manufacturer,
            'parsed': {name: value.to_python() for name, value in self.parsed_fields.items()} or None,
        }


@dataclass
class TemporalData:
    date_captured: Optional[datetime] = None
    create_date: Optional[datetime] = None
    modify_date: Optional[datetime] = None
    sub_sec_time: str = ''
    sub_sec_time_original: str = ''
    sub_sec_time_digitized: str = ''
    offset_time: str = ''
    offset_time_original: str = ''
    offset_time_digitized: str = ''


@dataclass
class GPSData:
    """
    GPS position and related data.

    timestamp is an aware UTC datetime; datetime only keeps microseconds,
    so the full sub-second precision is kept in timestamp_nanosecond.
    """
    version: str = ''
    altitude: float = 0.0
    latitude: float = 0.0
    longitude: float = 0.0
    timestamp: Optional[datetime] = None
    timestamp_nanosecond: int = 0
    speed: str = ''
    direction: str = ''
    map_datum: str = ''
    destination_latitude: float = 0.0
    destination_longitude: float = 0.0
    destination_bearing: str = ''
    destination_distance: str = ''
    processing_method: str = ''
    differential: str = ''


@dataclass
class DeviceData:
    make: str = ''
    model: str = ''
    body_serial_number: str = ''
    serial_number: str = ''
    camera_firmware: str = ''
    lens_info: str = ''
    lens_make: str = ''
    lens_model: str = ''
    lens_serial_number: str = ''


@dataclass
class ImageProperties:
    width: int = 0
    height: int = 0
    pixel_x_dimension: float = 0.0
    pixel_y_dimension: float = 0.0
    orientation: str = ''
    color_space: str = ''
    components_configuration: str = ''
    file_source: str = ''
    scene_type: str = ''
    exif_version: str = ''
    flashpix_version: str = ''
    makers_note: MakerNoteResult = field(default_factory=MakerNoteResult)


@dataclass
class CameraSettings:
    exposure_time: str = ''
    f_number: float = 0.0
    exposure_program: str = ''
    iso: int = 0
    focal_length: float = 0.0
    metering_mode: str = ''
    light_source: str = ''
    flash_fired: str = ''
    white_balance: str = ''
    scene_capture_type: str = ''
    subject_distance_range: str = ''


@dataclass
class ProcessingData:
    software: str = ''
    processing_software: str = ''
    image_editor: str = ''
    digital_zoom_ratio: float = 0.0
    contrast: str = ''
    saturation: str = ''
    sharpness: str = ''
    composite_image: str = ''
    composite_image_count: str = ''


@dataclass
class AuthorshipData:
    artist: str = ''
    copyright: str = ''
    image_description: str = ''
    xp_title: str = ''
    xp_comment: str = ''
    xp_author: str = ''
    xp_keywords: str = ''
    xp_subject: str = ''
    user_comment: str = ''


@dataclass
class AuthenticityData:
    image_unique_id: str = ''
    maker_note: MakerNoteResult = field(default_factory=MakerNoteResult)
    related_sound_file: str = ''


# JSON keys that are not a plain camelCase of the attribute name
_JSON_KEY_OVERRIDES = {
    'image_unique_id': 'imageUniqueID',
}


RECORD_SECTIONS = (
    'temporal', 'gps', 'device', 'image', 'camera',
    'processing', 'authorship', 'authenticity',
)


def json_key(name: str) -> str:
    """Map a snake_case attribute name to its camelCase JSON key."""
    if name in _JSON_KEY_OVERRIDES:
        return _JSON_KEY_OVERRIDES[name]
    head, *rest = name.split('_')
    return head + ''.join(part.capitalize() for part in rest)


def _section_to_dict(section: Any) -> Dict[str, Any]:
    result: Dict[str, Any] = {}
    for item in fields(section):
        value = getattr(section, item.name)
        if isinstance(value, MakerNoteResult):
            value = value.to_dict()
        elif isinstance(value, datetime):
            value = value.isoformat()
        result[json_key(item.name)] = value
    return result


@dataclass
class EvidenceRecord:
    """
    Aggregate provenance record for one JPEG.

    Created empty by the parser, filled while the IFDs are walked, and
    returned once. Absent fields keep their zero values.
    """
    temporal: TemporalData = field(default_factory=TemporalData)
    gps: GPSData = field(default_factory=GPSData)
    device: DeviceData = field(default_factory=DeviceData)
    image: ImageProperties = field(default_factory=ImageProperties)
    camera: CameraSettings = field(default_factory=CameraSettings)
    processing: ProcessingData = field(default_factory=ProcessingData)
    authorship: AuthorshipData = field(default_factory=AuthorshipData)
    authenticity: AuthenticityData = field(default_factory=AuthenticityData)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the record to JSON-compatible dictionaries.

        Datetimes are ISO-8601 strings (None when absent) and raw MakerNote
        bytes are Base64.
        """
        return {name: _section_to_dict(getattr(self, name)) for name in RECORD_SECTIONS}
