# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Tag decoders for IFD0, the EXIF sub-IFD and the GPS sub-IFD

Each table maps a tag code to the record field it fills and the way its
value is read. Plain text fields and closed enumerations are declared
in class-level maps; anything needing more than one read goes through a
named handler method.

Values are read at the width each tag is defined with, without checking
the entry's declared TIFF type against it.

Copyright 2025 DNAi inc.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional, Tuple

from provexif import exif_tags as tags
from provexif import value_formatter as fmt
from provexif.byte_reader import IFDEntry, ValueExtractor
from provexif.config import ExtractionConfig
from provexif.diagnostics import Diagnostics
from provexif.evidence import EvidenceRecord, MakerNoteResult
from provexif.exceptions import FieldSkipError
from provexif.ifd_walker import SubDirectory

EXIF_DATE_FORMAT = '%Y:%m:%d %H:%M:%S'
GPS_DATE_FORMAT = '%Y:%m:%d'

# (section, attribute) in EvidenceRecord
FieldTarget = Tuple[str, str]
# (section, attribute, reader, formatter)
EnumTarget = Tuple[str, str, str, Callable[[int], str]]


def parse_exif_datetime(value: str, tag_name: str) -> datetime:
    """
    Parse an EXIF "YYYY:MM:DD HH:MM:SS" value.

    Raises:
        FieldSkipError: If the value does not match the format
    """
    try:
        return datetime.strptime(value, EXIF_DATE_FORMAT)
    except ValueError:
        raise FieldSkipError(f"{tag_name} has an invalid date format: {value!r}")


class TagTable:
    """
    Base class for a directory's tag set.

    Subclasses fill the declarative maps and add handler methods for
    tags listed in HANDLERS.
    """
    name = 'IFD'
    TAG_NAMES: Dict[int, str] = {}
    STRING_FIELDS: Dict[int, FieldTarget] = {}
    ENUM_FIELDS: Dict[int, EnumTarget] = {}
    HANDLERS: Dict[int, str] = {}

    def __init__(self, record: EvidenceRecord, extractor: ValueExtractor,
                 diagnostics: Diagnostics, config: Optional[ExtractionConfig] = None):
        self.record = record
        self.extractor = extractor
        self.diagnostics = diagnostics
        self.config = config or ExtractionConfig()

    def handles(self, tag: int) -> bool:
        return tag in self.TAG_NAMES

    def tag_name(self, tag: int) -> str:
        return self.TAG_NAMES.get(tag, f"{tag:#06x}")

    def _assign(self, target: FieldTarget, value) -> None:
        section, attribute = target
        setattr(getattr(self.record, section), attribute, value)

    def decode(self, entry: IFDEntry) -> Optional[SubDirectory]:
        """
        Decode one entry into the record.

        Returns:
            A SubDirectory when the entry points at a nested IFD, otherwise None

        Raises:
            FieldSkipError: If the value cannot be decoded
        """
        target = self.STRING_FIELDS.get(entry.tag)
        if target is not None:
            self._assign(target, self.extractor.get_string(entry))
            return None

        enum_target = self.ENUM_FIELDS.get(entry.tag)
        if enum_target is not None:
            section, attribute, reader, formatter = enum_target
            raw = getattr(self.extractor, reader)(entry)
            self._assign((section, attribute), formatter(raw))
            return None

        handler = self.HANDLERS.get(entry.tag)
        if handler is not None:
            return getattr(self, handler)(entry)
        return None

    def finalize(self) -> None:
        """Called once after the whole directory has been walked."""
        pass

    def _sub_directory(self, entry: IFDEntry, table: 'TagTable') -> Optional[SubDirectory]:
        pointer = self.extractor.get_uint32(entry)
        offset = self.extractor.tiff_start + pointer
        if pointer == 0 or offset + 2 > len(self.extractor.data):
            raise FieldSkipError(f"{self.tag_name(entry.tag)} pointer {pointer} is outside the data")
        return SubDirectory(offset, table)


class PrimaryTagTable(TagTable):
    """IFD0 tags, including the pointers to the EXIF and GPS sub-IFDs."""
    name = 'IFD0'
    TAG_NAMES = tags.PRIMARY_TAG_NAMES

    STRING_FIELDS = {
        tags.PROCESSING_SOFTWARE: ('processing', 'processing_software'),
        tags.IMAGE_DESCRIPTION: ('authorship', 'image_description'),
        tags.MAKE: ('device', 'make'),
        tags.MODEL: ('device', 'model'),
        tags.SOFTWARE: ('processing', 'software'),
        tags.ARTIST: ('authorship', 'artist'),
        tags.COPYRIGHT: ('authorship', 'copyright'),
    }

    ENUM_FIELDS = {
        tags.ORIENTATION: ('image', 'orientation', 'get_uint16', fmt.format_orientation),
    }

    UTF16_FIELDS = {
        tags.XP_TITLE: ('authorship', 'xp_title'),
        tags.XP_COMMENT: ('authorship', 'xp_comment'),
        tags.XP_AUTHOR: ('authorship', 'xp_author'),
        tags.XP_KEYWORDS: ('authorship', 'xp_keywords'),
        tags.XP_SUBJECT: ('authorship', 'xp_subject'),
    }

    HANDLERS = {
        tags.IMAGE_WIDTH: '_decode_width',
        tags.IMAGE_HEIGHT: '_decode_height',
        tags.MODIFY_DATE: '_decode_modify_date',
        tags.EXIF_IFD_POINTER: '_decode_exif_pointer',
        tags.GPS_IFD_POINTER: '_decode_gps_pointer',
    }

    def decode(self, entry: IFDEntry) -> Optional[SubDirectory]:
        target = self.UTF16_FIELDS.get(entry.tag)
        if target is not None:
            self._assign(target, self.extractor.get_utf16le_string(entry))
            return None
        return super().decode(entry)

    def _decode_width(self, entry: IFDEntry) -> None:
        self.record.image.width = self.extractor.get_uint32(entry)

    def _decode_height(self, entry: IFDEntry) -> None:
        self.record.image.height = self.extractor.get_uint32(entry)

    def _decode_modify_date(self, entry: IFDEntry) -> None:
        value = self.extractor.get_string(entry)
        self.record.temporal.modify_date = parse_exif_datetime(value, 'ModifyDate')

    def _decode_exif_pointer(self, entry: IFDEntry) -> Optional[SubDirectory]:
        table = ExifTagTable(self.record, self.extractor, self.diagnostics, self.config)
        return self._sub_directory(entry, table)

    def _decode_gps_pointer(self, entry: IFDEntry) -> Optional[SubDirectory]:
        table = GPSTagTable(self.record, self.extractor, self.diagnostics, self.config)
        return self._sub_directory(entry, table)


class ExifTagTable(TagTable):
    """EXIF sub-IFD tags: capture settings, timing, lens and processing data."""
    name = 'ExifIFD'
    TAG_NAMES = tags.EXIF_TAG_NAMES

    STRING_FIELDS = {
        tags.OFFSET_TIME: ('temporal', 'offset_time'),
        tags.OFFSET_TIME_ORIGINAL: ('temporal', 'offset_time_original'),
        tags.OFFSET_TIME_DIGITIZED: ('temporal', 'offset_time_digitized'),
        tags.SUB_SEC_TIME: ('temporal', 'sub_sec_time'),
        tags.SUB_SEC_TIME_ORIGINAL: ('temporal', 'sub_sec_time_original'),
        tags.SUB_SEC_TIME_DIGITIZED: ('temporal', 'sub_sec_time_digitized'),
        tags.RELATED_SOUND_FILE: ('authenticity', 'related_sound_file'),
        tags.IMAGE_UNIQUE_ID: ('authenticity', 'image_unique_id'),
        tags.BODY_SERIAL_NUMBER: ('device', 'body_serial_number'),
        tags.LENS_MAKE: ('device', 'lens_make'),
        tags.LENS_MODEL: ('device', 'lens_model'),
        tags.LENS_SERIAL_NUMBER: ('device', 'lens_serial_number'),
        tags.IMAGE_EDITOR: ('processing', 'image_editor'),
        tags.CAMERA_FIRMWARE: ('device', 'camera_firmware'),
        tags.SERIAL_NUMBER: ('device', 'serial_number'),
    }

    ENUM_FIELDS = {
        tags.EXPOSURE_PROGRAM: ('camera', 'exposure_program', 'get_uint16', fmt.format_exposure_program),
        tags.METERING_MODE: ('camera', 'metering_mode', 'get_uint16', fmt.format_metering_mode),
        tags.LIGHT_SOURCE: ('camera', 'light_source', 'get_uint16', fmt.format_light_source),
        tags.FLASH: ('camera', 'flash_fired', 'get_uint16', fmt.format_flash),
        tags.COLOR_SPACE: ('image', 'color_space', 'get_uint16', fmt.format_color_space),
        tags.FILE_SOURCE: ('image', 'file_source', 'get_uint8', fmt.format_file_source),
        tags.SCENE_TYPE: ('image', 'scene_type', 'get_uint8', fmt.format_scene_type),
        tags.WHITE_BALANCE: ('camera', 'white_balance', 'get_uint16', fmt.format_white_balance),
        tags.SCENE_CAPTURE_TYPE: ('camera', 'scene_capture_type', 'get_uint16', fmt.format_scene_capture_type),
        tags.CONTRAST: ('processing', 'contrast', 'get_uint16', fmt.format_processing_level),
        tags.SATURATION: ('processing', 'saturation', 'get_uint16', fmt.format_processing_level),
        tags.SHARPNESS: ('processing', 'sharpness', 'get_uint16', fmt.format_processing_level),
        tags.SUBJECT_DISTANCE_RANGE: ('camera', 'subject_distance_range', 'get_uint16',
                                      fmt.format_subject_distance_range),
        tags.COMPOSITE_IMAGE: ('processing', 'composite_image', 'get_uint16', fmt.format_composite_image),
    }

    HANDLERS = {
        tags.EXPOSURE_TIME: '_decode_exposure_time',
        tags.F_NUMBER: '_decode_f_number',
        tags.ISO: '_decode_iso',
        tags.EXIF_VERSION: '_decode_exif_version',
        tags.FLASHPIX_VERSION: '_decode_flashpix_version',
        tags.DATE_CAPTURED: '_decode_date_captured',
        tags.CREATE_DATE: '_decode_create_date',
        tags.COMPONENTS_CONFIGURATION: '_decode_components',
        tags.FOCAL_LENGTH: '_decode_focal_length',
        tags.MAKER_NOTE: '_decode_maker_note',
        tags.USER_COMMENT: '_decode_user_comment',
        tags.PIXEL_X_DIMENSION: '_decode_pixel_x',
        tags.PIXEL_Y_DIMENSION: '_decode_pixel_y',
        tags.DIGITAL_ZOOM_RATIO: '_decode_digital_zoom',
        tags.LENS_INFO: '_decode_lens_info',
        tags.COMPOSITE_IMAGE_COUNT: '_decode_composite_count',
    }

    def _decode_exposure_time(self, entry: IFDEntry) -> None:
        num, den = self.extractor.get_rational_parts(entry)
        self.record.camera.exposure_time = fmt.format_exposure_time(num, den)

    def _decode_f_number(self, entry: IFDEntry) -> None:
        self.record.camera.f_number = self.extractor.get_rational(entry)

    def _decode_iso(self, entry: IFDEntry) -> None:
        self.record.camera.iso = self.extractor.get_uint16(entry)

    def _decode_exif_version(self, entry: IFDEntry) -> None:
        self.record.image.exif_version = self.extractor.get_version(entry)

    def _decode_flashpix_version(self, entry: IFDEntry) -> None:
        self.record.image.flashpix_version = self.extractor.get_version(entry)

    def _decode_date_captured(self, entry: IFDEntry) -> None:
        value = self.extractor.get_string(entry)
        self.record.temporal.date_captured = parse_exif_datetime(value, 'DateTimeOriginal')

    def _decode_create_date(self, entry: IFDEntry) -> None:
        value = self.extractor.get_string(entry)
        self.record.temporal.create_date = parse_exif_datetime(value, 'CreateDate')

    def _decode_components(self, entry: IFDEntry) -> None:
        if entry.count != 4:
            raise FieldSkipError(f"ComponentsConfiguration has {entry.count} components, expected 4")
        components = self.extractor.get_uint8_array(entry, 4)
        self.record.image.components_configuration = fmt.format_components_configuration(components)

    def _decode_focal_length(self, entry: IFDEntry) -> None:
        self.record.camera.focal_length = self.extractor.get_rational(entry)

    def _decode_user_comment(self, entry: IFDEntry) -> None:
        self.record.authorship.user_comment = self.extractor.get_user_comment(entry)

    def _decode_pixel_x(self, entry: IFDEntry) -> None:
        self.record.image.pixel_x_dimension = float(self.extractor.get_uint16(entry))

    def _decode_pixel_y(self, entry: IFDEntry) -> None:
        self.record.image.pixel_y_dimension = float(self.extractor.get_uint16(entry))

    def _decode_digital_zoom(self, entry: IFDEntry) -> None:
        self.record.processing.digital_zoom_ratio = self.extractor.get_rational(entry)

    def _decode_lens_info(self, entry: IFDEntry) -> None:
        if entry.count != 4:
            # Some writers store LensInfo as text
            self.record.device.lens_info = self.extractor.get_string(entry)
            return
        parts = [self.extractor.get_rational_parts(entry, i * 8) for i in range(4)]
        self.record.device.lens_info = fmt.format_lens_info(parts)

    def _decode_composite_count(self, entry: IFDEntry) -> None:
        source, used = self.extractor.get_uint16_pair(entry)
        self.record.processing.composite_image_count = f"{source}/{used}"

    def _decode_maker_note(self, entry: IFDEntry) -> None:
        from provexif.makernote_parser import dispatch_makernote

        raw = self.extractor.get_byte_array(entry)
        if not raw:
            raise FieldSkipError("MakerNote points outside the data")

        if self.config.decode_vendor_makernotes:
            result = dispatch_makernote(raw, self.config.get_vendor_parsers(), self.diagnostics)
        else:
            result = MakerNoteResult(raw=raw)
        if not self.config.keep_raw_makernote:
            result.raw = b''
        self.record.authenticity.maker_note = result


class GPSTagTable(TagTable):
    """
    GPS sub-IFD tags.

    Reference flags and raw magnitudes are collected while the directory
    is walked; signs, range checks and formatted strings are applied in
    finalize(), since a reference tag may follow the value it qualifies.
    """
    name = 'GPSIFD'
    TAG_NAMES = tags.GPS_TAG_NAMES

    STRING_FIELDS = {
        tags.GPS_MAP_DATUM: ('gps', 'map_datum'),
        tags.GPS_PROCESSING_METHOD: ('gps', 'processing_method'),
    }

    ENUM_FIELDS = {
        tags.GPS_DIFFERENTIAL: ('gps', 'differential', 'get_uint16', fmt.format_gps_differential),
    }

    # Reference tags, kept until finalize()
    REF_TAGS = {
        tags.GPS_LATITUDE_REF: 'latitude',
        tags.GPS_LONGITUDE_REF: 'longitude',
        tags.GPS_SPEED_REF: 'speed',
        tags.GPS_IMG_DIRECTION_REF: 'direction',
        tags.GPS_DEST_LATITUDE_REF: 'destination_latitude',
        tags.GPS_DEST_LONGITUDE_REF: 'destination_longitude',
        tags.GPS_DEST_BEARING_REF: 'destination_bearing',
        tags.GPS_DEST_DISTANCE_REF: 'destination_distance',
        tags.GPS_DATESTAMP: 'datestamp',
    }

    # Single-rational magnitudes, kept until finalize()
    RATIONAL_TAGS = {
        tags.GPS_SPEED: 'speed',
        tags.GPS_IMG_DIRECTION: 'direction',
        tags.GPS_DEST_BEARING: 'destination_bearing',
        tags.GPS_DEST_DISTANCE: 'destination_distance',
    }

    COORDINATE_TAGS = {
        tags.GPS_LATITUDE: 'latitude',
        tags.GPS_LONGITUDE: 'longitude',
        tags.GPS_DEST_LATITUDE: 'destination_latitude',
        tags.GPS_DEST_LONGITUDE: 'destination_longitude',
    }

    HANDLERS = {
        tags.GPS_VERSION_ID: '_decode_version',
        tags.GPS_ALTITUDE_REF: '_decode_altitude_ref',
        tags.GPS_ALTITUDE: '_decode_altitude',
        tags.GPS_TIMESTAMP: '_decode_timestamp',
    }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.refs: Dict[str, str] = {}
        self.values: Dict[str, float] = {}
        self.below_sea_level = False
        self.time_of_day: Optional[Tuple[int, int, float]] = None

    def decode(self, entry: IFDEntry) -> Optional[SubDirectory]:
        if entry.tag in self.REF_TAGS:
            self.refs[self.REF_TAGS[entry.tag]] = self.extractor.get_string(entry)
            return None
        if entry.tag in self.RATIONAL_TAGS:
            self.values[self.RATIONAL_TAGS[entry.tag]] = self.extractor.get_rational(entry)
            return None
        if entry.tag in self.COORDINATE_TAGS:
            name = self.COORDINATE_TAGS[entry.tag]
            coordinate = self.extractor.get_gps_coordinate(entry)
            self.values[name] = coordinate
            setattr(self.record.gps, name, coordinate)
            return None
        return super().decode(entry)

    def _decode_version(self, entry: IFDEntry) -> None:
        version = self.extractor.get_uint8_array(entry, 4)
        self.record.gps.version = '.'.join(str(v) for v in version)

    def _decode_altitude_ref(self, entry: IFDEntry) -> None:
        self.below_sea_level = self.extractor.get_uint8(entry) in (1, 3)

    def _decode_altitude(self, entry: IFDEntry) -> None:
        self.record.gps.altitude = self.extractor.get_rational(entry)

    def _decode_timestamp(self, entry: IFDEntry) -> None:
        hours = int(self.extractor.get_rational(entry, 0))
        minutes = int(self.extractor.get_rational(entry, 8))
        seconds = self.extractor.get_rational(entry, 16)
        self.time_of_day = (hours, minutes, seconds)

    def _check_range(self, label: str, value: float, bounds: Tuple[float, float]) -> None:
        low, high = bounds
        if value < low or value > high:
            self.diagnostics.warning(f"GPS {label} out of valid range: {value}",
                                     field=label, value=value)

    def finalize(self) -> None:
        gps = self.record.gps
        config = self.config

        if 'latitude' in self.values:
            if self.refs.get('latitude') == 'S':
                gps.latitude = -gps.latitude
            self._check_range('latitude', gps.latitude, config.latitude_range)

        if 'longitude' in self.values:
            if self.refs.get('longitude') == 'W':
                gps.longitude = -gps.longitude
            self._check_range('longitude', gps.longitude, config.longitude_range)

        if self.below_sea_level:
            gps.altitude = -gps.altitude
        self._check_range('altitude', gps.altitude, config.altitude_range)

        if 'speed' in self.refs and self.refs['speed']:
            gps.speed = f"{self.values.get('speed', 0.0):.2f}{self.refs['speed']}"

        if 'direction' in self.values and self.refs.get('direction'):
            gps.direction = f"{self.values['direction']:f}{self.refs['direction']}"

        if 'destination_latitude' in self.values:
            if self.refs.get('destination_latitude') == 'S':
                gps.destination_latitude = -gps.destination_latitude
            self._check_range('destination latitude', gps.destination_latitude, config.latitude_range)

        if 'destination_longitude' in self.values:
            if self.refs.get('destination_longitude') == 'W':
                gps.destination_longitude = -gps.destination_longitude
            self._check_range('destination longitude', gps.destination_longitude, config.longitude_range)

        if 'destination_bearing' in self.values and self.refs.get('destination_bearing'):
            gps.destination_bearing = f"{self.values['destination_bearing']:f}{self.refs['destination_bearing']}"

        if 'destination_distance' in self.values and self.refs.get('destination_distance'):
            gps.destination_distance = f"{self.values['destination_distance']:f}{self.refs['destination_distance']}"

        if self.time_of_day is not None and self.refs.get('datestamp'):
            self._build_timestamp(self.refs['datestamp'])

    def _build_timestamp(self, datestamp: str) -> None:
        try:
            date = datetime.strptime(datestamp, GPS_DATE_FORMAT)
        except ValueError:
            self.diagnostics.warning(f"GPSDateStamp has an invalid date format: {datestamp!r}",
                                     field='GPSDateStamp')
            return

        hours, minutes, seconds = self.time_of_day
        whole_seconds = int(seconds)
        nanoseconds = int((seconds - whole_seconds) * 1e9)
        timestamp = datetime(date.year, date.month, date.day, tzinfo=timezone.utc)
        try:
            timestamp += timedelta(hours=hours, minutes=minutes, seconds=whole_seconds,
                                   microseconds=nanoseconds // 1000)
        except OverflowError:
            self.diagnostics.warning(f"GPSTimeStamp {hours}:{minutes}:{seconds} is out of range",
                                     field='GPSTimeStamp')
            return
        self.record.gps.timestamp = timestamp
        self.record.gps.timestamp_nanosecond = nanoseconds
