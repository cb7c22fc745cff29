"""Tests for EXIF extraction: segment location, IFD walking and tag decoding."""

from datetime import datetime, timezone

import pytest

from jpeg_builder import TiffBuilder, segment, wrap_jpeg
from provexif import (
    ExifBlockNotFoundError,
    ExifParser,
    ExtractionConfig,
    NotAJpegError,
    UnsupportedByteOrderError,
    extract_evidence,
    extract_exif_data,
    read_file,
)
from provexif import exif_tags as tags


def apple_makernote(b: TiffBuilder) -> bytes:
    entries = [
        b.slong(0x0001, 14),
        b.long(0x0004, 1),
        b.srational(0x0008, (-1, 2), (3, 4), (1, 1)),
        b.long(0x000A, 3),
    ]
    return b'Apple iOS\x00\x00\x01' + (b'II' if b.endian == '<' else b'MM') + b.pack_ifd(entries, 14)


class TestEndToEnd:
    """Tests for a complete camera JPEG."""

    def test_canon_orientation_and_latitude(self, builder):
        """Make, orientation and a northern latitude come through unchanged."""
        tiff = builder.build(
            [builder.ascii(tags.MAKE, 'Canon'), builder.short(tags.ORIENTATION, 6)],
            gps=[
                builder.ascii(tags.GPS_LATITUDE_REF, 'N'),
                builder.rational(tags.GPS_LATITUDE, (405000, 10000), (0, 1), (0, 1)),
            ],
        )
        record, error = extract_exif_data(wrap_jpeg(tiff))
        assert error is None
        assert record.device.make == 'Canon'
        assert record.image.orientation == 'Rotate 90 CW'
        assert record.gps.latitude == 40.5

    def test_big_endian(self, be_builder):
        tiff = be_builder.build(
            [be_builder.ascii(tags.MODEL, 'EOS R5'), be_builder.long(tags.IMAGE_WIDTH, 8192)],
            exif=[be_builder.rational(tags.EXPOSURE_TIME, (1, 500))],
        )
        record, error = extract_exif_data(wrap_jpeg(tiff))
        assert error is None
        assert record.device.model == 'EOS R5'
        assert record.image.width == 8192
        assert record.camera.exposure_time == '1/500'

    def test_primary_fields(self, builder):
        tiff = builder.build([
            builder.ascii(tags.PROCESSING_SOFTWARE, 'darktable 4.6'),
            builder.long(tags.IMAGE_WIDTH, 4032),
            builder.long(tags.IMAGE_HEIGHT, 3024),
            builder.ascii(tags.IMAGE_DESCRIPTION, 'Harbour at dawn'),
            builder.ascii(tags.SOFTWARE, 'Adobe Lightroom 7.0'),
            builder.ascii(tags.MODIFY_DATE, '2024:05:02 08:30:00'),
            builder.ascii(tags.ARTIST, 'J. Doe'),
            builder.ascii(tags.COPYRIGHT, '(c) J. Doe'),
            builder.utf16(tags.XP_TITLE, 'Harbour'),
            builder.utf16(tags.XP_KEYWORDS, 'sea;boats'),
        ])
        record, _ = extract_exif_data(wrap_jpeg(tiff))
        assert record.processing.processing_software == 'darktable 4.6'
        assert (record.image.width, record.image.height) == (4032, 3024)
        assert record.authorship.image_description == 'Harbour at dawn'
        assert record.processing.software == 'Adobe Lightroom 7.0'
        assert record.temporal.modify_date == datetime(2024, 5, 2, 8, 30)
        assert record.authorship.artist == 'J. Doe'
        assert record.authorship.copyright == '(c) J. Doe'
        assert record.authorship.xp_title == 'Harbour'
        assert record.authorship.xp_keywords == 'sea;boats'

    def test_exif_fields(self, builder):
        tiff = builder.build([builder.ascii(tags.MAKE, 'Sony')], exif=[
            builder.rational(tags.EXPOSURE_TIME, (2, 1)),
            builder.rational(tags.F_NUMBER, (28, 10)),
            builder.short(tags.EXPOSURE_PROGRAM, 2),
            builder.short(tags.ISO, 400),
            builder.undefined(tags.EXIF_VERSION, b'0232'),
            builder.ascii(tags.DATE_CAPTURED, '2024:05:01 10:15:30'),
            builder.ascii(tags.CREATE_DATE, '2024:05:01 10:15:31'),
            builder.ascii(tags.OFFSET_TIME_ORIGINAL, '+02:00'),
            builder.undefined(tags.COMPONENTS_CONFIGURATION, bytes([1, 2, 3, 0])),
            builder.short(tags.FLASH, 0x10),
            builder.rational(tags.FOCAL_LENGTH, (50, 1)),
            builder.undefined(tags.USER_COMMENT, b'ASCII\x00\x00\x00shot on a tripod'),
            builder.ascii(tags.SUB_SEC_TIME_ORIGINAL, '042'),
            builder.short(tags.COLOR_SPACE, 1),
            builder.short(tags.PIXEL_X_DIMENSION, 6000),
            builder.short(tags.PIXEL_Y_DIMENSION, 4000),
            builder.undefined(tags.FILE_SOURCE, b'\x03'),
            builder.short(tags.WHITE_BALANCE, 1),
            builder.rational(tags.DIGITAL_ZOOM_RATIO, (3, 2)),
            builder.ascii(tags.IMAGE_UNIQUE_ID, 'a1b2c3d4e5f6'),
            builder.ascii(tags.BODY_SERIAL_NUMBER, '0123456789'),
            builder.rational(tags.LENS_INFO, (24, 1), (70, 1), (28, 10), (28, 10)),
            builder.ascii(tags.LENS_MODEL, 'FE 24-70mm F2.8 GM II'),
            builder.short(tags.COMPOSITE_IMAGE, 2),
            builder.shorts(tags.COMPOSITE_IMAGE_COUNT, 5, 3),
        ])
        record, error = extract_exif_data(wrap_jpeg(tiff))
        assert error is None
        assert record.camera.exposure_time == '2s'
        assert record.camera.f_number == 2.8
        assert record.camera.exposure_program == 'Program AE'
        assert record.camera.iso == 400
        assert record.image.exif_version == '2.32'
        assert record.temporal.date_captured == datetime(2024, 5, 1, 10, 15, 30)
        assert record.temporal.create_date == datetime(2024, 5, 1, 10, 15, 31)
        assert record.temporal.offset_time_original == '+02:00'
        assert record.temporal.sub_sec_time_original == '042'
        assert record.image.components_configuration == 'YCbCr-'
        assert record.camera.flash_fired == 'Off, Did not fire'
        assert record.camera.focal_length == 50.0
        assert record.authorship.user_comment == 'shot on a tripod'
        assert record.image.color_space == 'sRGB'
        assert (record.image.pixel_x_dimension, record.image.pixel_y_dimension) == (6000.0, 4000.0)
        assert record.image.file_source == 'Digital Camera'
        assert record.camera.white_balance == 'Manual'
        assert record.processing.digital_zoom_ratio == 1.5
        assert record.authenticity.image_unique_id == 'a1b2c3d4e5f6'
        assert record.device.body_serial_number == '0123456789'
        assert record.device.lens_info == '24-70mm f/2.8'
        assert record.device.lens_model == 'FE 24-70mm F2.8 GM II'
        assert record.processing.composite_image == 'General Composite Image'
        assert record.processing.composite_image_count == '5/3'

    def test_absent_fields_keep_zero_values(self, builder):
        record, _ = extract_exif_data(wrap_jpeg(builder.build([builder.ascii(tags.MAKE, 'Canon')])))
        assert record.device.model == ''
        assert record.camera.iso == 0
        assert record.gps.latitude == 0.0
        assert record.temporal.date_captured is None
        assert record.image.makers_note.is_empty
        assert record.authenticity.maker_note.is_empty

    def test_to_dict_keys(self, builder):
        tiff = builder.build([builder.ascii(tags.MAKE, 'Canon')], exif=[
            builder.ascii(tags.DATE_CAPTURED, '2024:05:01 10:15:30'),
            builder.ascii(tags.IMAGE_UNIQUE_ID, 'abc123'),
        ])
        record, _ = extract_exif_data(wrap_jpeg(tiff))
        data = record.to_dict()
        assert data['temporal']['dateCaptured'] == '2024-05-01T10:15:30'
        assert data['authenticity']['imageUniqueID'] == 'abc123'
        assert 'bodySerialNumber' in data['device']
        assert data['image']['makersNote'] == {'raw': None, 'manufacturer': '', 'parsed': None}


class TestGPS:
    """Tests for GPS composition after the GPS directory is walked."""

    def _gps_record(self, builder, gps_entries):
        tiff = builder.build([builder.ascii(tags.MAKE, 'Canon')], gps=gps_entries)
        return extract_evidence(wrap_jpeg(tiff))

    def test_southern_western_below_sea_level(self, builder):
        """S, W and altitude ref 1 negate the magnitudes."""
        result = self._gps_record(builder, [
            builder.ascii(tags.GPS_LATITUDE_REF, 'S'),
            builder.rational(tags.GPS_LATITUDE, (33, 1), (52, 1), (0, 1)),
            builder.ascii(tags.GPS_LONGITUDE_REF, 'W'),
            builder.rational(tags.GPS_LONGITUDE, (70, 1), (30, 1), (0, 1)),
            builder.byte(tags.GPS_ALTITUDE_REF, 1),
            builder.rational(tags.GPS_ALTITUDE, (1234, 10)),
        ])
        gps = result.record.gps
        assert gps.latitude == pytest.approx(-(33 + 52 / 60))
        assert gps.longitude == -70.5
        assert gps.altitude == pytest.approx(-123.4)
        assert not result.diagnostics.warnings

    def test_western_longitude_only(self, builder):
        """A longitude without a latitude is still signed."""
        result = self._gps_record(builder, [
            builder.rational(tags.GPS_LONGITUDE, (10, 1), (0, 1), (0, 1)),
            builder.ascii(tags.GPS_LONGITUDE_REF, 'W'),
        ])
        assert result.record.gps.longitude == -10.0

    def test_above_sea_level(self, builder):
        result = self._gps_record(builder, [
            builder.byte(tags.GPS_ALTITUDE_REF, 0),
            builder.rational(tags.GPS_ALTITUDE, (85, 1)),
        ])
        assert result.record.gps.altitude == 85.0

    def test_out_of_range_warns_but_keeps_value(self, builder):
        result = self._gps_record(builder, [
            builder.ascii(tags.GPS_LATITUDE_REF, 'N'),
            builder.rational(tags.GPS_LATITUDE, (95, 1), (0, 1), (0, 1)),
        ])
        assert result.record.gps.latitude == 95.0
        assert any('latitude' in d.message for d in result.diagnostics.warnings)

    def test_timestamp_utc_with_nanoseconds(self, builder):
        result = self._gps_record(builder, [
            builder.ascii(tags.GPS_DATESTAMP, '2024:05:01'),
            builder.rational(tags.GPS_TIMESTAMP, (10, 1), (15, 1), (305, 10)),
        ])
        gps = result.record.gps
        assert gps.timestamp == datetime(2024, 5, 1, 10, 15, 30, 500000, tzinfo=timezone.utc)
        assert gps.timestamp_nanosecond == 500000000

    def test_timestamp_without_datestamp(self, builder):
        result = self._gps_record(builder, [
            builder.rational(tags.GPS_TIMESTAMP, (10, 1), (15, 1), (30, 1)),
        ])
        assert result.record.gps.timestamp is None

    def test_invalid_datestamp_warns(self, builder):
        result = self._gps_record(builder, [
            builder.ascii(tags.GPS_DATESTAMP, '2024-05-01'),
            builder.rational(tags.GPS_TIMESTAMP, (10, 1), (15, 1), (30, 1)),
        ])
        assert result.record.gps.timestamp is None
        assert any('GPSDateStamp' in d.message for d in result.diagnostics.warnings)

    def test_supplementary_fields(self, builder):
        result = self._gps_record(builder, [
            builder.bytes_(tags.GPS_VERSION_ID, [2, 3, 0, 0]),
            builder.ascii(tags.GPS_SPEED_REF, 'K'),
            builder.rational(tags.GPS_SPEED, (125, 10)),
            builder.ascii(tags.GPS_IMG_DIRECTION_REF, 'T'),
            builder.rational(tags.GPS_IMG_DIRECTION, (90, 1)),
            builder.ascii(tags.GPS_MAP_DATUM, 'WGS-84'),
            builder.ascii(tags.GPS_DEST_LATITUDE_REF, 'S'),
            builder.rational(tags.GPS_DEST_LATITUDE, (10, 1), (0, 1), (0, 1)),
            builder.short(tags.GPS_DIFFERENTIAL, 1),
        ])
        gps = result.record.gps
        assert gps.version == '2.3.0.0'
        assert gps.speed == '12.50K'
        assert gps.direction == '90.000000T'
        assert gps.map_datum == 'WGS-84'
        assert gps.destination_latitude == -10.0
        assert gps.differential == 'Differential Corrected'


class TestFieldSkips:
    """Tests for tags that cannot be decoded."""

    def test_bad_date_skips_only_that_field(self, builder):
        tiff = builder.build([builder.ascii(tags.MAKE, 'Canon')], exif=[
            builder.ascii(tags.DATE_CAPTURED, '2024-05-01 10:15:30'),
            builder.short(tags.ISO, 200),
        ])
        result = extract_evidence(wrap_jpeg(tiff))
        assert result.error is None
        assert result.record.temporal.date_captured is None
        assert result.record.camera.iso == 200
        assert any('DateTimeOriginal' in d.message for d in result.diagnostics.warnings)

    def test_components_wrong_count(self, builder):
        tiff = builder.build([builder.ascii(tags.MAKE, 'Canon')], exif=[
            builder.undefined(tags.COMPONENTS_CONFIGURATION, bytes([1, 2, 3])),
        ])
        result = extract_evidence(wrap_jpeg(tiff))
        assert result.record.image.components_configuration == ''
        assert any('ComponentsConfiguration' in d.message for d in result.diagnostics.warnings)

    def test_sub_ifd_pointer_outside_data(self, builder):
        tiff = builder.build([builder.ascii(tags.MAKE, 'Canon'), builder.long(tags.GPS_IFD_POINTER, 0x7FFFFFF0)])
        result = extract_evidence(wrap_jpeg(tiff))
        assert result.record.device.make == 'Canon'
        assert result.diagnostics.warnings

    def test_unknown_tags_ignored(self, builder):
        tiff = builder.build([builder.ascii(tags.MAKE, 'Canon'), builder.short(0x4746, 5)])
        result = extract_evidence(wrap_jpeg(tiff))
        assert result.record.device.make == 'Canon'
        assert not result.diagnostics.warnings


class TestWalkerSafety:
    """Tests for cyclic, deep and truncated directories."""

    def test_cyclic_pointer(self, builder):
        """An EXIF pointer back to IFD0 is walked once."""
        tiff = builder.build([builder.ascii(tags.MAKE, 'Canon'), builder.long(tags.EXIF_IFD_POINTER, 8)])
        result = extract_evidence(wrap_jpeg(tiff))
        assert result.record.device.make == 'Canon'
        assert any('already walked' in d.message for d in result.diagnostics.warnings)

    def test_depth_limit(self, builder):
        tiff = builder.build([builder.ascii(tags.MAKE, 'Canon')],
                             exif=[builder.short(tags.ISO, 100)])
        result = extract_evidence(wrap_jpeg(tiff), ExtractionConfig(max_ifd_depth=0))
        assert result.record.camera.iso == 0
        assert any('too deeply' in d.message for d in result.diagnostics.warnings)

    def test_truncated_directory(self, builder):
        """Entries past the end of the file are not read."""
        tiff = builder.build([
            builder.short(tags.ORIENTATION, 6),
            builder.short(0x0113, 1),
            builder.short(0x0114, 1),
        ])
        cut = tiff[:8 + 2 + 12]
        data = b'\xff\xd8' + segment(0xE1, b'Exif\x00\x00' + cut)
        result = extract_evidence(data)
        assert result.record.image.orientation == 'Rotate 90 CW'
        assert any('truncated' in d.message for d in result.diagnostics.warnings)


class TestMakerNoteTag:
    """Tests for the EXIF MakerNote tag."""

    def test_apple_makernote(self, builder):
        note = apple_makernote(TiffBuilder('>'))
        tiff = builder.build([builder.ascii(tags.MAKE, 'Apple')],
                             exif=[builder.undefined(tags.MAKER_NOTE, note)])
        record, error = extract_exif_data(wrap_jpeg(tiff))
        assert error is None
        maker_note = record.authenticity.maker_note
        assert maker_note.manufacturer == 'Apple'
        assert maker_note.raw == note
        assert maker_note.parsed_fields['MakerNoteVersion'].value == 14
        assert maker_note.parsed_fields['AEStable'].value is True
        assert maker_note.parsed_fields['HDRImageType'].value == 'HDR Image'

    def test_unknown_makernote(self, builder):
        note = b'Nikon\x00\x02\x10\x00\x00' + b'\x00' * 20
        tiff = builder.build([builder.ascii(tags.MAKE, 'Nikon')],
                             exif=[builder.undefined(tags.MAKER_NOTE, note)])
        result = extract_evidence(wrap_jpeg(tiff))
        assert result.error is None
        assert result.record.authenticity.maker_note.manufacturer == 'Unknown'
        assert result.record.authenticity.maker_note.raw == note
        assert any('MakerNote' in d.message for d in result.diagnostics.warnings)

    def test_vendor_decoding_disabled(self, builder):
        note = apple_makernote(TiffBuilder('<'))
        tiff = builder.build([], exif=[builder.undefined(tags.MAKER_NOTE, note)])
        config = ExtractionConfig(decode_vendor_makernotes=False)
        record, _ = extract_exif_data(wrap_jpeg(tiff), config)
        assert record.authenticity.maker_note.raw == note
        assert record.authenticity.maker_note.manufacturer == ''

    def test_raw_not_kept(self, builder):
        note = apple_makernote(TiffBuilder('<'))
        tiff = builder.build([], exif=[builder.undefined(tags.MAKER_NOTE, note)])
        record, _ = extract_exif_data(wrap_jpeg(tiff), ExtractionConfig(keep_raw_makernote=False))
        assert record.authenticity.maker_note.raw == b''
        assert record.authenticity.maker_note.manufacturer == 'Apple'


class TestFatalInput:
    """Tests for input that yields no record."""

    def test_empty(self):
        record, error = extract_exif_data(b'')
        assert record is None
        assert isinstance(error, NotAJpegError)

    def test_not_a_jpeg(self):
        record, error = extract_exif_data(b'\x89PNG\r\n\x1a\n' + b'\x00' * 32)
        assert record is None
        assert isinstance(error, NotAJpegError)

    def test_no_exif_block(self):
        data = wrap_jpeg(None, leading_segments=[segment(0xE0, b'JFIF\x00\x01\x02')])
        record, error = extract_exif_data(data)
        assert record is None
        assert isinstance(error, ExifBlockNotFoundError)

    def test_unsupported_byte_order(self, builder):
        tiff = b'XX' + builder.build([builder.ascii(tags.MAKE, 'Canon')])[2:]
        record, error = extract_exif_data(wrap_jpeg(tiff))
        assert record is None
        assert isinstance(error, UnsupportedByteOrderError)
        assert error.severity.value == 'error'

    def test_parse_raises(self):
        with pytest.raises(NotAJpegError):
            ExifParser(file_data=b'GIF89a').parse()


class TestSegmentLocation:
    """Tests for finding the EXIF APP1 segment."""

    def test_after_jfif_segment(self, builder):
        data = wrap_jpeg(builder.build([builder.ascii(tags.MAKE, 'Canon')]),
                         leading_segments=[segment(0xE0, b'JFIF\x00\x01\x02\x00\x00\x01\x00\x01\x00\x00')])
        record, error = extract_exif_data(data)
        assert error is None
        assert record.device.make == 'Canon'

    def test_skips_non_exif_app1(self, builder):
        xmp_first = segment(0xE1, b'http://ns.adobe.com/xap/1.0/\x00<x:xmpmeta/>')
        data = wrap_jpeg(builder.build([builder.ascii(tags.MAKE, 'Canon')]), leading_segments=[xmp_first])
        record, _ = extract_exif_data(data)
        assert record.device.make == 'Canon'

    def test_broken_segment_chain(self, builder):
        """EXIF is still found by scanning when the segment chain breaks."""
        data = wrap_jpeg(builder.build([builder.ascii(tags.MAKE, 'Canon')]), leading_segments=[b'\x00\x00'])
        result = extract_evidence(data)
        assert result.record.device.make == 'Canon'
        assert any('scanning' in d.message for d in result.diagnostics.warnings)

    def test_exif_header_too_short(self):
        data = b'\xff\xd8' + segment(0xE1, b'Exif\x00\x00II*\x00')
        record, error = extract_exif_data(data)
        assert record is None
        assert isinstance(error, ExifBlockNotFoundError)


class TestFiles:
    """Tests for reading from disk."""

    def test_read_file(self, builder, tmp_path):
        path = tmp_path / 'photo.jpg'
        path.write_bytes(wrap_jpeg(builder.build([builder.ascii(tags.MAKE, 'Canon')])))
        result = read_file(str(path))
        assert result.ok
        assert result.record.device.make == 'Canon'
        assert result.to_dict()['error'] is None

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(OSError):
            read_file(str(tmp_path / 'missing.jpg'))

    def test_fatal_result_to_dict(self, tmp_path):
        path = tmp_path / 'notes.txt'
        path.write_bytes(b'plain text')
        data = read_file(str(path)).to_dict()
        assert data['record'] is None
        assert data['error']['type'] == 'NotAJpegError'
        assert data['diagnostics']
