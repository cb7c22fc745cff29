"""Shared fixtures for the provexif tests."""

import pytest

from jpeg_builder import TiffBuilder
from provexif.byte_reader import TiffContext, ValueExtractor
from provexif.diagnostics import Diagnostics
from provexif.hdrplus_payload import GoogleHDRPlusMakerNote


@pytest.fixture
def builder():
    return TiffBuilder('<')


@pytest.fixture
def be_builder():
    return TiffBuilder('>')


@pytest.fixture
def diagnostics():
    return Diagnostics()


@pytest.fixture
def make_extractor():
    """Build a ValueExtractor over a TIFF structure starting at offset 0."""
    def _make(data: bytes, endian: str = '<') -> ValueExtractor:
        return ValueExtractor(data, TiffContext(0, endian))
    return _make


@pytest.fixture
def hdrplus_message():
    """A fully populated HDR+ MakerNote message."""
    message = GoogleHDRPlusMakerNote()
    message.image_info.image_name = b'IMG_20240501_101500'
    message.image_info.image_data = b'\x01\x02\x03\x04\x05'
    message.time_log_text = b'capture 0.0ms; merge 41.5ms; finish 97.0ms'
    message.summary_text = b'frames=7 exposure=1/120'
    message.frame_count.frame_count = 7
    device = message.device_info
    device.device_make = b'Google'
    device.device_model = b'Pixel 7'
    device.device_codename = b'panther'
    device.device_hardware_revision = b'MP1.0'
    device.hdrp_software = b'HDR+ 1.0.540104767zd'
    device.android_release = b'14'
    device.software_date = 1700000000
    device.application = b'com.google.android.GoogleCamera'
    device.app_version = b'9.2.113'
    device.exposure_time_info.exposure_time_min = 0.125
    device.exposure_time_info.exposure_time_max = 0.5
    device.iso_info.iso_min = 50.0
    device.iso_info.iso_max = 3200.0
    device.max_analog_iso = 800.0
    return message
