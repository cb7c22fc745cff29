# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Value formatter for converting raw EXIF values to human-readable strings.

Closed enumerations are kept as code-to-label maps. Each map has an
explicit fallback label for codes it does not list; those labels differ
between tags and are part of the output format.

Copyright 2025 DNAi inc.
"""

from typing import Iterable, Sequence, Tuple


ORIENTATION_MAP = {
    1: 'Horizontal',
    2: 'Mirror horizontal',
    3: 'Rotate 180',
    4: 'Mirror vertical',
    5: 'Mirror horizontal and rotate 270 CW',
    6: 'Rotate 90 CW',
    7: 'Mirror horizontal and rotate 90 CW',
    8: 'Rotate 270 CW',
}

EXPOSURE_PROGRAM_MAP = {
    0: 'Not Defined',
    1: 'Manual',
    2: 'Program AE',
    3: 'Aperture-priority AE',
    4: 'Shutter speed priority AE',
    5: 'Creative (Slow speed)',
    6: 'Action (High speed)',
    7: 'Portrait',
    8: 'Landscape',
    9: 'Bulb',
}

METERING_MODE_MAP = {
    0: 'Unknown',
    1: 'Average',
    2: 'Center-weighted average',
    3: 'Spot',
    4: 'Multi-spot',
    5: 'Multi-segment',
    6: 'Partial',
    255: 'Other',
}

LIGHT_SOURCE_MAP = {
    0: 'Unknown',
    1: 'Daylight',
    2: 'Fluorescent',
    3: 'Tungsten (Incandescent)',
    4: 'Flash',
    9: 'Fine Weather',
    10: 'Cloudy',
    11: 'Shade',
    12: 'Daylight Fluorescent',
    13: 'Day White Fluorescent',
    14: 'Cool White Fluorescent',
    15: 'White Fluorescent',
    16: 'Warm White Fluorescent',
    17: 'Standard Light A',
    18: 'Standard Light B',
    19: 'Standard Light C',
    20: 'D55',
    21: 'D65',
    22: 'D75',
    23: 'D50',
    24: 'ISO Studio Tungsten',
    255: 'Other',
}

COLOR_SPACE_MAP = {
    0x1: 'sRGB',
    0x2: 'Adobe RGB',
    0xFFFD: 'Wide Gamut RGB',
    0xFFFE: 'ICC Profile',
    0xFFFF: 'Uncalibrated',
}

FLASH_MAP = {
    0x00: 'No Flash',
    0x01: 'Fired',
    0x05: 'Fired, Return no detected',
    0x07: 'Fired, Return detected',
    0x08: 'On, Did not fire',
    0x09: 'On, Fired',
    0x0D: 'On, Return not detected',
    0x0F: 'On, Return detected',
    0x10: 'Off, Did not fire',
    0x14: 'Off, Did not fire, Return not detected',
    0x18: 'Auto, Did not fire',
    0x19: 'Auto, Fired',
    0x1D: 'Auto, Fired, Return not detected',
    0x1F: 'Auto, Fired, Return detected',
    0x20: 'No flash function',
    0x30: 'Off, No flash function',
    0x41: 'Fired, Red-eye reduction',
    0x45: 'Fired, Red-eye reduction, Return not detected',
    0x47: 'Fired, Red-eye reduction, Return detected',
    0x49: 'On, Red-eye reduction',
    0x4D: 'On, Red-eye reduction, Return not detected',
    0x4F: 'On, Red-eye reduction, Return detected',
    0x50: 'Off, Red-eye reduction',
    0x58: 'Auto, Did not fire, Red-eye reduction',
    0x59: 'Auto, Fired, Red-eye reduction',
    0x5D: 'Auto, Fired, Red-eye reduction, Return not detected',
    0x5F: 'Auto, Fired, Red-eye reduction, Return detected',
}

FILE_SOURCE_MAP = {
    1: 'Film Scanner (Transparent Scanner)',
    2: 'Film Scanner (Relection Print Scanner)',
    3: 'Digital Camera',
}

SCENE_TYPE_MAP = {
    1: 'Directly Photographed',
}

SCENE_CAPTURE_MAP = {
    0: 'Standard',
    1: 'Landscape',
    2: 'Portrait',
    3: 'Night',
    4: 'Other',
}

# Contrast, Saturation and Sharpness share one table
PROCESSING_LEVEL_MAP = {
    0: 'Normal',
    1: 'Low',
    2: 'High',
}

SUBJECT_DISTANCE_RANGE_MAP = {
    0: 'Unknown',
    1: 'Macro',
    2: 'Close',
    3: 'Distant',
}

COMPOSITE_IMAGE_MAP = {
    0: 'Unknown',
    1: 'Not a Composite Image',
    2: 'General Composite Image',
    3: 'Composite Image Captured While Shooting',
}

WHITE_BALANCE_MAP = {
    0: 'Auto',
    1: 'Manual',
}

COMPONENT_MAP = {
    0: '-',
    1: 'Y',
    2: 'Cb',
    3: 'Cr',
    4: 'R',
    5: 'G',
    6: 'B',
}

GPS_DIFFERENTIAL_MAP = {
    1: 'Differential Corrected',
}


def format_orientation(value: int) -> str:
    return ORIENTATION_MAP.get(value, 'Unknown')


def format_exposure_program(value: int) -> str:
    return EXPOSURE_PROGRAM_MAP.get(value, 'Unknown')


def format_metering_mode(value: int) -> str:
    return METERING_MODE_MAP.get(value, 'Not Defined')


def format_light_source(value: int) -> str:
    return LIGHT_SOURCE_MAP.get(value, 'Not Defined')


def format_color_space(value: int) -> str:
    return COLOR_SPACE_MAP.get(value, 'None')


def format_flash(value: int) -> str:
    return FLASH_MAP.get(value, 'Unknown')


def format_file_source(value: int) -> str:
    return FILE_SOURCE_MAP.get(value, 'Unknown')


def format_scene_type(value: int) -> str:
    return SCENE_TYPE_MAP.get(value, 'Unknown')


def format_scene_capture_type(value: int) -> str:
    return SCENE_CAPTURE_MAP.get(value, 'Unknown')


def format_processing_level(value: int) -> str:
    return PROCESSING_LEVEL_MAP.get(value, 'Unknown or not set')


def format_subject_distance_range(value: int) -> str:
    return SUBJECT_DISTANCE_RANGE_MAP.get(value, 'Not defined')


def format_composite_image(value: int) -> str:
    return COMPOSITE_IMAGE_MAP.get(value, 'Not defined')


def format_white_balance(value: int) -> str:
    return WHITE_BALANCE_MAP.get(value, 'Unknown')


def format_gps_differential(value: int) -> str:
    return GPS_DIFFERENTIAL_MAP.get(value, 'No Correction')


def format_components_configuration(components: Iterable[int]) -> str:
    """Join component names with no separator, e.g. [1, 2, 3, 0] -> "YCbCr-"."""
    return ''.join(COMPONENT_MAP.get(c, '?') for c in components)


def format_exposure_time(num: int, den: int) -> str:
    """
    Format an ExposureTime rational.

    Exposures of one second or longer are shown in seconds ("2s", "2.5s").
    Shorter ones are shown as 1/N with N rounded half up.

    Args:
        num: Rational numerator
        den: Rational denominator

    Returns:
        Formatted exposure, or "Invalid" for a zero denominator
    """
    if den == 0:
        return 'Invalid'
    if num == 0:
        return '0s'

    if num >= den:
        seconds = num / den
        if seconds == int(seconds):
            return f"{int(seconds)}s"
        return f"{seconds:.1f}s"

    reciprocal = int((den / num) + 0.5)
    return f"1/{reciprocal}"


def _format_lens_number(num: int, den: int) -> str:
    if den == 0:
        return '?'
    value = num / den
    if value == int(value):
        return str(int(value))
    return f"{value:g}"


def format_lens_info(rationals: Sequence[Tuple[int, int]]) -> str:
    """
    Format the four LensInfo rationals (min/max focal length, min/max f-number).

    Undefined parts (0/0) are shown as "?". Equal min and max collapse to
    one value, so a prime lens reads "50mm f/1.8".
    """
    if len(rationals) != 4:
        return ''
    parts = [_format_lens_number(num, den) for num, den in rationals]
    focal = parts[0] if parts[0] == parts[1] else f"{parts[0]}-{parts[1]}"
    aperture = parts[2] if parts[2] == parts[3] else f"{parts[2]}-{parts[3]}"
    return f"{focal}mm f/{aperture}"
