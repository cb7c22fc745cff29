"""Tests for EXIF value formatting."""

import pytest

from provexif import value_formatter as fmt


class TestEnumerations:
    """Tests for enumerated tag labels and their fallbacks."""

    def test_orientation(self):
        assert fmt.format_orientation(1) == 'Horizontal'
        assert fmt.format_orientation(6) == 'Rotate 90 CW'
        assert fmt.format_orientation(9) == 'Unknown'

    def test_flash(self):
        assert fmt.format_flash(0x19) == 'Auto, Fired'
        assert fmt.format_flash(0x02) == 'Unknown'

    def test_fallback_labels(self):
        """Each table has its own label for values it does not know."""
        assert fmt.format_metering_mode(99) == 'Not Defined'
        assert fmt.format_light_source(99) == 'Not Defined'
        assert fmt.format_color_space(3) == 'None'
        assert fmt.format_processing_level(7) == 'Unknown or not set'
        assert fmt.format_subject_distance_range(9) == 'Not defined'
        assert fmt.format_composite_image(9) == 'Not defined'
        assert fmt.format_gps_differential(0) == 'No Correction'

    def test_white_balance(self):
        assert fmt.format_white_balance(0) == 'Auto'
        assert fmt.format_white_balance(1) == 'Manual'
        assert fmt.format_white_balance(2) == 'Unknown'

    def test_components_configuration(self):
        assert fmt.format_components_configuration([1, 2, 3, 0]) == 'YCbCr-'
        assert fmt.format_components_configuration([4, 5, 6, 9]) == 'RGB?'


class TestExposureTime:
    """Tests for ExposureTime formatting."""

    @pytest.mark.parametrize('num,den,expected', [
        (1, 500, '1/500'),
        (2, 1, '2s'),
        (5, 2, '2.5s'),
        (1, 1, '1s'),
        (10, 1250, '1/125'),
        (2, 3, '1/2'),
        (0, 1, '0s'),
        (1, 0, 'Invalid'),
    ])
    def test_format(self, num, den, expected):
        assert fmt.format_exposure_time(num, den) == expected


class TestLensInfo:
    """Tests for LensInfo formatting."""

    def test_zoom(self):
        assert fmt.format_lens_info([(24, 1), (70, 1), (28, 10), (28, 10)]) == '24-70mm f/2.8'

    def test_prime(self):
        assert fmt.format_lens_info([(50, 1), (50, 1), (18, 10), (18, 10)]) == '50mm f/1.8'

    def test_variable_aperture(self):
        assert fmt.format_lens_info([(18, 1), (55, 1), (35, 10), (56, 10)]) == '18-55mm f/3.5-5.6'

    def test_undefined_parts(self):
        assert fmt.format_lens_info([(50, 1), (50, 1), (0, 0), (0, 0)]) == '50mm f/?'

    def test_wrong_count(self):
        assert fmt.format_lens_info([(50, 1)]) == ''
