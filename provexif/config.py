# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Extraction configuration

Settings that control which optional stages run during extraction and
the sanity limits applied to decoded values.

Copyright 2025 DNAi inc.
"""

from typing import List, Optional, Tuple


class ExtractionConfig:
    """
    Configuration for a provenance extraction run.

    The defaults reproduce the full behaviour: every EXIF directory is
    walked, the HDR+ pipeline runs for HDR+ images and the vendor
    MakerNote registry is consulted for everything else.
    """

    def __init__(
        self,
        decode_hdrplus: bool = True,
        hdrplus_software_prefix: str = "HDR+",
        decode_vendor_makernotes: bool = True,
        keep_raw_makernote: bool = True,
        max_ifd_depth: int = 4,
        latitude_range: Tuple[float, float] = (-90.0, 90.0),
        longitude_range: Tuple[float, float] = (-180.0, 180.0),
        altitude_range: Tuple[float, float] = (-11000.0, 9000.0),
        inflate_chunk_size: int = 4096,
        vendor_parsers: Optional[List] = None,
    ):
        """
        Initialize extraction configuration.

        Args:
            decode_hdrplus: Run the XMP/cipher/recovery pipeline for HDR+ images
            hdrplus_software_prefix: Software value prefix that triggers the pipeline
            decode_vendor_makernotes: Try the vendor parsers on the EXIF MakerNote tag
            keep_raw_makernote: Keep raw MakerNote bytes in the result
            max_ifd_depth: Maximum nesting of sub-IFDs below IFD0
            latitude_range: Inclusive bounds outside which a warning is recorded
            longitude_range: Inclusive bounds outside which a warning is recorded
            altitude_range: Inclusive bounds (metres) outside which a warning is recorded
            inflate_chunk_size: Bytes fed to the decompressor per step
            vendor_parsers: Ordered vendor parsers; None uses the default registry
        """
        self.decode_hdrplus = decode_hdrplus
        self.hdrplus_software_prefix = hdrplus_software_prefix
        self.decode_vendor_makernotes = decode_vendor_makernotes
        self.keep_raw_makernote = keep_raw_makernote
        self.max_ifd_depth = max_ifd_depth
        self.latitude_range = latitude_range
        self.longitude_range = longitude_range
        self.altitude_range = altitude_range
        self.inflate_chunk_size = max(1, inflate_chunk_size)
        self.vendor_parsers = vendor_parsers

    def get_vendor_parsers(self) -> List:
        if self.vendor_parsers is not None:
            return list(self.vendor_parsers)
        from provexif.makernote_parser import default_registry
        return default_registry()
