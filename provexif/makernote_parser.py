# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
MakerNote vendor dispatch

The EXIF MakerNote tag holds a manufacturer-specific block. Vendor
parsers are tried in registry order; each checks its own magic prefix
and answers None when the block is not its format, so the next parser
can try. Adding a vendor means writing a parser and registering it.

Copyright 2025 DNAi inc.
"""

from typing import Dict, List, Optional, Sequence

from provexif.diagnostics import Diagnostics
from provexif.evidence import FieldValue, MakerNoteResult
from provexif.exceptions import MakerNoteParseError

UNKNOWN_MANUFACTURER = 'Unknown'


class MakerNoteVendorParser:
    """
    Base class for a manufacturer MakerNote parser.

    Subclasses set manufacturer and implement try_parse.
    """
    manufacturer = UNKNOWN_MANUFACTURER

    def try_parse(self, raw: bytes) -> Optional[Dict[str, FieldValue]]:
        """
        Decode a MakerNote block.

        Args:
            raw: MakerNote bytes as stored in the EXIF tag

        Returns:
            Decoded fields, or None when the block is not this vendor's format

        Raises:
            MakerNoteParseError: If the format matched but cannot be decoded
        """
        raise NotImplementedError


# Process-wide default parser list. Registering a parser is global
# configuration that affects every later extraction that does not pass
# its own ExtractionConfig(vendor_parsers=...).
_registry: List[MakerNoteVendorParser] = []
_builtins_loaded = False


def register_vendor_parser(parser: MakerNoteVendorParser) -> MakerNoteVendorParser:
    """
    Append a parser to the process-wide default registry.

    Call this once at import or startup time. To use extra parsers for a
    single extraction without affecting other callers, pass them in
    ExtractionConfig(vendor_parsers=...) instead.

    Returns:
        The parser, so this can be used as a one-line registration
    """
    _registry.append(parser)
    return parser


def default_registry() -> List[MakerNoteVendorParser]:
    """Copy of the built-in parsers followed by registered ones, in the order they are tried."""
    global _builtins_loaded
    if not _builtins_loaded:
        from provexif.vendor_apple import AppleMakerNoteParser
        _registry.insert(0, AppleMakerNoteParser())
        _builtins_loaded = True
    return list(_registry)


def dispatch_makernote(raw: bytes, parsers: Sequence[MakerNoteVendorParser],
                       diagnostics: Diagnostics) -> MakerNoteResult:
    """
    Try each parser in order; the first that recognises the block wins.

    A parser that recognises the block but fails to decode it yields a
    result with its manufacturer and no fields. When nothing recognises
    the block it is kept with manufacturer "Unknown" and a warning is
    recorded.
    """
    for parser in parsers:
        try:
            fields = parser.try_parse(raw)
        except MakerNoteParseError as e:
            diagnostics.warning(f"Cannot parse {parser.manufacturer} MakerNote: {e.message}",
                                manufacturer=parser.manufacturer)
            return MakerNoteResult(raw=raw, manufacturer=parser.manufacturer)
        if fields is not None:
            diagnostics.debug(f"Parsed {parser.manufacturer} MakerNote with {len(fields)} fields",
                              manufacturer=parser.manufacturer)
            return MakerNoteResult(raw=raw, manufacturer=parser.manufacturer, parsed_fields=fields)

    diagnostics.warning("Cannot parse MakerNote, corrupted or unsupported",
                        length=len(raw))
    return MakerNoteResult(raw=raw, manufacturer=UNKNOWN_MANUFACTURER)
