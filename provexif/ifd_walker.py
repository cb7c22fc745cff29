# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
IFD walker

Walks an Image File Directory entry by entry and hands each recognised
entry to the active tag table. The walker knows nothing about what the
tags mean; a table may answer an entry with a sub-directory to descend
into, which is how the EXIF and GPS sub-IFDs are reached from IFD0.

Copyright 2025 DNAi inc.
"""

import struct
from dataclasses import dataclass
from typing import Set, TYPE_CHECKING

from provexif.byte_reader import IFD_ENTRY_SIZE, ValueExtractor
from provexif.diagnostics import Diagnostics
from provexif.exceptions import FieldSkipError

if TYPE_CHECKING:
    from provexif.tag_decoders import TagTable


@dataclass
class SubDirectory:
    """A directory a tag table asked the walker to descend into."""
    offset: int
    table: 'TagTable'


class IFDWalker:
    """
    Table-driven IFD walker.

    Args:
        extractor: Value reader bound to the buffer and TIFF header
        diagnostics: Collector for skipped entries and walk problems
        max_depth: Maximum sub-directory nesting below the first directory
    """

    def __init__(self, extractor: ValueExtractor, diagnostics: Diagnostics, max_depth: int = 4):
        self.extractor = extractor
        self.diagnostics = diagnostics
        self.max_depth = max_depth
        self.visited_ifds: Set[int] = set()

    def walk(self, ifd_offset: int, table: 'TagTable', depth: int = 0) -> int:
        """
        Decode every entry of the directory at ifd_offset with table.

        Args:
            ifd_offset: Absolute offset of the directory's entry count
            table: Tag table that decodes entries into the record
            depth: Current nesting level

        Returns:
            Number of entries read
        """
        if ifd_offset in self.visited_ifds:
            self.diagnostics.warning(
                f"{table.name} directory at offset {ifd_offset} was already walked, skipping",
                directory=table.name, offset=ifd_offset)
            return 0
        if depth > self.max_depth:
            self.diagnostics.warning(
                f"{table.name} directory nested too deeply, skipping",
                directory=table.name, depth=depth)
            return 0
        self.visited_ifds.add(ifd_offset)

        entry_count = self.extractor.read_u16(ifd_offset)
        if entry_count is None:
            self.diagnostics.warning(
                f"{table.name} directory offset {ifd_offset} is outside the data",
                directory=table.name, offset=ifd_offset)
            return 0
        self.diagnostics.debug(f"{table.name} entry count {entry_count}",
                               directory=table.name, count=entry_count)

        read = 0
        for index in range(entry_count):
            entry_offset = ifd_offset + 2 + (index * IFD_ENTRY_SIZE)
            entry = self.extractor.read_entry(entry_offset)
            if entry is None:
                self.diagnostics.warning(
                    f"{table.name} directory truncated after {index} of {entry_count} entries",
                    directory=table.name, read=index, declared=entry_count)
                break
            read += 1

            if not table.handles(entry.tag):
                continue

            try:
                sub_directory = table.decode(entry)
            except FieldSkipError as e:
                self.diagnostics.warning(e.message, directory=table.name, tag=f"{entry.tag:#06x}")
                continue
            except (struct.error, ValueError, OverflowError) as e:
                self.diagnostics.warning(
                    f"Cannot decode {table.tag_name(entry.tag)}: {e}",
                    directory=table.name, tag=f"{entry.tag:#06x}")
                continue

            if sub_directory is not None:
                self.walk(sub_directory.offset, sub_directory.table, depth + 1)

        table.finalize()
        return read

