#!/usr/bin/env python3
"""
Section Stripper Module
=======================

Removes the section header table and the section-header string table from an
ELF-32/64 file.

The kernel only needs program headers to load and run a process. Linkers append the
section headers at the end of the file, so cutting the file where the section header
table starts leaves the loadable image intact while tools that depend on section
names lose their metadata.

Pipeline:
1. Open the source as a private copy
2. Locate the section-header string table and the section header table offset
3. Zero the string table in the copy, never touching the ELF header
4. Keep only the bytes before the section header table
5. Zero e_shoff, e_shentsize, e_shnum and e_shstrndx in the written output
"""

import os
import logging
from typing import Optional, Union

from .types import SECTION_TABLE_FIELDS, SectionHeaderStringTableRegion, SpecialSection
from .errors import MalformedSectionTableError, ElfIOError
from .elf_image import ElfImage

logger = logging.getLogger(__name__)

# Owner rwx, group rw
OUTPUT_FILE_MODE = 0o760


class StripResult:
    """Outcome of one strip run"""

    def __init__(self, input_size: int, boundary: int,
                 region: Optional[SectionHeaderStringTableRegion]):
        self.input_size = input_size
        self.boundary = boundary
        self.region = region

    @property
    def output_size(self) -> int:
        return self.boundary

    @property
    def removed(self) -> int:
        return self.input_size - self.boundary

    def __repr__(self):
        return (f"StripResult(input_size={self.input_size}, output_size={self.output_size}, "
                f"region={self.region!r})")


class SectionStripper:
    """
    Strips section headers from ELF images.

    The stripper holds no state between runs; each call to strip() or strip_bytes()
    opens its own images and releases them before returning.
    """

    def locate_string_table(self, image: ElfImage) -> Optional[SectionHeaderStringTableRegion]:
        """
        Find the byte range holding the section name strings.

        Returns:
            The region, or None when the file has no section headers or no string
            table index

        Raises:
            MalformedSectionTableError: the entry or its content lies outside the file
        """
        shoff = image.section_header_offset
        index = image.string_table_index

        if shoff == 0:
            logger.debug("No section header table (e_shoff is 0)")
            return None

        if index == SpecialSection.SHN_UNDEF:
            logger.debug("No section-header string table (e_shstrndx is SHN_UNDEF)")
            return None

        if index == SpecialSection.SHN_XINDEX:
            index = image.read_section_field(0, 'sh_link')
            logger.debug(f"Extended string table index from section 0: {index}")

        offset = image.read_section_field(index, 'sh_offset')
        size = image.read_section_field(index, 'sh_size')

        if offset + size > image.logical_size:
            raise MalformedSectionTableError(
                f"String table 0x{offset:x}+0x{size:x} extends beyond file "
                f"(size 0x{image.logical_size:x})")

        region = SectionHeaderStringTableRegion(offset, size, index)
        logger.debug(f"Section-header string table: section {index}, "
                     f"offset=0x{offset:x}, size=0x{size:x}")
        return region

    def compute_truncation_boundary(self, image: ElfImage) -> int:
        """
        Offset where the output file ends: the start of the section header table.

        A file without section headers keeps its full size.

        Raises:
            MalformedSectionTableError: the table offset is past the end of the file
                or inside the ELF header
        """
        shoff = image.section_header_offset

        if shoff == 0:
            return image.logical_size

        if shoff > image.logical_size:
            raise MalformedSectionTableError(
                f"Section header table offset 0x{shoff:x} is beyond file "
                f"(size 0x{image.logical_size:x})")

        if shoff < image.layout.header_size:
            raise MalformedSectionTableError(
                f"Section header table offset 0x{shoff:x} overlaps the ELF header")

        return shoff

    def emit_stripped(self, image: ElfImage, boundary: int) -> bytes:
        """The first `boundary` bytes of the image, unmodified"""
        return image.read_bytes(boundary)

    def rewrite_header(self, output_image: ElfImage):
        """Declare that the output has no section headers"""
        for name in SECTION_TABLE_FIELDS:
            output_image.write_header_field(name, 0)

    def scrub_string_table(self, image: ElfImage,
                           region: Optional[SectionHeaderStringTableRegion]):
        """
        Zero the section name strings in the source working copy.

        This must run before truncation, on the source image. The region offsets
        belong to the source file and are usually past the truncation boundary.
        Bytes inside the ELF header are left alone.
        """
        if region is None or region.size == 0:
            return

        # The ELF header itself is never scrubbed
        start = max(region.offset, image.layout.header_size)
        if start >= region.end:
            logger.warning(f"Section names at 0x{region.offset:x} lie inside the ELF header, "
                           f"not scrubbed")
            return
        if start != region.offset:
            logger.warning(f"Section names at 0x{region.offset:x} overlap the ELF header, "
                           f"scrubbing from 0x{start:x}")

        image.zero_range(start, region.end - start)
        logger.debug(f"Scrubbed {region.end - start} bytes of section names at 0x{start:x}")

    def _prepare(self, image: ElfImage):
        """Locate, compute the boundary and scrub on an opened source image"""
        logger.debug(f"Source section table fields: {image.section_table_fields()}")

        has_section_table = image.section_header_offset != 0
        region = self.locate_string_table(image)
        boundary = self.compute_truncation_boundary(image)
        self.scrub_string_table(image, region)

        if not has_section_table:
            logger.warning("Input has no section header table, output is a plain copy")
        else:
            logger.debug(f"Truncation boundary: 0x{boundary:x} "
                         f"({image.logical_size - boundary} bytes dropped)")

        return region, boundary

    def strip(self, input_path: str, output_path: str) -> StripResult:
        """
        Strip `input_path` and write the result to `output_path`.

        The input file is never modified. The output file is created (or
        truncated) with mode 0o760, subject to the umask.

        Raises:
            NotElfError, UnsupportedClassError, MalformedSectionTableError, ElfIOError
        """
        with ElfImage(input_path) as source:
            region, boundary = self._prepare(source)
            stripped = self.emit_stripped(source, boundary)
            input_size = source.logical_size

        self._write_output(output_path, stripped)

        with ElfImage(output_path, writable=True) as output:
            self.rewrite_header(output)

        result = StripResult(input_size, boundary, region)
        logger.info(f"Stripped {input_path} -> {output_path}: "
                    f"{result.input_size} -> {result.output_size} bytes")
        return result

    def strip_bytes(self, data: Union[bytes, bytearray]) -> bytearray:
        """Strip an in-memory ELF image and return the stripped copy"""
        source = ElfImage.from_bytes(data)
        try:
            region, boundary = self._prepare(source)
            stripped = self.emit_stripped(source, boundary)
        finally:
            source.close()

        output = ElfImage.from_bytes(stripped)
        try:
            self.rewrite_header(output)
            return bytearray(output.data)
        finally:
            output.close()

    def _write_output(self, output_path: str, content: bytes):
        try:
            fd = os.open(output_path, os.O_CREAT | os.O_RDWR | os.O_TRUNC, OUTPUT_FILE_MODE)
            with os.fdopen(fd, 'wb') as f:
                f.write(content)
        except (IOError, OSError) as e:
            raise ElfIOError(f"Failed to write output file {output_path}: {e}", output_path) from e

        logger.debug(f"Wrote {len(content)} bytes to {output_path}")


def strip_file(input_path: str, output_path: str) -> StripResult:
    """Convenience wrapper around SectionStripper().strip()"""
    return SectionStripper().strip(input_path, output_path)


def strip_bytes(data: Union[bytes, bytearray]) -> bytearray:
    """
    Strip section headers from ELF data held in memory.

    Example:
        >>> with open('a.out', 'rb') as f:
        ...     stripped = strip_bytes(f.read())
        >>> with open('a.out.stripped', 'wb') as f:
        ...     f.write(stripped)
    """
    return SectionStripper().strip_bytes(data)
