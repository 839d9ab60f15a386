#!/usr/bin/env python3
"""
ELF Image Module
================

Byte-level model of an ELF file used by the section stripper.

An ElfImage owns exactly one buffer:
- a private copy-on-write mapping for source files (edits never reach the disk)
- a shared writable mapping for output files (edits are flushed on close)
- a bytearray for images built from in-memory data

Header fields are addressed by name (e_shoff, e_shnum, ...). The byte offset and width
of each name come from the layout table of the detected ELF class, so callers never
branch on 32/64-bit.
"""

import os
import mmap
import logging
from typing import Optional, Union

from .types import (
    ELF_MAGIC, EI_CLASS, EI_DATA, ELF_LAYOUTS, ELFClass, ELFData, ElfLayout,
    SECTION_TABLE_FIELDS,
)
from .errors import NotElfError, UnsupportedClassError, MalformedSectionTableError, ElfIOError
from .utils import align_to_page

logger = logging.getLogger(__name__)


class ElfImage:
    """
    Memory-mapped ELF image with class-aware header accessors.

    Use it as a context manager so the mapping and the file handle are released on
    every exit path:

        with ElfImage(path) as image:
            shoff = image.read_header_field('e_shoff')
    """

    def __init__(self, file_path: Optional[str], writable: bool = False):
        """
        Args:
            file_path: Path of the ELF file to map
            writable: Map the file shared and writable instead of as a private copy
        """
        self.file_path = file_path
        self.writable = writable
        self.file_handle = None
        self.data = None
        self.logical_size = 0
        self.mapped_size = 0
        self.elf_class = None
        self.byte_order = 'little'
        self.layout = None  # type: Optional[ElfLayout]

    def __enter__(self):
        if self.data is None:
            self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self):
        kind = self.elf_class.name if self.elf_class is not None else "unopened"
        return f"ElfImage({self.file_path!r}, {kind}, size={self.logical_size})"

    # =========================================================================
    # Acquisition and release
    # =========================================================================

    @classmethod
    def from_bytes(cls, data: Union[bytes, bytearray]) -> 'ElfImage':
        """Build an image over a private copy of in-memory ELF data"""
        image = cls(None, writable=False)
        image.data = bytearray(data)
        image.logical_size = len(image.data)
        image.mapped_size = image.logical_size
        image._validate()
        return image

    def open(self) -> 'ElfImage':
        """
        Open and map the ELF file, then validate its identification bytes.

        Raises:
            ElfIOError: the file cannot be opened, sized or mapped
            NotElfError: empty file, bad magic or truncated header
            UnsupportedClassError: class byte is not 32 or 64-bit
        """
        mode = 'r+b' if self.writable else 'rb'
        access = mmap.ACCESS_WRITE if self.writable else mmap.ACCESS_COPY

        try:
            self.file_handle = open(self.file_path, mode)
            self.logical_size = os.fstat(self.file_handle.fileno()).st_size
        except (IOError, OSError) as e:
            self.close()
            raise ElfIOError(f"Failed to open file {self.file_path}: {e}", self.file_path) from e

        if self.logical_size == 0:
            self.close()
            raise NotElfError(f"File is empty: {self.file_path}")

        try:
            self.data = mmap.mmap(self.file_handle.fileno(), 0, access=access)
        except (OSError, ValueError) as e:
            self.close()
            raise ElfIOError(f"Failed to map file {self.file_path}: {e}", self.file_path) from e

        self.mapped_size = align_to_page(self.logical_size)

        try:
            self._validate()
        except Exception:
            self.close()
            raise

        logger.info(f"Opened ELF file: {self.file_path} "
                    f"({'64-bit' if self.is_64bit else '32-bit'}, {self.logical_size} bytes, "
                    f"{'writable' if self.writable else 'private copy'})")
        return self

    def _validate(self):
        """Check magic and class byte, then select the class layout"""
        where = self.file_path or "<memory>"

        if self.logical_size < len(ELF_MAGIC) or bytes(self.data[:4]) != ELF_MAGIC:
            raise NotElfError(f"Not a valid ELF file: {where}")

        if self.logical_size <= EI_CLASS:
            raise NotElfError(f"Truncated ELF identification: {where}")

        class_byte = self.data[EI_CLASS]
        if class_byte not in ELF_LAYOUTS:
            raise UnsupportedClassError(class_byte, self.file_path)

        self.elf_class = ELFClass(class_byte)
        self.layout = ELF_LAYOUTS[self.elf_class]

        if self.logical_size < self.layout.header_size:
            raise NotElfError(f"File too small for ELF header: {where} "
                              f"({self.logical_size} < {self.layout.header_size} bytes)")

        # Byte order is not validated; anything but MSB reads as little-endian
        if self.data[EI_DATA] == ELFData.ELFDATA2MSB:
            self.byte_order = 'big'
        else:
            self.byte_order = 'little'

    def flush(self):
        """Push pending writes of a writable mapping to the file"""
        if not self.writable or self.data is None:
            return
        try:
            self.data.flush()
        except (OSError, ValueError) as e:
            raise ElfIOError(f"Failed to flush {self.file_path}: {e}", self.file_path) from e

    def close(self):
        """Flush if writable, then release the mapping and the file handle"""
        try:
            if isinstance(self.data, mmap.mmap):
                self.flush()
        finally:
            if isinstance(self.data, mmap.mmap):
                self.data.close()
            self.data = None
            if self.file_handle:
                self.file_handle.close()
                self.file_handle = None

    # =========================================================================
    # Field access
    # =========================================================================

    @property
    def is_64bit(self) -> bool:
        return self.elf_class == ELFClass.ELFCLASS64

    def _check_open(self):
        if self.data is None or self.layout is None:
            raise ValueError("ELF image is not open")

    def _read_int(self, offset: int, width: int) -> int:
        return int.from_bytes(self.data[offset:offset + width], self.byte_order)

    def read_header_field(self, name: str) -> int:
        """
        Read an ELF header field by name.

        Args:
            name: Field name from Elf32_Ehdr/Elf64_Ehdr, e.g. 'e_shoff'

        Raises:
            KeyError: unknown field name
        """
        self._check_open()
        offset, width = self.layout.header_fields[name]
        return self._read_int(offset, width)

    def write_header_field(self, name: str, value: int):
        """
        Write an ELF header field by name into the image buffer.

        Raises:
            KeyError: unknown field name
            ValueError: value does not fit the field width of this class
        """
        self._check_open()
        offset, width = self.layout.header_fields[name]
        if value < 0 or value >= 1 << (8 * width):
            raise ValueError(f"Value 0x{value:x} does not fit {name} ({width} bytes)")
        self.data[offset:offset + width] = value.to_bytes(width, self.byte_order)
        logger.debug(f"Header field {name} <- 0x{value:x}")

    def section_entry_offset(self, index: int) -> int:
        """File offset of section header entry `index`"""
        return self.section_header_offset + index * self.section_header_entry_size

    def read_section_field(self, index: int, name: str) -> int:
        """
        Read a field of the section header entry at `index`.

        Raises:
            KeyError: unknown field name
            MalformedSectionTableError: the entry is not inside the file
        """
        self._check_open()
        offset, width = self.layout.section_fields[name]
        entry = self.section_entry_offset(index)
        if entry + self.layout.section_entry_size > self.logical_size:
            raise MalformedSectionTableError(
                f"Section header {index} at 0x{entry:x} extends beyond file "
                f"(size 0x{self.logical_size:x})")
        return self._read_int(entry + offset, width)

    def zero_range(self, offset: int, size: int):
        """Overwrite `size` bytes at `offset` with zeros"""
        self._check_open()
        if offset < 0 or size < 0 or offset + size > self.logical_size:
            raise MalformedSectionTableError(
                f"Range 0x{offset:x}+0x{size:x} is outside file (size 0x{self.logical_size:x})")
        self.data[offset:offset + size] = bytes(size)

    def read_bytes(self, length: int) -> bytes:
        """Copy of the first `length` bytes of the image"""
        self._check_open()
        return bytes(self.data[:min(length, self.logical_size)])

    # Section table header fields, recomputed on every access

    @property
    def section_header_offset(self) -> int:
        return self.read_header_field('e_shoff')

    @property
    def section_header_entry_size(self) -> int:
        return self.read_header_field('e_shentsize')

    @property
    def section_header_count(self) -> int:
        return self.read_header_field('e_shnum')

    @property
    def string_table_index(self) -> int:
        return self.read_header_field('e_shstrndx')

    def section_table_fields(self) -> dict:
        """The four header fields that describe the section header table"""
        return {name: self.read_header_field(name) for name in SECTION_TABLE_FIELDS}
