#!/usr/bin/env python3
"""
elfstrip
========

Removes the section header table and the section-header string table from ELF-32/64
executables, then clears the ELF header fields that referenced them.

Core modules:
- elf_image: memory-mapped ELF image with class-aware header accessors
- stripper: string table scrubbing, truncation and header rewriting
- types: ELF constants, ctypes structures and field layout tables
- errors: exception hierarchy
- utils: general helpers
- main: command line program
"""

__version__ = "1.0.0"

from .errors import (
    ElfStripError,
    NotElfError,
    UnsupportedClassError,
    MalformedSectionTableError,
    ElfIOError,
)
from .types import ELFClass, SectionHeaderStringTableRegion
from .elf_image import ElfImage
from .stripper import SectionStripper, StripResult, strip_file, strip_bytes
from .main import main

__all__ = [
    'ElfImage',
    'SectionStripper',
    'StripResult',
    'SectionHeaderStringTableRegion',
    'ELFClass',
    'ElfStripError',
    'NotElfError',
    'UnsupportedClassError',
    'MalformedSectionTableError',
    'ElfIOError',
    'strip_file',
    'strip_bytes',
    'main',
]
