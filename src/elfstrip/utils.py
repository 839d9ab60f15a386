#!/usr/bin/env python3
"""
ELF Utilities Module
====================

Helper functions shared by the image model, the stripper and the command line:
- Architecture detection
- Page alignment of mapping sizes
- Logging configuration
"""

import logging
import mmap
from typing import Optional
from .types import ELF_MAGIC, EI_CLASS, ELFClass


# =============================================================================
# ELF architecture detection
# =============================================================================

def detect_elf_architecture(file_path: str) -> Optional[str]:
    """
    Detect whether an ELF file is 32-bit or 64-bit.

    Args:
        file_path: Path to the ELF file

    Returns:
        "32" for 32-bit, "64" for 64-bit, None for an invalid ELF or a read error
    """
    try:
        with open(file_path, 'rb') as f:
            e_ident = f.read(16)

            if len(e_ident) <= EI_CLASS or e_ident[:4] != ELF_MAGIC:
                return None

            elf_class = e_ident[EI_CLASS]
            if elf_class == ELFClass.ELFCLASS32:
                return "32"
            elif elf_class == ELFClass.ELFCLASS64:
                return "64"
            else:
                return None

    except (IOError, OSError):
        return None


def align_to_page(size: int, page_size: int = mmap.PAGESIZE) -> int:
    """Round a mapping size up to a whole number of pages (at least one page)"""
    if size <= page_size:
        return page_size
    return (size + page_size - 1) // page_size * page_size


def setup_logging(debug: bool):
    """Setup logging configuration"""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(levelname)s: %(message)s',
        force=True
    )
