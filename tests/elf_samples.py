#!/usr/bin/env python3
"""
Synthetic ELF images for the test suite
"""

import sys
import os
import ctypes

# Add the src directory to the Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from elfstrip.types import (
    ELFClass, ELFData, Elf32_Ehdr, Elf64_Ehdr, Elf32_Shdr, Elf64_Shdr,
)

SHSTRTAB = b'\0.text\0.shstrtab\0'
SHT_PROGBITS = 1
SHT_STRTAB = 3


def build_elf(is_64bit=True, payload=b'\x90' * 32, strtab=SHSTRTAB, trailer=b''):
    """
    Build a little-endian ELF laid out the way linkers do it:

        ELF header | payload (.text) | .shstrtab | section headers | trailer

    Three sections are described: the null entry, .text and .shstrtab (index 2).
    """
    Ehdr = Elf64_Ehdr if is_64bit else Elf32_Ehdr
    Shdr = Elf64_Shdr if is_64bit else Elf32_Shdr

    ehsize = ctypes.sizeof(Ehdr)
    text_off = ehsize
    strtab_off = text_off + len(payload)
    shoff = strtab_off + len(strtab)

    text = Shdr()
    text.sh_name = 1
    text.sh_type = SHT_PROGBITS
    text.sh_offset = text_off
    text.sh_size = len(payload)

    names = Shdr()
    names.sh_name = 7
    names.sh_type = SHT_STRTAB
    names.sh_offset = strtab_off
    names.sh_size = len(strtab)

    sections = [Shdr(), text, names]

    header = Ehdr()
    header.e_ident[:7] = [0x7f, ord('E'), ord('L'), ord('F'),
                          ELFClass.ELFCLASS64 if is_64bit else ELFClass.ELFCLASS32,
                          ELFData.ELFDATA2LSB, 1]
    header.e_type = 2
    header.e_machine = 62 if is_64bit else 3
    header.e_version = 1
    header.e_ehsize = ehsize
    header.e_shoff = shoff
    header.e_shentsize = ctypes.sizeof(Shdr)
    header.e_shnum = len(sections)
    header.e_shstrndx = 2

    return bytearray(bytes(header) + payload + strtab
                     + b''.join(bytes(s) for s in sections) + trailer)


def build_elf_of_size(total_size, shoff, is_64bit=True):
    """Build an ELF of exactly `total_size` bytes whose section table starts at `shoff`"""
    ehsize = ctypes.sizeof(Elf64_Ehdr if is_64bit else Elf32_Ehdr)
    table_size = 3 * ctypes.sizeof(Elf64_Shdr if is_64bit else Elf32_Shdr)
    payload = b'\xcc' * (shoff - ehsize - len(SHSTRTAB))
    trailer = b'\0' * (total_size - shoff - table_size)
    data = build_elf(is_64bit, payload=payload, trailer=trailer)
    assert len(data) == total_size
    return data


def without_sections(data, is_64bit=True):
    """Copy of `data` whose header declares no section headers"""
    Ehdr = Elf64_Ehdr if is_64bit else Elf32_Ehdr
    header = Ehdr.from_buffer_copy(bytes(data[:ctypes.sizeof(Ehdr)]))
    header.e_shoff = 0
    header.e_shentsize = 0
    header.e_shnum = 0
    header.e_shstrndx = 0
    return bytearray(bytes(header)) + data[ctypes.sizeof(Ehdr):]


def read_header(data, is_64bit=True):
    Ehdr = Elf64_Ehdr if is_64bit else Elf32_Ehdr
    return Ehdr.from_buffer_copy(bytes(data[:ctypes.sizeof(Ehdr)]))


def patch_header(data, is_64bit=True, **fields):
    """Copy of `data` with header fields overwritten"""
    header = read_header(data, is_64bit)
    for name, value in fields.items():
        setattr(header, name, value)
    size = ctypes.sizeof(header)
    return bytearray(bytes(header)) + data[size:]


def write_file(path, data):
    with open(str(path), 'wb') as f:
        f.write(data)
    return str(path)
