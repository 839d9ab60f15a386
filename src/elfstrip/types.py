import ctypes
from enum import IntEnum

# =============================================================================
# ELF Constants and Enums
# =============================================================================

ELF_MAGIC = b'\x7fELF'

EI_CLASS = 4
EI_DATA = 5
EI_NIDENT = 16


class ELFClass(IntEnum):
    """ELF file class constants"""
    ELFCLASSNONE = 0
    ELFCLASS32 = 1
    ELFCLASS64 = 2


class ELFData(IntEnum):
    """ELF data encoding constants"""
    ELFDATANONE = 0
    ELFDATA2LSB = 1  # Little endian
    ELFDATA2MSB = 2  # Big endian


class SpecialSection(IntEnum):
    """Reserved section header table indices"""
    SHN_UNDEF = 0
    SHN_XINDEX = 0xffff  # Real index lives in sh_link of entry 0


# Header fields that describe the section header table
SECTION_TABLE_FIELDS = ('e_shoff', 'e_shentsize', 'e_shnum', 'e_shstrndx')


# =============================================================================
# ctypes Type Definitions (matching elf.h exactly)
# =============================================================================

# Basic ELF types
Elf32_Addr = ctypes.c_uint32
Elf32_Off = ctypes.c_uint32
Elf32_Word = ctypes.c_uint32
Elf32_Half = ctypes.c_uint16

Elf64_Addr = ctypes.c_uint64
Elf64_Off = ctypes.c_uint64
Elf64_Half = ctypes.c_uint32
Elf64_Quarter = ctypes.c_uint16
Elf64_Xword = ctypes.c_uint64


# =============================================================================
# ELF Header Structures
# =============================================================================

class Elf32_Ehdr(ctypes.Structure):
    """32-bit ELF header structure"""
    _fields_ = [
        ('e_ident', ctypes.c_uint8 * EI_NIDENT),  # Magic number and other info
        ('e_type', Elf32_Half),            # Object file type
        ('e_machine', Elf32_Half),         # Architecture
        ('e_version', Elf32_Word),         # Object file version
        ('e_entry', Elf32_Addr),           # Entry point virtual address
        ('e_phoff', Elf32_Off),            # Program header table file offset
        ('e_shoff', Elf32_Off),            # Section header table file offset
        ('e_flags', Elf32_Word),           # Processor-specific flags
        ('e_ehsize', Elf32_Half),          # ELF header size in bytes
        ('e_phentsize', Elf32_Half),       # Program header table entry size
        ('e_phnum', Elf32_Half),           # Program header table entry count
        ('e_shentsize', Elf32_Half),       # Section header table entry size
        ('e_shnum', Elf32_Half),           # Section header table entry count
        ('e_shstrndx', Elf32_Half),        # Section header string table index
    ]


class Elf64_Ehdr(ctypes.Structure):
    """64-bit ELF header structure"""
    _fields_ = [
        ('e_ident', ctypes.c_uint8 * EI_NIDENT),  # Magic number and other info
        ('e_type', Elf64_Quarter),         # Object file type
        ('e_machine', Elf64_Quarter),      # Architecture
        ('e_version', Elf64_Half),         # Object file version
        ('e_entry', Elf64_Addr),           # Entry point virtual address
        ('e_phoff', Elf64_Off),            # Program header table file offset
        ('e_shoff', Elf64_Off),            # Section header table file offset
        ('e_flags', Elf64_Half),           # Processor-specific flags
        ('e_ehsize', Elf64_Quarter),       # ELF header size in bytes
        ('e_phentsize', Elf64_Quarter),    # Program header table entry size
        ('e_phnum', Elf64_Quarter),        # Program header table entry count
        ('e_shentsize', Elf64_Quarter),    # Section header table entry size
        ('e_shnum', Elf64_Quarter),        # Section header table entry count
        ('e_shstrndx', Elf64_Quarter),     # Section header string table index
    ]


# =============================================================================
# Section Header Structures
# =============================================================================

class Elf32_Shdr(ctypes.Structure):
    """32-bit section header structure"""
    _fields_ = [
        ('sh_name', Elf32_Word),      # Section name (string table index)
        ('sh_type', Elf32_Word),      # Section type
        ('sh_flags', Elf32_Word),     # Section flags
        ('sh_addr', Elf32_Addr),      # Section virtual addr at execution
        ('sh_offset', Elf32_Off),     # Section file offset
        ('sh_size', Elf32_Word),      # Section size in bytes
        ('sh_link', Elf32_Word),      # Link to another section
        ('sh_info', Elf32_Word),      # Additional section information
        ('sh_addralign', Elf32_Word), # Section alignment
        ('sh_entsize', Elf32_Word),   # Entry size if section holds table
    ]


class Elf64_Shdr(ctypes.Structure):
    """64-bit section header structure"""
    _fields_ = [
        ('sh_name', Elf64_Half),      # Section name (string table index)
        ('sh_type', Elf64_Half),      # Section type
        ('sh_flags', Elf64_Xword),    # Section flags
        ('sh_addr', Elf64_Addr),      # Section virtual addr at execution
        ('sh_offset', Elf64_Off),     # Section file offset
        ('sh_size', Elf64_Xword),     # Section size in bytes
        ('sh_link', Elf64_Half),      # Link to another section
        ('sh_info', Elf64_Half),      # Additional section information
        ('sh_addralign', Elf64_Xword), # Section alignment
        ('sh_entsize', Elf64_Xword),  # Entry size if section holds table
    ]


# =============================================================================
# Field layout tables
# =============================================================================

def build_field_layout(structure) -> dict:
    """
    Map every scalar field of a ctypes structure to its (offset, width).

    Array members such as e_ident are skipped; they are not addressed as integers.
    """
    layout = {}
    for name, field_type in structure._fields_:
        if issubclass(field_type, ctypes.Array):
            continue
        descriptor = getattr(structure, name)
        layout[name] = (descriptor.offset, descriptor.size)
    return layout


class ElfLayout:
    """Class-specific structure types and field layouts"""

    def __init__(self, elf_class: ELFClass, header_type, section_type):
        self.elf_class = elf_class
        self.header_type = header_type
        self.section_type = section_type
        self.header_size = ctypes.sizeof(header_type)
        self.section_entry_size = ctypes.sizeof(section_type)
        self.header_fields = build_field_layout(header_type)
        self.section_fields = build_field_layout(section_type)

    def __repr__(self):
        return f"ElfLayout({self.elf_class.name})"


ELF_LAYOUTS = {
    ELFClass.ELFCLASS32: ElfLayout(ELFClass.ELFCLASS32, Elf32_Ehdr, Elf32_Shdr),
    ELFClass.ELFCLASS64: ElfLayout(ELFClass.ELFCLASS64, Elf64_Ehdr, Elf64_Shdr),
}


# =============================================================================
# Section header string table region
# =============================================================================

class SectionHeaderStringTableRegion:
    """Byte range of the section name strings inside the source file"""

    def __init__(self, offset: int, size: int, index: int = 0):
        self.offset = offset
        self.size = size
        self.index = index

    @property
    def end(self) -> int:
        return self.offset + self.size

    def __eq__(self, other):
        if not isinstance(other, SectionHeaderStringTableRegion):
            return NotImplemented
        return (self.offset, self.size, self.index) == (other.offset, other.size, other.index)

    def __repr__(self):
        return (f"SectionHeaderStringTableRegion(offset=0x{self.offset:x}, "
                f"size=0x{self.size:x}, index={self.index})")
