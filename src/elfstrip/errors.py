"""
Exceptions raised while reading and stripping ELF images.

Every error is terminal for a strip run; the command line program reports it and
exits with a failure status.
"""


class ElfStripError(Exception):
    """Base class for all elfstrip errors"""


class NotElfError(ElfStripError):
    """The file does not start with a complete ELF header"""


class UnsupportedClassError(ElfStripError):
    """The ELF class byte is neither ELFCLASS32 nor ELFCLASS64"""

    def __init__(self, elf_class: int, path: str = None):
        self.elf_class = elf_class
        self.path = path
        where = f" in {path}" if path else ""
        super().__init__(f"Unsupported ELF class {elf_class}{where}")


class MalformedSectionTableError(ElfStripError):
    """The section header table points outside the file"""


class ElfIOError(ElfStripError):
    """Opening, sizing, mapping or writing a file failed"""

    def __init__(self, message: str, path: str = None):
        self.path = path
        super().__init__(message)
