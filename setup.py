#!/usr/bin/env python3
"""
elfstrip setup script
=====================

Installs the ELF section header stripper.
"""

from setuptools import setup, find_packages
import os

# Read the long description
def read_long_description():
    here = os.path.abspath(os.path.dirname(__file__))
    try:
        with open(os.path.join(here, 'README.md'), 'r', encoding='utf-8') as f:
            return f.read()
    except FileNotFoundError:
        return "elfstrip - remove section headers from ELF-32/64 executables"

# Read the runtime requirements
def read_requirements():
    here = os.path.abspath(os.path.dirname(__file__))
    try:
        with open(os.path.join(here, 'requirements.txt'), 'r', encoding='utf-8') as f:
            requirements = []
            for line in f:
                line = line.strip()
                if line and not line.startswith('#'):
                    requirements.append(line)
            return requirements
    except FileNotFoundError:
        return []

setup(
    name="elfstrip",
    version="1.0.0",
    author="Fabrizio Curcio (original C tool), Python version",
    author_email="",
    description="ELF section header stripper - cut section headers and their names out of executables",
    long_description=read_long_description(),
    long_description_content_type="text/markdown",

    # Package layout
    package_dir={"": "src"},
    packages=find_packages(where="src"),

    # Dependencies
    install_requires=read_requirements(),
    extras_require={
        "test": ["pytest"],
    },

    # Python version
    python_requires=">=3.8",

    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Debuggers",
        "Topic :: Security",
        "License :: OSI Approved :: GNU General Public License v3 or later (GPLv3+)",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: POSIX :: Linux",
        "Operating System :: MacOS",
    ],

    # Command line entry point
    entry_points={
        "console_scripts": [
            "elfstrip=elfstrip.main:main",
        ],
    },

    keywords="elf, section headers, strip, anti-debug, reverse engineering, binary analysis",

    include_package_data=True,

    zip_safe=False,
)
