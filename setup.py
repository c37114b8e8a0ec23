#!/usr/bin/env python3
"""
respwire Setup Script
=====================
Allows installation of the respwire package.

Usage:
    pip install -e .           # Development install
    pip install -e ".[test]"   # Development install with test tools
    pip install .              # Regular install
"""

from setuptools import setup, find_packages

setup(
    name="respwire",
    version="1.0.0",
    description="RESP2 codec, incremental frame scanner and pipelined client",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "respwire=respwire.cli:main",
        ],
    },
)
