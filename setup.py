#!/usr/bin/env python3
# =============================================================================
#  javatrace — setup.py
#
#  Install for development with:
#      pip install -e ".[dev]"
#      python -m pytest
# =============================================================================

from __future__ import annotations

import ast
import re
from pathlib import Path

from setuptools import setup, find_packages

_HERE = Path(__file__).resolve().parent


def _read_version() -> str:
    """Extract ``__version__`` from javatrace/__init__.py."""
    init = _HERE / "javatrace" / "__init__.py"
    text = init.read_text(encoding="utf-8")
    match = re.search(r'^__version__\s*=\s*"([^"]+)"', text, re.MULTILINE)
    if match:
        return match.group(1)
    return "0.0.0"


def _package_docstring() -> str:
    """The javatrace package docstring, used as the long description."""
    tree = ast.parse((_HERE / "javatrace" / "__init__.py").read_text(encoding="utf-8"))
    return ast.get_docstring(tree) or ""


def _runtime_requirements() -> list[str]:
    """Requirement specifiers from requirements.txt, inline comments dropped."""
    specifiers = []
    for line in (_HERE / "requirements.txt").read_text(encoding="utf-8").splitlines():
        spec = line.partition("#")[0].strip()
        if spec:
            specifiers.append(spec)
    return specifiers


setup(
    name="javatrace",
    version=_read_version(),
    description=(
        "Static analysis and bounded execution tracing of Java methods: "
        "control flow, recursion detection, variable timelines."
    ),
    long_description=_package_docstring(),
    long_description_content_type="text/x-rst",
    license="MIT",
    author="javatrace contributors",
    python_requires=">=3.10",
    packages=find_packages(
        include=[
            "javatrace",
            "javatrace.*",
        ],
        exclude=[
            "tests",
            "tests.*",
        ],
    ),
    install_requires=_runtime_requirements(),
    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-cov>=4.0",
            "ruff>=0.4",
            "mypy>=1.10",
            "black>=24.0",
            "isort>=5.13",
        ],
    },
    entry_points={
        "console_scripts": [
            "javatrace=javatrace.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Topic :: Software Development :: Quality Assurance",
        "Topic :: Software Development :: Compilers",
    ],
    keywords=[
        "java",
        "static-analysis",
        "execution-trace",
        "control-flow",
        "recursion",
        "program-analysis",
    ],
    zip_safe=False,
)
