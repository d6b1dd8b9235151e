#!/usr/bin/env python3
"""Setup script for enrollment_split package.
"""

from setuptools import find_packages, setup

setup(
    name="enrollment_split",
    version="1.0.0",
    description="Enrollment file carrier split and deduplication pipeline",
    author="Enrollment Split Team",
    packages=find_packages(include=["src*"]),
    python_requires=">=3.10",
    install_requires=[
        "pandas>=1.5.0",
        "pyyaml>=6.0",
        "joblib>=1.2.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "hypothesis>=6.0.0",
        ],
        "dev": [
            "pytest>=7.0.0",
            "hypothesis>=6.0.0",
            "black>=23.0.0",
            "ruff>=0.1.0",
            "mypy>=1.5.0",
            "pandas-stubs>=2.0.0",
            "types-PyYAML>=6.0.0",
        ],
    },
)
