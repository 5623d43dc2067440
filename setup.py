#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Setup script for the FoodSafe traceability and recall-risk core.
"""

from pathlib import Path

from setuptools import find_packages, setup

VERSION = "1.0.0"

# Read README for long description
readme_file = Path(__file__).parent / "README.md"
if readme_file.exists():
    long_description = readme_file.read_text(encoding="utf-8")
else:
    long_description = (
        "FoodSafe - product traceability and recall-risk evaluation for "
        "food-safety quality management"
    )

setup(
    name="foodsafe-qms",
    version=VERSION,
    description="Food-safety traceability, recall-risk and FSMA 204 compliance core",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="FoodSafe Platform Team",
    python_requires=">=3.9",
    packages=find_packages(include=["foodsafe", "foodsafe.*"]),
    install_requires=[
        "pydantic>=2.0",
        "prometheus-client>=0.17",
        "fastapi>=0.100",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
            "httpx>=0.24",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
