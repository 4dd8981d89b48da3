"""
Gene Analysis Platform - multi-source human gene lookup and report export

Resolves a gene symbol or NCBI Gene ID across NCBI, Ensembl, UniProt,
MyGene.info and AlphaFold with retry and relay fallback.
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read the README
this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text()

setup(
    name="gene-analysis-platform",
    version="1.0.0",
    description="Multi-source human gene analysis with resilient fetching and report export",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Bio-Informatics",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.9",
    install_requires=[
        "requests>=2.26.0",
        "urllib3>=1.26.0",
        "click>=8.0.0",
        "flask>=2.2.0",
    ],
    extras_require={
        "dev": [
            "pytest>=6.0",
            "pytest-cov>=2.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "gene-analysis=gene_analysis.cli:cli",
        ],
    },
)
