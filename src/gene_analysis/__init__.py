"""Gene Analysis Platform.

Resolves a human gene symbol or NCBI Gene ID against NCBI, Ensembl, UniProt,
MyGene.info and AlphaFold, and produces a consolidated report with FASTA,
CSV, TXT and JSON export.
"""

__version__ = "1.0.0"
