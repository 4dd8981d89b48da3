"""Report rendering and file export for analysis results."""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Union

from .models import AnalysisResult, StageStatus

logger = logging.getLogger(__name__)

CSV_HEADER = "Exon Number,Exon ID,Start Position,End Position,Length,Strand"
NO_SEQUENCE_DATA = "No sequence data available"


@dataclass
class ExportFile:
    """An export ready to be saved: raw bytes, a filename and a MIME type."""
    content: bytes
    filename: str
    mime_type: str

    @property
    def text(self) -> str:
        return self.content.decode('utf-8')


def save_export(export: ExportFile, directory: Union[str, Path] = '.') -> Path:
    """
    Write an export to a directory.

    Returns:
        Path of the written file
    """
    target_dir = Path(directory)
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / export.filename
    with open(path, 'wb') as f:
        f.write(export.content)
    logger.info(f"Saved {export.filename} ({len(export.content)} bytes) to {target_dir}")
    return path


def _safe_symbol(result: AnalysisResult) -> str:
    return result.gene.symbol.replace('/', '_').replace('\\', '_') or 'gene'


class OutputFormatter:
    """Serialises an AnalysisResult to FASTA, CSV, TXT or JSON."""

    FORMATS = {
        'fasta': ('sequences.fasta', 'text/plain'),
        'csv': ('exons.csv', 'text/csv'),
        'txt': ('analysis.txt', 'text/plain'),
        'json': ('analysis.json', 'application/json'),
    }

    def __init__(self):
        self._renderers: Dict[str, Callable[[AnalysisResult], str]] = {
            'fasta': self.to_fasta,
            'csv': self.to_csv,
            'txt': self.to_txt,
            'json': self.to_json,
        }

    def export(self, result: AnalysisResult, format: str) -> ExportFile:
        """
        Render one export.

        Args:
            result: Finished analysis
            format: One of 'fasta', 'csv', 'txt', 'json'

        Raises:
            ValueError: For an unsupported format, or CSV without exons
        """
        key = format.lower()
        if key not in self.FORMATS:
            raise ValueError(f"Unsupported format: {format}")

        suffix, mime_type = self.FORMATS[key]
        content = self._renderers[key](result)
        return ExportFile(
            content=content.encode('utf-8'),
            filename=f"{_safe_symbol(result)}_{suffix}",
            mime_type=mime_type
        )

    def to_fasta(self, result: AnalysisResult) -> str:
        """One header and one body line per genomic, mRNA and protein record."""
        records: List[str] = []

        genomic = result.sequences.genomic
        if genomic:
            records.append(
                f">Genomic_{genomic.accession}\n"
                f"Sequence information available from NCBI ({genomic.length_bp} bp)"
            )

        for seq in result.sequences.mrna:
            records.append(f">mRNA_{seq.accession}\n{seq.description} ({seq.length_bp} bp)")

        for protein in result.proteins:
            records.append(
                f">Protein_{protein.accession} {protein.name}\n"
                f"{protein.description} ({protein.length_aa} aa)"
            )

        if not records:
            return f">{result.gene.symbol}\n{NO_SEQUENCE_DATA}\n"
        return "\n\n".join(records) + "\n"

    def to_csv(self, result: AnalysisResult) -> str:
        """Exon table with the exon ID quoted."""
        if not result.exons:
            raise ValueError("No exon data available for export")

        lines = [CSV_HEADER]
        for exon in result.exons:
            exon_id = exon.exon_id.replace('"', '""')
            lines.append(
                f'{exon.number},"{exon_id}",{exon.start},{exon.end},{exon.length},{exon.strand.value}'
            )
        return "\n".join(lines) + "\n"

    def to_json(self, result: AnalysisResult) -> str:
        return json.dumps(result.to_dict(), indent=2) + "\n"

    def to_txt(self, result: AnalysisResult) -> str:
        """Plain-text report with fixed section headers."""
        gene = result.gene
        lines = [
            "Gene Analysis Report",
            "====================",
            f"Generated: {(result.finished_at or datetime.now()).strftime('%Y-%m-%d %H:%M:%S')}",
            "",
        ]

        lines += self._section("GENE INFORMATION")
        lines += [
            f"Gene Symbol: {gene.symbol}",
            f"Gene ID: {gene.gene_id}",
            f"Description: {gene.description}",
            f"Organism: {gene.organism}",
            f"Chromosome: {gene.chromosome}",
            f"Location: {gene.location}",
            f"Aliases: {', '.join(gene.aliases) if gene.aliases else 'None'}",
            f"Function: {gene.function_summary}",
            f"Identified via: {gene.identity.source.value}",
            "",
        ]

        lines += self._section("GENOMIC SEQUENCE")
        genomic = result.sequences.genomic
        if genomic:
            lines += [
                f"- Accession: {genomic.accession}",
                f"- Type: {genomic.kind.value}",
                f"- Length: {genomic.length_bp} bp",
            ]
        else:
            lines.append("No genomic sequence available")
        lines.append("")

        lines += self._section("mRNA SEQUENCES")
        if result.sequences.mrna:
            for seq in result.sequences.mrna:
                lines.append(f"- {seq.accession}: {seq.description} ({seq.length_bp} bp, {seq.kind.value})")
        else:
            lines.append("No mRNA sequences available")
        lines.append("")

        lines += self._section("PROTEIN INFORMATION")
        if result.proteins:
            for protein in result.proteins:
                lines.append(
                    f"- {protein.accession} ({protein.name}): {protein.description}, "
                    f"{protein.length_aa} aa, {protein.organism}"
                )
        else:
            lines.append("No protein records available")
        lines.append("")

        lines += self._section("EXON STRUCTURE")
        lines.append(f"Total Exons: {len(result.exons)}")
        if result.exons:
            lines.append("")
            for exon in result.exons:
                lines.append(
                    f"Exon {exon.number}: {exon.exon_id} "
                    f"({exon.start}-{exon.end}, {exon.length} bp, {exon.strand.value})"
                )
        lines.append("")

        lines += self._section("STRUCTURE PREDICTION")
        structure = result.structure
        if structure is None:
            lines.append("No structure lookup performed")
        else:
            lines.append(f"Protein: {structure.source_accession}")
            lines.append(f"Status: {structure.status.value}")
            if structure.coordinate_file_url:
                lines.append(f"Model file: {structure.coordinate_file_url}")
            if structure.model_page_url:
                lines.append(f"Model page: {structure.model_page_url}")
            if structure.model_version:
                lines.append(f"Model version: {structure.model_version}")
            if structure.confidence is not None:
                lines.append(f"Mean pLDDT: {structure.confidence:.1f}")
        lines.append("")

        lines += self._section("DATA SOURCES")
        for outcome in result.outcomes:
            marker = " (placeholder data)" if outcome.status == StageStatus.FALLBACK else ""
            detail = f": {outcome.message}" if outcome.message else ""
            lines.append(f"- {outcome.stage}: {outcome.status.value}{marker}{detail}")

        return "\n".join(lines) + "\n"

    @staticmethod
    def _section(title: str) -> List[str]:
        return [title, "-" * len(title)]
