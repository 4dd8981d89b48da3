"""Tests for report rendering and export."""

import json
import tempfile
from datetime import datetime
from pathlib import Path

import pytest

from gene_analysis.models import (
    AnalysisResult, Exon, GeneIdentity, GeneRecord, IdentitySource, ProteinRecord, SequenceKind,
    SequenceRecord, SequenceSet, StageStatus, Strand, StructureHandle, StructureStatus
)
from gene_analysis.output_formatter import CSV_HEADER, ExportFile, OutputFormatter, save_export


@pytest.fixture
def result():
    identity = GeneIdentity('BRCA1', '672', 'BRCA1', IdentitySource.PRIMARY_API)
    analysis = AnalysisResult(
        gene=GeneRecord(
            identity=identity,
            description='BRCA1 DNA repair associated',
            organism='Homo sapiens',
            chromosome='17',
            location='17q21.31',
            function_summary='Tumor suppressor.',
            aliases=['RNF53', 'BRCC1'],
        ),
        sequences=SequenceSet(
            genomic=SequenceRecord('NG_005905.2', 193689, 'BRCA1 RefSeqGene', SequenceKind.REFSEQ_GENE),
            mrna=[
                SequenceRecord('NM_007294.4', 7088, 'BRCA1 transcript variant 1, mRNA', SequenceKind.MRNA),
                SequenceRecord('NM_007297.4', 6950, 'BRCA1 transcript variant 3, mRNA', SequenceKind.MRNA),
            ],
        ),
        exons=[
            Exon(1, 'ENSE00003510592', 43115726, 43115779, Strand.MINUS),
            Exon(2, 'ENSE00001484009', 43124017, 43124115, Strand.MINUS),
        ],
        proteins=[ProteinRecord('P38398', 'BRCA1_HUMAN', 'Breast cancer type 1 susceptibility protein',
                                1863, 'Homo sapiens')],
        structure=StructureHandle('P38398', StructureStatus.AVAILABLE,
                                  'https://alphafold.ebi.ac.uk/files/AF-P38398-F1-model_v4.pdb'),
        finished_at=datetime(2024, 1, 2, 3, 4, 5),
    )
    analysis.record_outcome('identity', StageStatus.LIVE, 'MyGene.info')
    analysis.record_outcome('exons', StageStatus.FALLBACK, 'Ensembl unreachable')
    return analysis


class TestFasta:

    def test_header_counts(self, result):
        fasta = OutputFormatter().to_fasta(result)
        headers = [line for line in fasta.splitlines() if line.startswith('>')]

        assert len([h for h in headers if h.startswith('>mRNA_')]) == 2
        assert len([h for h in headers if h.startswith('>Genomic_')]) == 1
        assert len([h for h in headers if h.startswith('>Protein_')]) == 1
        assert len(headers) == 4

    def test_layout(self, result):
        fasta = OutputFormatter().to_fasta(result)
        records = fasta.rstrip('\n').split('\n\n')

        assert len(records) == 4
        assert records[0] == ">Genomic_NG_005905.2\nSequence information available from NCBI (193689 bp)"
        assert records[1] == ">mRNA_NM_007294.4\nBRCA1 transcript variant 1, mRNA (7088 bp)"
        assert '\n\n\n' not in fasta

    def test_no_records(self, result):
        result.sequences = SequenceSet()
        result.proteins = []
        assert OutputFormatter().to_fasta(result) == ">BRCA1\nNo sequence data available\n"


class TestCsv:

    def test_rows(self, result):
        lines = OutputFormatter().to_csv(result).splitlines()

        assert lines[0] == CSV_HEADER
        assert lines[1] == '1,"ENSE00003510592",43115726,43115779,54,-'
        assert len(lines) == 3

    def test_no_exons(self, result):
        result.exons = []
        with pytest.raises(ValueError):
            OutputFormatter().to_csv(result)


class TestTxt:

    def test_sections_in_order(self, result):
        report = OutputFormatter().to_txt(result)
        sections = ['GENE INFORMATION', 'GENOMIC SEQUENCE', 'mRNA SEQUENCES', 'PROTEIN INFORMATION',
                    'EXON STRUCTURE', 'STRUCTURE PREDICTION', 'DATA SOURCES']

        assert report.startswith('Gene Analysis Report\n')
        positions = [report.index(f"\n{section}\n") for section in sections]
        assert positions == sorted(positions)
        assert 'Aliases: RNF53, BRCC1' in report
        assert 'Total Exons: 2' in report
        assert '- exons: fallback (placeholder data): Ensembl unreachable' in report

    def test_empty_aliases_render_none(self, result):
        result.gene.aliases = []
        assert 'Aliases: None' in OutputFormatter().to_txt(result)


class TestExport:

    def test_filenames_and_mime_types(self, result):
        formatter = OutputFormatter()

        assert formatter.export(result, 'fasta').filename == 'BRCA1_sequences.fasta'
        assert formatter.export(result, 'csv').mime_type == 'text/csv'
        assert formatter.export(result, 'TXT').filename == 'BRCA1_analysis.txt'

        export = formatter.export(result, 'json')
        assert export.filename == 'BRCA1_analysis.json'
        data = json.loads(export.text)
        assert data['gene']['gene_id'] == '672'
        assert data['exons'][0]['strand'] == '-'
        assert data['structure']['status'] == 'available'

    def test_unsupported_format(self, result):
        with pytest.raises(ValueError):
            OutputFormatter().export(result, 'xlsx')

    def test_save_export(self):
        export = ExportFile(content=b'>X\nbody\n', filename='X_sequences.fasta', mime_type='text/plain')
        with tempfile.TemporaryDirectory() as tmpdir:
            path = save_export(export, Path(tmpdir) / 'nested')

            assert path.name == 'X_sequences.fasta'
            assert path.read_bytes() == b'>X\nbody\n'
