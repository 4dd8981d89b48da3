"""Tests for sequence retrieval and accession classification."""

from unittest.mock import Mock

import pytest

from gene_analysis.config import LimitsConfig
from gene_analysis.error_handler import NotFoundError
from gene_analysis.models import GeneIdentity, IdentitySource, SequenceKind
from gene_analysis.sequence_retriever import (
    SequenceRetriever, classify_accession, classify_sequences
)


def summary(accession, length=1000, title='record'):
    return {'accessionversion': accession, 'slen': length, 'title': title}


BRCA1 = GeneIdentity(raw_input='BRCA1', gene_id='672', symbol='BRCA1', source=IdentitySource.PRIMARY_API)


class TestClassification:

    @pytest.mark.parametrize('accession, kind', [
        ('NG_005905.2', SequenceKind.REFSEQ_GENE),
        ('NC_000017.11', SequenceKind.GENOMIC),
        ('NM_007294.4', SequenceKind.MRNA),
        ('NR_027676.2', SequenceKind.NON_CODING_RNA),
        ('XM_011524576.3', None),
        ('U14680.1', None),
    ])
    def test_prefixes(self, accession, kind):
        assert classify_accession(accession) == kind

    def test_refseq_gene_preferred_over_chromosome(self):
        sequences = classify_sequences([
            summary('NC_000017.11', 248956422),
            summary('NG_005905.2', 193689),
            summary('NG_999999.1', 10),
        ])
        assert sequences.genomic.accession == 'NG_005905.2'
        assert sequences.genomic.kind == SequenceKind.REFSEQ_GENE

    def test_chromosome_used_without_refseq_gene(self):
        sequences = classify_sequences([summary('NC_000017.11'), summary('NM_007294.4')])
        assert sequences.genomic.accession == 'NC_000017.11'

    def test_mrna_keeps_discovery_order_and_tags_non_coding(self):
        sequences = classify_sequences([
            summary('NM_007294.4', 7088, 'BRCA1 transcript variant 1, mRNA'),
            summary('NR_027676.2', 7000),
            summary('XM_011524576.3'),
            summary('NM_007297.4', 6950),
        ])
        assert [s.accession for s in sequences.mrna] == ['NM_007294.4', 'NR_027676.2', 'NM_007297.4']
        assert sequences.mrna[1].kind == SequenceKind.NON_CODING_RNA
        assert sequences.mrna[0].length_bp == 7088
        assert sequences.genomic is None

    def test_caption_used_when_accessionversion_missing(self):
        sequences = classify_sequences([{'caption': 'NM_000546', 'slen': '2512'}])
        assert sequences.mrna[0].accession == 'NM_000546'
        assert sequences.mrna[0].length_bp == 2512


class TestSequenceRetriever:

    def test_fetch_sequences(self):
        clients = Mock()
        clients.ncbi.linked_nucleotide_ids.return_value = ['1', '2']
        clients.ncbi.nucleotide_summaries.return_value = [
            summary('NG_005905.2', 193689), summary('NM_007294.4', 7088)
        ]

        sequences = SequenceRetriever(clients, LimitsConfig(max_linked_sequences=5)).fetch_sequences(BRCA1)

        clients.ncbi.linked_nucleotide_ids.assert_called_once_with('672', 5)
        clients.ncbi.nucleotide_summaries.assert_called_once_with(['1', '2'])
        assert sequences.genomic.accession == 'NG_005905.2'
        assert sequences.mrna[0].accession.startswith('NM_')

    def test_requires_numeric_gene_id(self):
        clients = Mock()
        unknown = GeneIdentity('ZZZ', 'unknown', 'ZZZ', IdentitySource.SYNTHESIZED)

        with pytest.raises(NotFoundError):
            SequenceRetriever(clients).fetch_sequences(unknown)
        clients.ncbi.linked_nucleotide_ids.assert_not_called()

    def test_empty_link_set(self):
        clients = Mock()
        clients.ncbi.linked_nucleotide_ids.return_value = []

        with pytest.raises(NotFoundError):
            SequenceRetriever(clients).fetch_sequences(BRCA1)

    def test_nothing_classifiable(self):
        clients = Mock()
        clients.ncbi.linked_nucleotide_ids.return_value = ['1']
        clients.ncbi.nucleotide_summaries.return_value = [summary('XM_1.1')]

        with pytest.raises(NotFoundError):
            SequenceRetriever(clients).fetch_sequences(BRCA1)
