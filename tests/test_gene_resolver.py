"""Tests for gene identifier resolution."""

from unittest.mock import Mock

import pytest

from gene_analysis.error_handler import InputValidationError, NetworkError, NotFoundError
from gene_analysis.gene_resolver import GeneResolver, classify_input
from gene_analysis.models import IdentitySource


@pytest.fixture
def clients():
    """Upstream clients where every lookup fails."""
    mock = Mock()
    mock.mygene.query_gene.side_effect = NotFoundError("no hit")
    mock.ensembl.lookup_symbol.side_effect = NetworkError("down", status=503)
    mock.ncbi.search_gene_ids.side_effect = NotFoundError("no match")
    mock.ncbi.gene_summary.side_effect = NotFoundError("no summary")
    return mock


class TestClassifyInput:

    def test_numeric_input_is_gene_id(self):
        assert classify_input(' 672 ') == (True, '672')

    def test_symbols_are_upper_cased(self):
        assert classify_input('brca1') == (False, 'BRCA1')
        assert classify_input('C9orf72') == (False, 'C9ORF72')


class TestGeneResolver:

    def test_primary_api_wins(self, clients):
        clients.mygene.query_gene.side_effect = None
        clients.mygene.query_gene.return_value = {'entrezgene': 672, 'symbol': 'BRCA1'}

        identity = GeneResolver(clients).resolve('brca1')

        assert identity.gene_id == '672'
        assert identity.symbol == 'BRCA1'
        assert identity.source == IdentitySource.PRIMARY_API
        assert identity.raw_input == 'brca1'
        clients.mygene.query_gene.assert_called_once_with(symbol='BRCA1')
        clients.ensembl.lookup_symbol.assert_not_called()

    def test_numeric_input_queries_by_gene_id(self, clients):
        clients.mygene.query_gene.side_effect = None
        clients.mygene.query_gene.return_value = {'entrezgene': 7157, 'symbol': 'TP53'}

        identity = GeneResolver(clients).resolve('7157')

        clients.mygene.query_gene.assert_called_once_with(gene_id='7157')
        assert identity.symbol == 'TP53'

    def test_ensembl_with_entrez_xref(self, clients):
        clients.ensembl.lookup_symbol.side_effect = None
        clients.ensembl.lookup_symbol.return_value = {'id': 'ENSG00000012048', 'display_name': 'BRCA1'}
        clients.ensembl.entrez_gene_id.return_value = '672'

        identity = GeneResolver(clients).resolve('BRCA1')

        assert identity.gene_id == '672'
        assert identity.source == IdentitySource.SECONDARY_API

    def test_ensembl_without_xref_keeps_stable_id(self, clients):
        clients.ensembl.lookup_symbol.side_effect = None
        clients.ensembl.lookup_symbol.return_value = {'id': 'ENSG00000012048', 'display_name': 'BRCA1'}
        clients.ensembl.entrez_gene_id.side_effect = NotFoundError("no xref")

        identity = GeneResolver(clients).resolve('BRCA1')

        assert identity.gene_id == 'ENSG00000012048'
        assert not identity.has_numeric_gene_id

    def test_ensembl_skipped_for_numeric_input(self, clients):
        GeneResolver(clients).resolve('99999999')
        clients.ensembl.lookup_symbol.assert_not_called()

    def test_ncbi_search_for_symbols(self, clients):
        clients.ncbi.search_gene_ids.side_effect = None
        clients.ncbi.search_gene_ids.return_value = ['1956']

        identity = GeneResolver(clients).resolve('egfr')

        assert identity.gene_id == '1956'
        assert identity.source == IdentitySource.TERTIARY_API
        term = clients.ncbi.search_gene_ids.call_args.args[0]
        assert term == 'EGFR[Gene Name] AND Homo sapiens[Organism]'

    def test_ncbi_summary_for_ids(self, clients):
        clients.ncbi.gene_summary.side_effect = None
        clients.ncbi.gene_summary.return_value = {'uid': '3845', 'name': 'KRAS'}

        identity = GeneResolver(clients).resolve('3845')

        assert identity.symbol == 'KRAS'
        assert identity.source == IdentitySource.TERTIARY_API

    def test_offline_table_matches_alias(self, clients):
        identity = GeneResolver(clients).resolve('rnf53')

        assert identity.gene_id == '672'
        assert identity.symbol == 'BRCA1'
        assert identity.source == IdentitySource.OFFLINE_TABLE

    def test_unknown_symbol_is_synthesized(self, clients):
        identity = GeneResolver(clients).resolve('ZZZZNOTAGENE123')

        assert identity.gene_id == 'unknown'
        assert identity.symbol == 'ZZZZNOTAGENE123'
        assert identity.source == IdentitySource.SYNTHESIZED

    def test_unknown_numeric_id_is_kept(self, clients):
        identity = GeneResolver(clients).resolve('99999999')

        assert identity.gene_id == '99999999'
        assert identity.source == IdentitySource.SYNTHESIZED

    def test_hit_without_identifier_falls_through(self, clients):
        clients.mygene.query_gene.side_effect = None
        clients.mygene.query_gene.return_value = {'symbol': 'TP53'}

        identity = GeneResolver(clients).resolve('TP53')

        # Offline table supplies the ID
        assert identity.gene_id == '7157'
        assert identity.source == IdentitySource.OFFLINE_TABLE

    def test_empty_input_rejected(self, clients):
        with pytest.raises(InputValidationError):
            GeneResolver(clients).resolve('   ')

    def test_unexpected_strategy_error_falls_through(self, clients):
        clients.mygene.query_gene.side_effect = AttributeError("'str' object has no attribute 'get'")
        clients.ensembl.lookup_symbol.side_effect = TypeError("string indices must be integers")

        identity = GeneResolver(clients).resolve('BRCA1')

        assert identity.gene_id == '672'
        assert identity.source == IdentitySource.OFFLINE_TABLE
