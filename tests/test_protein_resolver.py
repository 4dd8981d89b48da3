"""Tests for protein lookup and structure resolution."""

from unittest.mock import Mock

import pytest

from gene_analysis.api_clients import AlphaFoldClient
from gene_analysis.config import APIConfig
from gene_analysis.error_handler import NetworkError, NotFoundError
from gene_analysis.models import GeneIdentity, IdentitySource, ProteinRecord, StructureStatus
from gene_analysis.protein_resolver import ProteinResolver, parse_protein, protein_description, structure_url

UNIPROT_ENTRY = {
    'primaryAccession': 'P38398',
    'uniProtkbId': 'BRCA1_HUMAN',
    'proteinDescription': {
        'recommendedName': {'fullName': {'value': 'Breast cancer type 1 susceptibility protein'}},
    },
    'sequence': {'length': 1863},
    'organism': {'scientificName': 'Homo sapiens', 'taxonId': 9606},
}

BRCA1 = GeneIdentity('BRCA1', '672', 'BRCA1', IdentitySource.PRIMARY_API)
PROTEIN = ProteinRecord('P38398', 'BRCA1_HUMAN', 'Breast cancer type 1 susceptibility protein', 1863, 'Homo sapiens')


@pytest.fixture
def clients():
    mock = Mock()
    mock.alphafold = AlphaFoldClient(Mock(), APIConfig())
    return mock


class TestExtraction:

    def test_description_order(self):
        assert protein_description({'proteinDescription': {
            'submissionNames': [{'fullName': {'value': 'Submitted'}}],
            'alternativeNames': [{'fullName': {'value': 'Alternative'}}],
        }}) == 'Submitted'
        assert protein_description({'proteinDescription': {
            'alternativeNames': [{'fullName': {'value': 'Alternative'}}],
        }}) == 'Alternative'
        assert protein_description({}) == 'No description'

    def test_parse_protein(self):
        protein = parse_protein(UNIPROT_ENTRY)
        assert protein.accession == 'P38398'
        assert protein.name == 'BRCA1_HUMAN'
        assert protein.length_aa == 1863
        assert protein.organism == 'Homo sapiens'

    def test_structure_url_order(self):
        assert structure_url({'pdbUrl': 'a.pdb', 'cifUrl': 'a.cif'}) == 'a.pdb'
        assert structure_url({'cifUrl': 'a.cif'}) == 'a.cif'
        assert structure_url({'model': {'url': 'https://x/m.cif'}}) == 'https://x/m.cif'
        assert structure_url({'files': [{'name': 'notes.txt'}, {'name': 'm.mmcif', 'url': 'https://x/m.mmcif'}]}) \
            == 'https://x/m.mmcif'
        assert structure_url({'files': ['https://x/model.bcif']}) == 'https://x/model.bcif'
        assert structure_url({'entryId': 'AF-P38398-F1'}) is None


class TestFetchProteins:

    def test_exact_query_first(self, clients):
        clients.uniprot.search.return_value = [UNIPROT_ENTRY]

        proteins = ProteinResolver(clients).fetch_proteins(BRCA1)

        assert proteins[0].accession == 'P38398'
        query = clients.uniprot.search.call_args.args[0]
        assert query == 'gene_exact:BRCA1 AND organism_id:9606 AND reviewed:true'

    def test_loose_query_second(self, clients):
        clients.uniprot.search.side_effect = [NotFoundError("none"), [UNIPROT_ENTRY]]

        proteins = ProteinResolver(clients).fetch_proteins(BRCA1)

        assert len(proteins) == 1
        assert clients.uniprot.search.call_args.args[0] == 'gene:BRCA1 AND organism_id:9606'

    def test_not_found_after_both_queries(self, clients):
        clients.uniprot.search.side_effect = NotFoundError("none")

        with pytest.raises(NotFoundError):
            ProteinResolver(clients).fetch_proteins(BRCA1)
        assert clients.uniprot.search.call_count == 2

    def test_network_error_propagates(self, clients):
        clients.uniprot.search.side_effect = NetworkError("down")

        with pytest.raises(NetworkError):
            ProteinResolver(clients).fetch_proteins(BRCA1)


class TestFetchStructure:

    def test_available_from_array_payload(self, clients):
        clients.alphafold.http.get_json.return_value = [{
            'entryId': 'AF-P38398-F1',
            'pdbUrl': 'https://alphafold.ebi.ac.uk/files/AF-P38398-F1-model_v4.pdb',
            'latestVersion': 4,
            'globalMetricValue': 64.5,
        }]

        handle = ProteinResolver(clients).fetch_structure(PROTEIN)

        assert handle.status == StructureStatus.AVAILABLE
        assert handle.is_available
        assert handle.coordinate_file_url.endswith('model_v4.pdb')
        assert handle.model_version == 'v4'
        assert handle.confidence == 64.5
        assert handle.model_page_url == 'https://alphafold.ebi.ac.uk/entry/P38398'

    def test_conventional_url_when_payload_lists_none(self, clients):
        clients.alphafold.http.get_json.return_value = {'entryId': 'AF-P38398-F1'}

        handle = ProteinResolver(clients).fetch_structure(PROTEIN)

        assert handle.coordinate_file_url == 'https://alphafold.ebi.ac.uk/files/AF-P38398-F1-model_v4.pdb'

    def test_not_found(self, clients):
        clients.alphafold.http.get_json.side_effect = NotFoundError("404")
        assert ProteinResolver(clients).fetch_structure(PROTEIN).status == StructureStatus.NOT_FOUND

    def test_empty_payload(self, clients):
        clients.alphafold.http.get_json.return_value = []
        assert ProteinResolver(clients).fetch_structure(PROTEIN).status == StructureStatus.NOT_FOUND

    def test_lookup_failed(self, clients):
        clients.alphafold.http.get_json.side_effect = NetworkError("down")

        handle = ProteinResolver(clients).fetch_structure(PROTEIN)

        assert handle.status == StructureStatus.LOOKUP_FAILED
        assert handle.coordinate_file_url is None
