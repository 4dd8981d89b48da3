"""Protein record lookup and predicted structure resolution."""

import logging
from typing import Any, Dict, List, Optional

from .api_clients import HUMAN_TAXON_ID, UpstreamClients
from .config import APIConfig, LimitsConfig
from .error_handler import NetworkError, NotFoundError
from .extractors import constant, first_of, has_coordinate_extension, path, unwrap_single
from .models import GeneIdentity, ProteinRecord, StructureHandle, StructureStatus, UNKNOWN

logger = logging.getLogger(__name__)

NO_DESCRIPTION = "No description"

protein_description = first_of(
    path('proteinDescription', 'recommendedName', 'fullName', 'value'),
    path('proteinDescription', 'submissionNames', 0, 'fullName', 'value'),
    path('proteinDescription', 'alternativeNames', 0, 'fullName', 'value'),
    constant(NO_DESCRIPTION),
)


def _coordinate_file(payload: Dict[str, Any]) -> Optional[str]:
    """URL of the first entry in a 'files' list that looks like a coordinate file."""
    for entry in payload.get('files') or []:
        if isinstance(entry, str):
            if has_coordinate_extension(entry):
                return entry
            continue
        if not isinstance(entry, dict):
            continue
        for key in ('url', 'name'):
            if has_coordinate_extension(entry.get(key)):
                return entry.get('url') or entry.get(key)
    return None


structure_url = first_of(
    path('pdbUrl'),
    path('cifUrl'),
    path('model', 'pdbUrl'),
    path('model', 'cifUrl'),
    path('model', 'url'),
    _coordinate_file,
)


def parse_protein(entry: Dict[str, Any]) -> ProteinRecord:
    """Build a ProteinRecord from a UniProtKB JSON entry."""
    length = path('sequence', 'length')(entry)
    return ProteinRecord(
        accession=entry['primaryAccession'],
        name=entry.get('uniProtkbId') or entry['primaryAccession'],
        description=protein_description(entry),
        length_aa=int(length or 0),
        organism=path('organism', 'scientificName')(entry) or UNKNOWN
    )


class ProteinResolver:
    """Resolves the protein products of a gene and the primary protein's structure."""

    def __init__(self, clients: UpstreamClients, limits: Optional[LimitsConfig] = None,
                 api_config: Optional[APIConfig] = None):
        self.clients = clients
        self.limits = limits or LimitsConfig()
        self.model_version = (api_config or APIConfig()).alphafold_model_version

    def fetch_proteins(self, identity: GeneIdentity) -> List[ProteinRecord]:
        """
        Search reviewed human entries for the exact gene symbol, then any
        human entry for the gene.

        Raises:
            NotFoundError: If neither query returns an entry
            NetworkError: If UniProt could not be reached
        """
        symbol = identity.symbol
        queries = [
            f"gene_exact:{symbol} AND organism_id:{HUMAN_TAXON_ID} AND reviewed:true",
            f"gene:{symbol} AND organism_id:{HUMAN_TAXON_ID}",
        ]

        for query in queries:
            try:
                entries = self.clients.uniprot.search(query, size=self.limits.protein_results)
            except NotFoundError:
                logger.debug(f"No UniProt entries for {query!r}")
                continue
            proteins = [parse_protein(entry) for entry in entries if entry.get('primaryAccession')]
            if proteins:
                logger.info(f"Found {len(proteins)} protein(s) for {symbol}; primary {proteins[0].accession}")
                return proteins

        raise NotFoundError(f"UniProt has no human protein for {symbol}")

    def fetch_structure(self, protein: ProteinRecord) -> StructureHandle:
        """
        Look up the predicted structure of a protein.

        Never raises: a missing prediction is NOT_FOUND and an unreachable
        service is LOOKUP_FAILED.
        """
        accession = protein.accession
        alphafold = self.clients.alphafold

        try:
            payload = unwrap_single(alphafold.prediction(accession))
        except NotFoundError:
            logger.info(f"No AlphaFold prediction for {accession}")
            return StructureHandle(source_accession=accession, status=StructureStatus.NOT_FOUND)
        except NetworkError as e:
            logger.warning(f"AlphaFold lookup for {accession} failed: {e}")
            return StructureHandle(source_accession=accession, status=StructureStatus.LOOKUP_FAILED)

        if not isinstance(payload, dict) or not payload:
            return StructureHandle(source_accession=accession, status=StructureStatus.NOT_FOUND)

        url = structure_url(payload)
        if not url:
            url = alphafold.fallback_model_url(accession)
            logger.debug(f"Prediction for {accession} lists no model file; using {url}")

        version = payload.get('latestVersion')
        confidence = payload.get('globalMetricValue')
        try:
            confidence = float(confidence) if confidence is not None else None
        except (TypeError, ValueError):
            confidence = None

        return StructureHandle(
            source_accession=accession,
            status=StructureStatus.AVAILABLE,
            coordinate_file_url=url,
            model_page_url=alphafold.entry_page_url(accession),
            model_version=f"v{version}" if version is not None else self.model_version,
            confidence=confidence
        )
