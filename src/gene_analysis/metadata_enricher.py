"""Gene metadata enrichment from multiple sources."""

import logging
import re
from typing import Any, Callable, Dict, List, Optional, Tuple

from .api_clients import UpstreamClients
from .config import LimitsConfig
from .extractors import extract_chromosome, first_of, path, split_aliases, unwrap_single
from .models import GeneIdentity, GeneRecord, IdentitySource, is_sentinel
from .reference_genes import ReferenceTable

logger = logging.getLogger(__name__)

ENSEMBL_SOURCE_SUFFIX = re.compile(r'\s*\[Source:[^\]]*\]\s*$')

SPECIES_NAMES = {
    '9606': 'Homo sapiens',
    'homo_sapiens': 'Homo sapiens',
}

MERGE_FIELDS = ['description', 'organism', 'chromosome', 'location', 'function_summary', 'aliases']

_mygene_chromosome = first_of(
    path('genomic_pos', 'chr'),
    path('genomic_pos', 0, 'chr'),
)


def organism_name(value: Any) -> Optional[str]:
    """Map a taxon ID or Ensembl species key to a binomial name."""
    if value is None or str(value).strip() == '':
        return None
    key = str(value).strip()
    if key.lower() in SPECIES_NAMES:
        return SPECIES_NAMES[key.lower()]
    if '_' in key:
        return key.replace('_', ' ').capitalize()
    return key


def strip_ensembl_source(description: Optional[str]) -> Optional[str]:
    """Remove the trailing "[Source:HGNC Symbol;Acc:...]" note."""
    if not description:
        return description
    return ENSEMBL_SOURCE_SUFFIX.sub('', description)


def merge_metadata(record: GeneRecord, fields: Dict[str, Any]) -> List[str]:
    """
    Fill fields of record that still hold a sentinel.

    Populated fields are never overwritten.

    Returns:
        Names of the fields that were filled
    """
    filled = []
    for name in MERGE_FIELDS:
        if name not in fields or is_sentinel(fields[name]):
            continue
        if is_sentinel(getattr(record, name)):
            setattr(record, name, fields[name])
            filled.append(name)
    return filled


class MetadataEnricher:
    """Builds a GeneRecord by merging metadata from NCBI, MyGene.info and Ensembl."""

    def __init__(self, clients: UpstreamClients, limits: Optional[LimitsConfig] = None,
                 reference: Optional[ReferenceTable] = None):
        self.clients = clients
        self.limits = limits or LimitsConfig()
        self.reference = reference or ReferenceTable()
        self.last_sources: List[str] = []

    def enrich(self, identity: GeneIdentity) -> GeneRecord:
        """
        Enrich an identity with descriptive metadata.

        Strategies run in priority order and each one only fills fields
        that are still missing. Failures are logged and skipped.

        Args:
            identity: Resolved gene identity

        Returns:
            GeneRecord, with sentinels for anything no source supplied
        """
        self.last_sources = []

        if identity.source == IdentitySource.OFFLINE_TABLE:
            record = self._from_reference(identity)
            if record is not None:
                self.last_sources.append(IdentitySource.OFFLINE_TABLE.value)
                return record

        record = GeneRecord(identity=identity)
        for name, strategy in self._strategies(identity):
            if not record.missing_fields():
                break
            try:
                fields = strategy(identity)
            except Exception as e:
                logger.warning(f"{name} metadata for {identity.symbol} unavailable: {e}")
                continue

            filled = merge_metadata(record, fields)
            if filled:
                self.last_sources.append(name)
                logger.debug(f"{name} filled {', '.join(filled)} for {identity.symbol}")

        missing = record.missing_fields()
        if missing:
            logger.info(f"Metadata for {identity.symbol} still missing: {', '.join(missing)}")
        return record

    def _strategies(self, identity: GeneIdentity) -> List[Tuple[str, Callable[[GeneIdentity], Dict[str, Any]]]]:
        strategies = []
        if identity.has_numeric_gene_id:
            strategies.append(('NCBI Gene', self._from_ncbi))
        strategies.append(('MyGene.info', self._from_mygene))
        strategies.append(('Ensembl', self._from_ensembl))
        return strategies

    def _from_reference(self, identity: GeneIdentity) -> Optional[GeneRecord]:
        gene = self.reference.lookup(identity.gene_id) or self.reference.lookup(identity.symbol)
        if gene is None:
            return None
        return GeneRecord(
            identity=identity,
            description=gene.description,
            organism=gene.organism,
            chromosome=gene.chromosome,
            location=gene.location,
            function_summary=gene.function_summary,
            aliases=gene.aliases[:self.limits.max_aliases],
        )

    def _from_ncbi(self, identity: GeneIdentity) -> Dict[str, Any]:
        summary = self.clients.ncbi.gene_summary(identity.gene_id)
        location = summary.get('maplocation')
        return {
            'description': summary.get('description'),
            'organism': path('organism', 'scientificname')(summary),
            'chromosome': extract_chromosome(summary.get('chromosome'), location),
            'location': location,
            'function_summary': summary.get('summary'),
            'aliases': split_aliases(
                summary.get('otheraliases'),
                summary.get('otherdesignations'),
                limit=self.limits.max_aliases
            ),
        }

    def _from_mygene(self, identity: GeneIdentity) -> Dict[str, Any]:
        if identity.has_numeric_gene_id:
            hit = self.clients.mygene.query_gene(gene_id=identity.gene_id)
        else:
            hit = self.clients.mygene.query_gene(symbol=identity.symbol)
        location = hit.get('map_location')
        return {
            'description': hit.get('name'),
            'organism': organism_name(hit.get('taxid')),
            'chromosome': extract_chromosome(_mygene_chromosome(hit), location),
            'location': location,
            'function_summary': hit.get('summary'),
            'aliases': split_aliases(hit.get('alias'), limit=self.limits.max_aliases),
        }

    def _from_ensembl(self, identity: GeneIdentity) -> Dict[str, Any]:
        gene = unwrap_single(self.clients.ensembl.lookup_symbol(identity.symbol))
        return {
            'description': strip_ensembl_source(gene.get('description')),
            'organism': organism_name(gene.get('species')),
            'chromosome': extract_chromosome(gene.get('seq_region_name'), None),
        }
