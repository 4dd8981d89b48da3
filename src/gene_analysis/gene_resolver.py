"""Gene identifier resolution across prioritized sources."""

import logging
import re
from typing import Callable, List, Optional, Tuple

from .api_clients import UpstreamClients
from .error_handler import GeneAnalysisError, InputValidationError
from .models import GeneIdentity, IdentitySource, UNKNOWN_GENE_ID
from .reference_genes import ReferenceTable

logger = logging.getLogger(__name__)

NUMERIC_ID = re.compile(r'^\d+$')


def classify_input(raw_input: str) -> Tuple[bool, str]:
    """
    Classify user input.

    Returns:
        (is_gene_id, normalized query). Symbols are upper-cased.
    """
    query = raw_input.strip()
    if NUMERIC_ID.match(query):
        return True, query
    return False, query.upper()


class GeneResolver:
    """Resolves a gene symbol or NCBI Gene ID to a canonical identity.

    Strategies are tried in priority order and the first one producing an
    identifier wins: MyGene.info, Ensembl (symbols only), NCBI Gene, then the
    offline reference table. When all of them fail the identity is
    synthesized from the input itself.
    """

    def __init__(self, clients: UpstreamClients, reference: Optional[ReferenceTable] = None):
        """Initialize the resolver.

        Args:
            clients: Upstream API clients
            reference: Offline reference table (defaults to the bundled one)
        """
        self.clients = clients
        self.reference = reference or ReferenceTable()

    def resolve(self, raw_input: str) -> GeneIdentity:
        """Resolve user input to a GeneIdentity.

        Never raises for non-empty input.

        Raises:
            InputValidationError: If the input is empty
        """
        if not raw_input or not raw_input.strip():
            raise InputValidationError("Gene symbol or ID is required")

        is_gene_id, query = classify_input(raw_input)
        logger.info(f"Resolving {'gene ID' if is_gene_id else 'symbol'} {query}")

        for source, strategy in self._strategies(is_gene_id):
            try:
                identity = strategy(raw_input, query, is_gene_id)
            except Exception as e:
                logger.warning(f"{source.value} lookup for {query} failed: {e}")
                continue
            if identity is not None:
                logger.info(f"Resolved {query} to {identity.symbol} (ID {identity.gene_id}) via {source.value}")
                return identity
            logger.debug(f"{source.value} returned no identifier for {query}")

        return self._synthesize(raw_input, query, is_gene_id)

    def _strategies(self, is_gene_id: bool) -> List[Tuple[IdentitySource, Callable]]:
        strategies = [(IdentitySource.PRIMARY_API, self._from_mygene)]
        if not is_gene_id:
            strategies.append((IdentitySource.SECONDARY_API, self._from_ensembl))
        strategies.append((IdentitySource.TERTIARY_API, self._from_ncbi))
        strategies.append((IdentitySource.OFFLINE_TABLE, self._from_reference))
        return strategies

    def _from_mygene(self, raw_input: str, query: str, is_gene_id: bool) -> Optional[GeneIdentity]:
        if is_gene_id:
            hit = self.clients.mygene.query_gene(gene_id=query)
        else:
            hit = self.clients.mygene.query_gene(symbol=query)

        gene_id = str(hit.get('entrezgene') or '').strip()
        if not gene_id:
            return None
        return GeneIdentity(
            raw_input=raw_input,
            gene_id=gene_id,
            symbol=str(hit.get('symbol') or query).strip(),
            source=IdentitySource.PRIMARY_API
        )

    def _from_ensembl(self, raw_input: str, query: str, is_gene_id: bool) -> Optional[GeneIdentity]:
        gene = self.clients.ensembl.lookup_symbol(query)
        ensembl_id = gene['id']

        # Prefer the NCBI Gene ID so later stages can use E-utilities
        try:
            entrez_id = self.clients.ensembl.entrez_gene_id(ensembl_id)
        except GeneAnalysisError as e:
            logger.debug(f"No EntrezGene xref for {ensembl_id}: {e}")
            entrez_id = None

        return GeneIdentity(
            raw_input=raw_input,
            gene_id=entrez_id or ensembl_id,
            symbol=gene.get('display_name') or query,
            source=IdentitySource.SECONDARY_API
        )

    def _from_ncbi(self, raw_input: str, query: str, is_gene_id: bool) -> Optional[GeneIdentity]:
        if is_gene_id:
            summary = self.clients.ncbi.gene_summary(query)
            return GeneIdentity(
                raw_input=raw_input,
                gene_id=str(summary.get('uid') or query),
                symbol=summary.get('name') or query,
                source=IdentitySource.TERTIARY_API
            )

        term = f"{query}[Gene Name] AND Homo sapiens[Organism]"
        gene_ids = self.clients.ncbi.search_gene_ids(term)
        return GeneIdentity(
            raw_input=raw_input,
            gene_id=gene_ids[0],
            symbol=query,
            source=IdentitySource.TERTIARY_API
        )

    def _from_reference(self, raw_input: str, query: str, is_gene_id: bool) -> Optional[GeneIdentity]:
        gene = self.reference.lookup(query)
        if gene is None:
            return None
        return GeneIdentity(
            raw_input=raw_input,
            gene_id=gene.gene_id,
            symbol=gene.symbol,
            source=IdentitySource.OFFLINE_TABLE
        )

    def _synthesize(self, raw_input: str, query: str, is_gene_id: bool) -> GeneIdentity:
        if is_gene_id:
            logger.warning(f"Gene ID {query} could not be verified; using it as given")
            gene_id = query
        else:
            logger.warning(f"Symbol {query} was not found in any source; using the raw input")
            gene_id = UNKNOWN_GENE_ID
        return GeneIdentity(
            raw_input=raw_input,
            gene_id=gene_id,
            symbol=query,
            source=IdentitySource.SYNTHESIZED
        )
