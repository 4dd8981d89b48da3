"""Exon structure retrieval and normalisation."""

import logging
from typing import Any, Dict, Iterable, List

from .api_clients import UpstreamClients
from .error_handler import NotFoundError
from .models import Exon, GeneIdentity, Strand

logger = logging.getLogger(__name__)


def parse_strand(value: Any) -> Strand:
    """Ensembl strand (1 / -1) to Strand; anything else is PLUS."""
    try:
        return Strand.MINUS if int(value) == -1 else Strand.PLUS
    except (TypeError, ValueError):
        return Strand.PLUS


def flatten_exons(gene: Dict[str, Any]) -> List[Exon]:
    """Collect exons across all transcripts of an expanded Ensembl gene."""
    exons = []
    for transcript in gene.get('Transcript') or []:
        if not isinstance(transcript, dict):
            continue
        strand = parse_strand(transcript.get('strand'))
        for exon in transcript.get('Exon') or []:
            if not isinstance(exon, dict):
                continue
            try:
                start = int(exon['start'])
                end = int(exon['end'])
            except (KeyError, TypeError, ValueError):
                logger.debug(f"Skipping exon without coordinates in {transcript.get('id')}")
                continue
            exons.append(Exon(
                number=len(exons) + 1,
                exon_id=str(exon.get('id') or f"exon_{len(exons) + 1}"),
                start=start,
                end=end,
                strand=strand
            ))
    return exons


def normalize_exons(exons: Iterable[Exon]) -> List[Exon]:
    """
    Deduplicate exons by (start, end), sort by start and renumber from 1.

    The first exon seen for a coordinate pair wins. Applying this twice
    gives the same result as applying it once.
    """
    unique: Dict[tuple, Exon] = {}
    for exon in exons:
        unique.setdefault((exon.start, exon.end), exon)

    ordered = sorted(unique.values(), key=lambda exon: exon.start)
    return [
        Exon(number=index, exon_id=exon.exon_id, start=exon.start, end=exon.end, strand=exon.strand)
        for index, exon in enumerate(ordered, start=1)
    ]


class ExonFetcher:
    """Fetches the exon table of a gene from Ensembl."""

    def __init__(self, clients: UpstreamClients):
        self.clients = clients

    def fetch_exons(self, identity: GeneIdentity) -> List[Exon]:
        """
        Raises:
            NotFoundError: If the gene has no exons after normalisation
            NetworkError: If Ensembl could not be reached
        """
        gene = self.clients.ensembl.lookup_symbol(identity.symbol, expand=True)
        exons = normalize_exons(flatten_exons(gene))
        if not exons:
            raise NotFoundError(f"Ensembl reports no exons for {identity.symbol}")

        logger.info(f"Found {len(exons)} distinct exons for {identity.symbol}")
        return exons
