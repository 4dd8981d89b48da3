"""Retrieval of genomic and transcript sequence records linked to a gene."""

import logging
from typing import Any, Dict, Iterable, Optional

from .api_clients import UpstreamClients
from .config import LimitsConfig
from .error_handler import NotFoundError
from .extractors import first_of, path
from .models import GeneIdentity, SequenceKind, SequenceRecord, SequenceSet

logger = logging.getLogger(__name__)

_accession = first_of(path('accessionversion'), path('caption'))
_length = first_of(path('slen'), path('length'))
_title = first_of(path('title'), path('extra'))


def classify_accession(accession: str) -> Optional[SequenceKind]:
    """Sequence kind implied by a RefSeq accession prefix, or None."""
    prefix = accession[:3].upper()
    if prefix == 'NG_':
        return SequenceKind.REFSEQ_GENE
    if prefix == 'NC_':
        return SequenceKind.GENOMIC
    if prefix == 'NM_':
        return SequenceKind.MRNA
    if prefix == 'NR_':
        return SequenceKind.NON_CODING_RNA
    return None


def _to_record(summary: Dict[str, Any]) -> Optional[SequenceRecord]:
    accession = _accession(summary)
    if not accession:
        return None
    kind = classify_accession(str(accession))
    if kind is None:
        return None
    try:
        length = max(int(_length(summary) or 0), 0)
    except (TypeError, ValueError):
        length = 0
    return SequenceRecord(
        accession=str(accession),
        length_bp=length,
        description=str(_title(summary) or ''),
        kind=kind
    )


def classify_sequences(summaries: Iterable[Dict[str, Any]]) -> SequenceSet:
    """
    Sort nuccore summaries into one genomic record and a list of mRNAs.

    The first NG_ record is the genomic sequence; an NC_ record is used only
    when no NG_ record exists. NM_ and NR_ records go to the mRNA list in
    discovery order. Other accessions are ignored.
    """
    refseq_gene = None
    chromosome = None
    mrna = []

    for summary in summaries:
        record = _to_record(summary)
        if record is None:
            continue
        if record.kind == SequenceKind.REFSEQ_GENE:
            if refseq_gene is None:
                refseq_gene = record
        elif record.kind == SequenceKind.GENOMIC:
            if chromosome is None:
                chromosome = record
        else:
            mrna.append(record)

    return SequenceSet(genomic=refseq_gene or chromosome, mrna=mrna)


class SequenceRetriever:
    """Fetches nuccore records linked to an NCBI Gene ID."""

    def __init__(self, clients: UpstreamClients, limits: Optional[LimitsConfig] = None):
        self.clients = clients
        self.limits = limits or LimitsConfig()

    def fetch_sequences(self, identity: GeneIdentity) -> SequenceSet:
        """
        Fetch genomic and mRNA records for a gene.

        Raises:
            NotFoundError: No numeric gene ID, no links, or nothing classifiable
            NetworkError: If the upstream could not be reached
        """
        if not identity.has_numeric_gene_id:
            raise NotFoundError(f"No NCBI Gene ID for {identity.symbol}; cannot link sequences")

        ids = self.clients.ncbi.linked_nucleotide_ids(identity.gene_id, self.limits.max_linked_sequences)
        if not ids:
            raise NotFoundError(f"No nucleotide records linked to gene {identity.gene_id}")
        logger.debug(f"Gene {identity.gene_id} links to nuccore {', '.join(ids)}")

        sequences = classify_sequences(self.clients.ncbi.nucleotide_summaries(ids))
        if sequences.is_empty():
            raise NotFoundError(f"No RefSeq genomic or mRNA records for gene {identity.gene_id}")

        logger.info(
            f"Found {'a' if sequences.genomic else 'no'} genomic record and "
            f"{len(sequences.mrna)} mRNA record(s) for {identity.symbol}"
        )
        return sequences
