"""Synthetic, clearly-labelled stand-in data.

These constructors are only called by the pipeline when a stage could not
produce live data, so that every report stays renderable. Each record says
it is a placeholder in its description.
"""

import random
from typing import List, Optional

from .models import (Exon, GeneIdentity, ProteinRecord, SequenceKind, SequenceRecord,
                     SequenceSet, Strand)

PLACEHOLDER_LABEL = "Placeholder"


def _rng(rng: Optional[random.Random]) -> random.Random:
    return rng if rng is not None else random.Random()


def synthetic_sequences(identity: GeneIdentity, rng: Optional[random.Random] = None) -> SequenceSet:
    """One NG_ genomic record and one to three NM_ mRNA records."""
    rng = _rng(rng)
    symbol = identity.symbol

    genomic = SequenceRecord(
        accession=f"NG_{rng.randint(0, 999999):06d}.1",
        length_bp=rng.randint(5000, 200000),
        description=f"{PLACEHOLDER_LABEL} RefSeqGene record for {symbol}",
        kind=SequenceKind.REFSEQ_GENE
    )
    mrna = [
        SequenceRecord(
            accession=f"NM_{rng.randint(0, 999999):06d}.{variant}",
            length_bp=rng.randint(500, 10000),
            description=f"{PLACEHOLDER_LABEL} {symbol} transcript variant {variant}, mRNA",
            kind=SequenceKind.MRNA
        )
        for variant in range(1, rng.randint(1, 3) + 1)
    ]
    return SequenceSet(genomic=genomic, mrna=mrna)


def synthetic_exons(symbol: str, rng: Optional[random.Random] = None) -> List[Exon]:
    """A ladder of 3-30 PLUS-strand exons separated by random intron gaps."""
    rng = _rng(rng)
    exons = []
    position = rng.randint(1000000, 100000000)

    for number in range(1, rng.randint(3, 30) + 1):
        length = rng.randint(50, 2000)
        exons.append(Exon(
            number=number,
            exon_id=f"{symbol}_placeholder_exon_{number}",
            start=position,
            end=position + length - 1,
            strand=Strand.PLUS
        ))
        position += length + rng.randint(100, 10000)
    return exons


def synthetic_proteins(identity: GeneIdentity, rng: Optional[random.Random] = None) -> List[ProteinRecord]:
    """A single placeholder protein for the gene."""
    rng = _rng(rng)
    symbol = identity.symbol
    return [
        ProteinRecord(
            accession=f"P{rng.randint(0, 99999):05d}",
            name=f"{symbol}_HUMAN",
            description=f"{PLACEHOLDER_LABEL} protein product of {symbol}",
            length_aa=rng.randint(100, 2000),
            organism="Homo sapiens"
        )
    ]
