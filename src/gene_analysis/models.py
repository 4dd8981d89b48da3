"""Data models for the gene analysis pipeline."""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

UNKNOWN = "Unknown"
UNKNOWN_GENE_ID = "unknown"
DESCRIPTION_UNAVAILABLE = "No description available"
FUNCTION_UNAVAILABLE = "Function not available"

SENTINELS = {UNKNOWN, UNKNOWN_GENE_ID, DESCRIPTION_UNAVAILABLE, FUNCTION_UNAVAILABLE}


def is_sentinel(value: Any) -> bool:
    """Return True for empty values and the explicit 'unavailable' markers."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip() or value in SENTINELS
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


class IdentitySource(Enum):
    """Where a gene identity came from, in resolution priority order."""
    PRIMARY_API = "MyGene.info"
    SECONDARY_API = "Ensembl"
    TERTIARY_API = "NCBI Gene"
    OFFLINE_TABLE = "Offline reference table"
    SYNTHESIZED = "Synthesized"


class SequenceKind(Enum):
    """Classification of a nucleotide record by accession prefix."""
    REFSEQ_GENE = "RefSeqGene"
    GENOMIC = "Genomic"
    MRNA = "mRNA"
    NON_CODING_RNA = "Non-coding RNA"


class Strand(Enum):
    """Genomic strand of an exon."""
    PLUS = "+"
    MINUS = "-"


class StructureStatus(Enum):
    """Outcome of a structure lookup."""
    AVAILABLE = "available"
    NOT_FOUND = "not_found"
    LOOKUP_FAILED = "lookup_failed"


class StageStatus(Enum):
    """How a pipeline stage settled."""
    LIVE = "live"
    FALLBACK = "fallback"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class GeneIdentity:
    """Canonical identity of the gene being analysed."""

    raw_input: str
    gene_id: str
    symbol: str
    source: IdentitySource

    @property
    def has_numeric_gene_id(self) -> bool:
        """True when gene_id is a usable NCBI Gene ID."""
        return self.gene_id != UNKNOWN_GENE_ID and self.gene_id.isdigit()


@dataclass
class GeneRecord:
    """Gene identity merged with descriptive metadata."""

    identity: GeneIdentity
    description: str = DESCRIPTION_UNAVAILABLE
    organism: str = UNKNOWN
    chromosome: str = UNKNOWN
    location: str = UNKNOWN
    function_summary: str = FUNCTION_UNAVAILABLE
    aliases: List[str] = field(default_factory=list)

    @property
    def symbol(self) -> str:
        return self.identity.symbol

    @property
    def gene_id(self) -> str:
        return self.identity.gene_id

    def missing_fields(self) -> List[str]:
        """Names of metadata fields still holding a sentinel value."""
        names = ['description', 'organism', 'chromosome', 'location',
                 'function_summary', 'aliases']
        return [name for name in names if is_sentinel(getattr(self, name))]


@dataclass
class SequenceRecord:
    """Summary of a nucleotide sequence record."""

    accession: str
    length_bp: int
    description: str
    kind: SequenceKind

    def __post_init__(self):
        if self.length_bp < 0:
            raise ValueError(f"Sequence length must be non-negative: {self.length_bp}")


@dataclass
class SequenceSet:
    """Sequences linked to one gene: zero-or-one genomic, zero-or-more mRNA."""

    genomic: Optional[SequenceRecord] = None
    mrna: List[SequenceRecord] = field(default_factory=list)

    def is_empty(self) -> bool:
        return self.genomic is None and not self.mrna


@dataclass(frozen=True)
class Exon:
    """A single exon in genomic coordinates."""

    number: int
    exon_id: str
    start: int
    end: int
    strand: Strand = Strand.PLUS

    @property
    def length(self) -> int:
        return self.end - self.start + 1


@dataclass
class ProteinRecord:
    """Protein knowledgebase entry for the gene product."""

    accession: str
    name: str
    description: str
    length_aa: int
    organism: str

    def __post_init__(self):
        if self.length_aa < 0:
            raise ValueError(f"Protein length must be non-negative: {self.length_aa}")


@dataclass
class StructureHandle:
    """Predicted structure for the primary protein."""

    source_accession: str
    status: StructureStatus
    coordinate_file_url: Optional[str] = None
    model_page_url: Optional[str] = None
    model_version: Optional[str] = None
    confidence: Optional[float] = None

    @property
    def is_available(self) -> bool:
        return self.status == StructureStatus.AVAILABLE and bool(self.coordinate_file_url)


@dataclass
class StageOutcome:
    """Record of how one pipeline stage settled."""

    stage: str
    status: StageStatus
    message: str = ""


@dataclass
class AnalysisResult:
    """Aggregate root for a single analysis run."""

    gene: GeneRecord
    sequences: SequenceSet = field(default_factory=SequenceSet)
    exons: List[Exon] = field(default_factory=list)
    proteins: List[ProteinRecord] = field(default_factory=list)
    structure: Optional[StructureHandle] = None
    outcomes: List[StageOutcome] = field(default_factory=list)
    started_at: datetime = field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None

    @property
    def primary_protein(self) -> Optional[ProteinRecord]:
        return self.proteins[0] if self.proteins else None

    def record_outcome(self, stage: str, status: StageStatus, message: str = "") -> None:
        self.outcomes.append(StageOutcome(stage, status, message))

    def outcome_for(self, stage: str) -> Optional[StageOutcome]:
        for outcome in self.outcomes:
            if outcome.stage == stage:
                return outcome
        return None

    def fallback_stages(self) -> List[str]:
        return [o.stage for o in self.outcomes if o.status == StageStatus.FALLBACK]

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serialisable view of the result."""
        identity = self.gene.identity
        return {
            'gene': {
                'raw_input': identity.raw_input,
                'gene_id': identity.gene_id,
                'symbol': identity.symbol,
                'source': identity.source.value,
                'description': self.gene.description,
                'organism': self.gene.organism,
                'chromosome': self.gene.chromosome,
                'location': self.gene.location,
                'function': self.gene.function_summary,
                'aliases': list(self.gene.aliases),
            },
            'sequences': {
                'genomic': _sequence_dict(self.sequences.genomic) if self.sequences.genomic else None,
                'mrna': [_sequence_dict(seq) for seq in self.sequences.mrna],
            },
            'exons': [
                {
                    'number': exon.number,
                    'id': exon.exon_id,
                    'start': exon.start,
                    'end': exon.end,
                    'length': exon.length,
                    'strand': exon.strand.value,
                }
                for exon in self.exons
            ],
            'proteins': [asdict(protein) for protein in self.proteins],
            'structure': _structure_dict(self.structure) if self.structure else None,
            'stages': [
                {'stage': o.stage, 'status': o.status.value, 'message': o.message}
                for o in self.outcomes
            ],
            'started_at': self.started_at.isoformat(),
            'finished_at': self.finished_at.isoformat() if self.finished_at else None,
        }


def _sequence_dict(record: SequenceRecord) -> Dict[str, Any]:
    return {
        'accession': record.accession,
        'length': record.length_bp,
        'description': record.description,
        'type': record.kind.value,
    }


def _structure_dict(handle: StructureHandle) -> Dict[str, Any]:
    data = asdict(handle)
    data['status'] = handle.status.value
    return data
