"""Orchestration of the multi-source gene analysis pipeline."""

import logging
import random
import re
import threading
from datetime import datetime
from typing import Callable, Optional, Tuple, TypeVar

from .api_clients import UpstreamClients
from .config import Config
from .error_handler import AnalysisInProgressError, ErrorHandler, InputValidationError, PipelineExhaustedError
from .exon_fetcher import ExonFetcher
from .gene_resolver import GeneResolver
from .logging_config import StageProgress
from .metadata_enricher import MetadataEnricher
from .models import (AnalysisResult, GeneRecord, IdentitySource, StageStatus, StructureHandle,
                     StructureStatus)
from .network_recovery import GatewaySelector, NetworkConfig, ResilientSession
from .placeholders import synthetic_exons, synthetic_proteins, synthetic_sequences
from .protein_resolver import ProteinResolver
from .reference_genes import ReferenceTable
from .sequence_retriever import SequenceRetriever

logger = logging.getLogger(__name__)

T = TypeVar('T')

GENE_INPUT_PATTERN = re.compile(r'^[A-Za-z0-9][A-Za-z0-9._-]{0,49}$')
EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')

STAGE_IDENTITY = 'identity'
STAGE_METADATA = 'metadata'
STAGE_SEQUENCES = 'sequences'
STAGE_EXONS = 'exons'
STAGE_PROTEINS = 'proteins'
STAGE_STRUCTURE = 'structure'

PIPELINE_STEPS = [
    "Validating input",
    "Resolving gene identifier",
    "Enriching gene metadata",
    "Fetching genomic and mRNA sequences",
    "Fetching exon structure",
    "Fetching protein records",
    "Looking up predicted structure",
    "Assembling report",
]


def validate_inputs(gene: Optional[str], email: Optional[str]) -> Tuple[str, str]:
    """
    Validate and trim the gene input and contact email.

    Raises:
        InputValidationError: If either value is missing or malformed
    """
    gene = (gene or '').strip()
    email = (email or '').strip()

    if not gene:
        raise InputValidationError("Please enter a gene symbol or NCBI Gene ID")
    if not GENE_INPUT_PATTERN.match(gene):
        raise InputValidationError(f"Invalid gene symbol or ID: {gene!r}")
    if not email:
        raise InputValidationError("An email address is required by NCBI usage policy")
    if not EMAIL_PATTERN.match(email):
        raise InputValidationError(f"Invalid email address: {email!r}")

    return gene, email


class AnalysisSession:
    """Runs analyses one at a time and holds the most recent result.

    The session owns the relay selector, so the last relay that worked is
    remembered across runs.
    """

    def __init__(self,
                 config: Optional[Config] = None,
                 clients: Optional[UpstreamClients] = None,
                 rng: Optional[random.Random] = None):
        """
        Args:
            config: Configuration (defaults to Config.default())
            clients: Pre-built upstream clients; built per run when omitted
            rng: Random source for placeholder data
        """
        self.config = config or Config.default()
        self.clients = clients
        self.rng = rng
        self.selector = GatewaySelector(self.config.active_gateways)
        self.error_handler = ErrorHandler()
        self.reference = ReferenceTable()
        self.result: Optional[AnalysisResult] = None
        self._in_flight = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._in_flight.locked()

    def run(self, gene: str, email: str) -> AnalysisResult:
        """
        Analyse one gene.

        Raises:
            AnalysisInProgressError: If another run is in flight
            InputValidationError: If the inputs are malformed (before any network call)
            PipelineExhaustedError: If the gene identity could not be established
        """
        if not self._in_flight.acquire(blocking=False):
            raise AnalysisInProgressError("An analysis is already running")

        try:
            progress = StageProgress(PIPELINE_STEPS, logger)
            progress.advance()
            gene, email = validate_inputs(gene, email)
            self.config.api.email = email

            clients = self.clients
            owns_clients = clients is None
            if owns_clients:
                clients = self._open_clients()
            try:
                result = self._execute(gene, clients, progress)
            finally:
                if owns_clients:
                    clients.http.close()

            self.result = result
            progress.complete()
            return result
        finally:
            self._in_flight.release()

    def reset(self) -> None:
        """Forget the last result and error history."""
        if self.is_running:
            raise AnalysisInProgressError("Cannot reset while an analysis is running")
        self.result = None
        self.error_handler.clear()

    def _open_clients(self) -> UpstreamClients:
        http = ResilientSession(NetworkConfig.from_config(self.config), self.selector)
        return UpstreamClients(http, self.config.api)

    def _execute(self, gene: str, clients: UpstreamClients, progress: StageProgress) -> AnalysisResult:
        limits = self.config.limits

        progress.advance()
        try:
            identity = GeneResolver(clients, self.reference).resolve(gene)
        except InputValidationError:
            raise
        except Exception as e:
            self.error_handler.handle_error(e, STAGE_IDENTITY)
            raise PipelineExhaustedError(f"Could not identify gene {gene!r}: {e}") from e

        result = AnalysisResult(gene=GeneRecord(identity=identity))
        if identity.source == IdentitySource.SYNTHESIZED:
            result.record_outcome(STAGE_IDENTITY, StageStatus.FALLBACK,
                                  f"{identity.symbol} not found in any source")
        else:
            result.record_outcome(STAGE_IDENTITY, StageStatus.LIVE, identity.source.value)

        progress.advance()
        enricher = MetadataEnricher(clients, limits, self.reference)
        result.gene = enricher.enrich(identity)
        if enricher.last_sources:
            result.record_outcome(STAGE_METADATA, StageStatus.LIVE, ', '.join(enricher.last_sources))
        else:
            result.record_outcome(STAGE_METADATA, StageStatus.FALLBACK, "No metadata source responded")

        progress.advance()
        result.sequences = self._run_stage(
            result, STAGE_SEQUENCES,
            lambda: SequenceRetriever(clients, limits).fetch_sequences(identity),
            lambda: synthetic_sequences(identity, self.rng),
            'NCBI Nucleotide'
        )

        progress.advance()
        result.exons = self._run_stage(
            result, STAGE_EXONS,
            lambda: ExonFetcher(clients).fetch_exons(identity),
            lambda: synthetic_exons(identity.symbol, self.rng),
            'Ensembl'
        )

        progress.advance()
        proteins = ProteinResolver(clients, limits, self.config.api)
        result.proteins = self._run_stage(
            result, STAGE_PROTEINS,
            lambda: proteins.fetch_proteins(identity),
            lambda: synthetic_proteins(identity, self.rng),
            'UniProt'
        )

        progress.advance()
        result.structure = self._resolve_structure(result, proteins)

        progress.advance()
        result.finished_at = datetime.now()
        fallbacks = result.fallback_stages()
        if fallbacks:
            logger.warning(f"Placeholder data used for: {', '.join(fallbacks)}")
        return result

    def _run_stage(self,
                   result: AnalysisResult,
                   stage: str,
                   fetch: Callable[[], T],
                   fallback: Callable[[], T],
                   api_name: str) -> T:
        """Run a fetch stage, substituting placeholder data if it fails."""
        try:
            value = fetch()
        except Exception as e:
            context = self.error_handler.handle_error(e, stage, api_name)
            result.record_outcome(stage, StageStatus.FALLBACK, context.message)
            return fallback()

        result.record_outcome(stage, StageStatus.LIVE, api_name)
        return value

    def _resolve_structure(self, result: AnalysisResult, proteins: ProteinResolver) -> Optional[StructureHandle]:
        primary = result.primary_protein
        if primary is None:
            result.record_outcome(STAGE_STRUCTURE, StageStatus.SKIPPED, "No protein")
            return None

        protein_outcome = result.outcome_for(STAGE_PROTEINS)
        if protein_outcome is not None and protein_outcome.status == StageStatus.FALLBACK:
            result.record_outcome(STAGE_STRUCTURE, StageStatus.SKIPPED, "Protein record is a placeholder")
            return StructureHandle(source_accession=primary.accession, status=StructureStatus.NOT_FOUND)

        handle = proteins.fetch_structure(primary)
        if handle.status == StructureStatus.LOOKUP_FAILED:
            result.record_outcome(STAGE_STRUCTURE, StageStatus.FALLBACK, "AlphaFold lookup failed")
        else:
            result.record_outcome(STAGE_STRUCTURE, StageStatus.LIVE, handle.status.value)
        return handle
