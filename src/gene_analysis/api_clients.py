"""Thin clients for the upstream genomic and proteomic services.

Clients return raw decoded payloads and raise NotFoundError or NetworkError.
They never substitute placeholder data.
"""

import time
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from .config import APIConfig
from .error_handler import NotFoundError
from .logging_config import get_logger
from .network_recovery import ResilientSession

logger = get_logger('api_clients')

HUMAN_TAXON_ID = 9606

# Linknames tried in order when collecting gene -> nuccore links
PREFERRED_NUCCORE_LINKS = [
    'gene_nuccore_refseqgene',
    'gene_nuccore_refseqrna',
    'gene_nuccore_pos',
    'gene_nuccore',
]


class NCBIClient:
    """NCBI E-utilities: esearch, esummary and elink in JSON mode."""

    def __init__(self, http: ResilientSession, config: APIConfig):
        self.http = http
        self.base_url = config.ncbi_base_url.rstrip('/')
        self.email = config.email
        self.api_key = config.ncbi_api_key
        self.rate_limit = config.ncbi_rate_limit
        self.last_request_time = 0.0

    def _rate_limit(self) -> None:
        """Enforce rate limiting between requests."""
        current_time = time.time()
        time_since_last = current_time - self.last_request_time
        min_interval = 1.0 / self.rate_limit

        if time_since_last < min_interval:
            time.sleep(min_interval - time_since_last)

        self.last_request_time = time.time()

    def _get(self, utility: str, params: Dict[str, Any]) -> Dict[str, Any]:
        params = dict(params)
        params.update({'retmode': 'json', 'email': self.email, 'tool': 'gene-analysis-platform'})
        if self.api_key:
            params['api_key'] = self.api_key
        return self.http.get_json(f"{self.base_url}/{utility}", params=params, throttle=self._rate_limit)

    def search_gene_ids(self, term: str, retmax: int = 1) -> List[str]:
        """Run esearch against the gene database."""
        data = self._get('esearch.fcgi', {'db': 'gene', 'term': term, 'retmax': retmax})
        ids = data.get('esearchresult', {}).get('idlist', [])
        if not ids:
            raise NotFoundError(f"NCBI Gene has no match for {term!r}")
        return [str(gene_id) for gene_id in ids]

    def gene_summary(self, gene_id: str) -> Dict[str, Any]:
        """Fetch the esummary document for one gene ID."""
        data = self._get('esummary.fcgi', {'db': 'gene', 'id': gene_id})
        summary = data.get('result', {}).get(str(gene_id))
        if not summary or summary.get('error'):
            raise NotFoundError(f"NCBI Gene has no summary for {gene_id}")
        return summary

    def linked_nucleotide_ids(self, gene_id: str, limit: int) -> List[str]:
        """IDs of nuccore records linked to a gene, RefSeq link sets first."""
        data = self._get('elink.fcgi', {'dbfrom': 'gene', 'db': 'nuccore', 'id': gene_id})
        linksets = data.get('linksets') or []
        linksetdbs = linksets[0].get('linksetdbs', []) if linksets else []
        nuccore_sets = [ls for ls in linksetdbs if ls.get('dbto') == 'nuccore']

        def rank(linkset: Dict[str, Any]) -> int:
            name = linkset.get('linkname', '')
            return PREFERRED_NUCCORE_LINKS.index(name) if name in PREFERRED_NUCCORE_LINKS else len(PREFERRED_NUCCORE_LINKS)

        ids: List[str] = []
        for linkset in sorted(nuccore_sets, key=rank):
            for link in linkset.get('links', []):
                link_id = str(link)
                if link_id not in ids:
                    ids.append(link_id)
                if len(ids) >= limit:
                    return ids
        return ids

    def nucleotide_summaries(self, ids: List[str]) -> List[Dict[str, Any]]:
        """Batch esummary for nuccore IDs, in the order given."""
        data = self._get('esummary.fcgi', {'db': 'nuccore', 'id': ','.join(ids)})
        result = data.get('result', {})
        return [result[i] for i in ids if isinstance(result.get(i), dict)]


class EnsemblClient:
    """Ensembl REST lookups for human genes."""

    def __init__(self, http: ResilientSession, config: APIConfig):
        self.http = http
        self.base_url = config.ensembl_base_url.rstrip('/')

    def lookup_symbol(self, symbol: str, expand: bool = False) -> Dict[str, Any]:
        """Look up a gene by symbol; expand includes transcripts and exons."""
        url = f"{self.base_url}/lookup/symbol/homo_sapiens/{quote(symbol)}"
        params = {'expand': 1} if expand else None
        data = self.http.get_json(url, params=params)
        if not isinstance(data, dict) or not data.get('id'):
            raise NotFoundError(f"Ensembl has no gene for symbol {symbol}")
        return data

    def entrez_gene_id(self, ensembl_id: str) -> Optional[str]:
        """NCBI Gene ID cross-referenced from an Ensembl gene, if any."""
        url = f"{self.base_url}/xrefs/id/{quote(ensembl_id)}"
        data = self.http.get_json(url, params={'external_db': 'EntrezGene'})
        for xref in data or []:
            if not isinstance(xref, dict):
                continue
            primary_id = str(xref.get('primary_id', ''))
            if primary_id.isdigit():
                return primary_id
        return None


class UniProtClient:
    """UniProtKB search."""

    def __init__(self, http: ResilientSession, config: APIConfig):
        self.http = http
        self.base_url = config.uniprot_base_url.rstrip('/')

    def search(self, query: str, size: int = 5) -> List[Dict[str, Any]]:
        data = self.http.get_json(
            f"{self.base_url}/uniprotkb/search",
            params={'query': query, 'format': 'json', 'size': size}
        )
        results = data.get('results', []) if isinstance(data, dict) else []
        if not results:
            raise NotFoundError(f"UniProt has no entries for {query!r}")
        return results


class MyGeneClient:
    """MyGene.info gene aggregator."""

    FIELDS = 'entrezgene,symbol,name,summary,map_location,genomic_pos,alias,taxid'

    def __init__(self, http: ResilientSession, config: APIConfig):
        self.http = http
        self.base_url = config.mygene_base_url.rstrip('/')

    def query(self, q: str) -> Dict[str, Any]:
        """Return the top hit for a query scoped to human."""
        data = self.http.get_json(
            f"{self.base_url}/query",
            params={'q': q, 'species': 'human', 'fields': self.FIELDS, 'size': 1}
        )
        hits = data.get('hits', []) if isinstance(data, dict) else []
        if not hits:
            raise NotFoundError(f"MyGene.info has no hit for {q!r}")
        return hits[0]

    def query_gene(self, gene_id: Optional[str] = None, symbol: Optional[str] = None) -> Dict[str, Any]:
        if gene_id:
            return self.query(f"entrezgene:{gene_id}")
        if symbol:
            return self.query(f"symbol:{symbol}")
        raise NotFoundError("MyGene.info query needs a gene ID or symbol")


class AlphaFoldClient:
    """AlphaFold DB prediction API."""

    def __init__(self, http: ResilientSession, config: APIConfig):
        self.http = http
        self.base_url = config.alphafold_base_url.rstrip('/')
        self.model_version = config.alphafold_model_version

    def prediction(self, accession: str) -> Any:
        return self.http.get_json(f"{self.base_url}/api/prediction/{quote(accession)}")

    def fallback_model_url(self, accession: str) -> str:
        return f"{self.base_url}/files/AF-{accession}-F1-model_{self.model_version}.pdb"

    def entry_page_url(self, accession: str) -> str:
        return f"{self.base_url}/entry/{accession}"


class UpstreamClients:
    """Bundle of every client sharing one resilient session."""

    def __init__(self, http: ResilientSession, config: APIConfig):
        self.http = http
        self.ncbi = NCBIClient(http, config)
        self.ensembl = EnsemblClient(http, config)
        self.uniprot = UniProtClient(http, config)
        self.mygene = MyGeneClient(http, config)
        self.alphafold = AlphaFoldClient(http, config)
