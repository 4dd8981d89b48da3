"""Configuration management for the gene analysis platform."""

import json
import os
from dataclasses import dataclass, asdict, field
from pathlib import Path
from typing import List, Optional


@dataclass
class APIConfig:
    """Upstream API settings."""
    email: str = ""
    ncbi_api_key: Optional[str] = None
    retry_attempts: int = 3
    retry_delay_ms: int = 1000
    timeout_seconds: int = 30
    ncbi_base_url: str = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils"
    ensembl_base_url: str = "https://rest.ensembl.org"
    uniprot_base_url: str = "https://rest.uniprot.org"
    mygene_base_url: str = "https://mygene.info/v3"
    alphafold_base_url: str = "https://alphafold.ebi.ac.uk"
    alphafold_model_version: str = "v4"

    @property
    def ncbi_rate_limit(self) -> float:
        # NCBI allows 3 req/s anonymously, 10 req/s with a key
        return 10.0 if self.ncbi_api_key else 3.0


@dataclass
class GatewayConfig:
    """Relay gateways tried when direct requests are exhausted."""
    enabled: bool = True
    urls: List[str] = field(default_factory=list)


@dataclass
class LimitsConfig:
    """Caps applied to upstream result lists."""
    max_aliases: int = 10
    max_linked_sequences: int = 5
    protein_results: int = 5


@dataclass
class RelayConfig:
    """Settings for the relay endpoint."""
    host: str = "127.0.0.1"
    port: int = 5050
    credential_host: str = "ncbi.nlm.nih.gov"
    cache_control: str = "s-maxage=3600, stale-while-revalidate"
    timeout_seconds: int = 30
    allowed_hosts: List[str] = field(default_factory=list)


@dataclass
class OutputConfig:
    """Export settings."""
    directory: str = "."
    formats: List[str] = field(default_factory=lambda: ['fasta', 'csv', 'txt'])


@dataclass
class Config:
    """Main configuration container."""
    api: APIConfig
    gateways: GatewayConfig
    limits: LimitsConfig
    relay: RelayConfig
    output: OutputConfig

    @classmethod
    def default(cls) -> 'Config':
        """Create default configuration."""
        return cls(
            api=APIConfig(),
            gateways=GatewayConfig(),
            limits=LimitsConfig(),
            relay=RelayConfig(),
            output=OutputConfig()
        )

    @classmethod
    def from_file(cls, path: Path) -> 'Config':
        """Load configuration from JSON file."""
        if not path.exists():
            return cls.default()

        with open(path, 'r') as f:
            data = json.load(f)

        return cls(
            api=APIConfig(**data.get('api', {})),
            gateways=GatewayConfig(**data.get('gateways', {})),
            limits=LimitsConfig(**data.get('limits', {})),
            relay=RelayConfig(**data.get('relay', {})),
            output=OutputConfig(**data.get('output', {}))
        )

    def to_file(self, path: Path) -> None:
        """Save configuration to JSON file."""
        path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            'api': asdict(self.api),
            'gateways': asdict(self.gateways),
            'limits': asdict(self.limits),
            'relay': asdict(self.relay),
            'output': asdict(self.output)
        }

        with open(path, 'w') as f:
            json.dump(data, f, indent=2)

    @property
    def active_gateways(self) -> List[str]:
        return list(self.gateways.urls) if self.gateways.enabled else []

    def merge_env_vars(self) -> None:
        """Merge environment variables into configuration."""
        if os.getenv('NCBI_API_KEY'):
            self.api.ncbi_api_key = os.getenv('NCBI_API_KEY')
        if os.getenv('EMAIL'):
            self.api.email = os.getenv('EMAIL')
        if os.getenv('GENE_ANALYSIS_RETRY_DELAY_MS'):
            self.api.retry_delay_ms = int(os.getenv('GENE_ANALYSIS_RETRY_DELAY_MS'))

        if os.getenv('GENE_ANALYSIS_GATEWAYS'):
            self.gateways.urls = [
                url.strip() for url in os.getenv('GENE_ANALYSIS_GATEWAYS').split(',') if url.strip()
            ]
        if os.getenv('GENE_ANALYSIS_NO_GATEWAY'):
            self.gateways.enabled = False

        if os.getenv('GENE_ANALYSIS_OUTPUT_DIR'):
            self.output.directory = os.getenv('GENE_ANALYSIS_OUTPUT_DIR')

    def merge_cli_args(self, **kwargs) -> None:
        """Merge CLI arguments into configuration."""
        if kwargs.get('api_key'):
            self.api.ncbi_api_key = kwargs['api_key']
        if kwargs.get('email'):
            self.api.email = kwargs['email']

        if kwargs.get('gateways'):
            self.gateways.urls = list(kwargs['gateways'])
        if kwargs.get('no_gateway'):
            self.gateways.enabled = False

        if kwargs.get('output_dir'):
            self.output.directory = kwargs['output_dir']
        if kwargs.get('formats'):
            self.output.formats = list(kwargs['formats'])


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    locations = [
        Path.home() / '.gene_analysis' / 'config.json',
        Path.home() / '.config' / 'gene_analysis' / 'config.json',
        Path('.gene_analysis.json'),
        Path('gene_analysis.config.json')
    ]

    for path in locations:
        if path.exists():
            return path

    return Path.home() / '.gene_analysis' / 'config.json'


def create_example_config(path: Optional[Path] = None) -> Path:
    """Create an example configuration file."""
    if path is None:
        path = Path('gene_analysis.config.example.json')

    config = Config.default()
    config.api.ncbi_api_key = "your_api_key_here"
    config.api.email = "your_email@example.com"
    config.gateways.urls = ["http://127.0.0.1:5050/relay?url={url}"]

    config.to_file(path)
    return path
