"""Offline reference table of well-known human genes.

Used as the last network-free resolution strategy. Entries carry complete
metadata so genes found here need no further enrichment.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass(frozen=True)
class ReferenceGene:
    """A curated offline gene entry."""

    gene_id: str
    symbol: str
    description: str
    chromosome: str
    location: str
    function_summary: str
    aliases: List[str] = field(default_factory=list)
    organism: str = "Homo sapiens"


REFERENCE_GENES: List[ReferenceGene] = [
    ReferenceGene(
        gene_id="672", symbol="BRCA1",
        description="BRCA1 DNA repair associated",
        chromosome="17", location="17q21.31",
        function_summary="E3 ubiquitin ligase that maintains genomic stability and acts as a tumor suppressor "
                         "through homologous recombination repair of double-strand DNA breaks.",
        aliases=["BRCAI", "BRCC1", "BROVCA1", "FANCS", "IRIS", "PNCA4", "PPP1R53", "PSCP", "RNF53"],
    ),
    ReferenceGene(
        gene_id="675", symbol="BRCA2",
        description="BRCA2 DNA repair associated",
        chromosome="13", location="13q13.1",
        function_summary="Mediates RAD51 loading during homologous recombination repair.",
        aliases=["BRCC2", "BROVCA2", "FACD", "FAD", "FAD1", "FANCD", "FANCD1", "PNCA2", "XRCC11"],
    ),
    ReferenceGene(
        gene_id="7157", symbol="TP53",
        description="tumor protein p53",
        chromosome="17", location="17p13.1",
        function_summary="Transcription factor that responds to cellular stress by inducing cell cycle arrest, "
                         "apoptosis, senescence or DNA repair.",
        aliases=["BCC7", "BMFS5", "LFS1", "P53", "TRP53"],
    ),
    ReferenceGene(
        gene_id="1956", symbol="EGFR",
        description="epidermal growth factor receptor",
        chromosome="7", location="7p11.2",
        function_summary="Receptor tyrosine kinase binding EGF-family ligands and activating MAPK and PI3K signalling.",
        aliases=["ERBB", "ERBB1", "ERRP", "HER1", "NISBD2", "PIG61", "mENA"],
    ),
    ReferenceGene(
        gene_id="3845", symbol="KRAS",
        description="KRAS proto-oncogene, GTPase",
        chromosome="12", location="12p12.1",
        function_summary="Small GTPase relaying growth factor receptor signals to the MAPK pathway.",
        aliases=["C-K-RAS", "CFC2", "K-RAS2A", "K-RAS2B", "KI-RAS", "KRAS1", "KRAS2", "NS", "NS3", "RASK2"],
    ),
    ReferenceGene(
        gene_id="1080", symbol="CFTR",
        description="CF transmembrane conductance regulator",
        chromosome="7", location="7q31.2",
        function_summary="ATP-gated chloride channel of epithelial cells; mutations cause cystic fibrosis.",
        aliases=["ABC35", "ABCC7", "CF", "CFTR/MRP", "MRP7", "TNR-CFTR", "dJ760C5.1"],
    ),
    ReferenceGene(
        gene_id="4609", symbol="MYC",
        description="MYC proto-oncogene, bHLH transcription factor",
        chromosome="8", location="8q24.21",
        function_summary="Transcription factor regulating cell cycle progression, apoptosis and transformation.",
        aliases=["MRTL", "MYCC", "bHLHe39", "c-Myc"],
    ),
    ReferenceGene(
        gene_id="5728", symbol="PTEN",
        description="phosphatase and tensin homolog",
        chromosome="10", location="10q23.31",
        function_summary="Lipid phosphatase antagonising PI3K/AKT signalling; tumor suppressor.",
        aliases=["10q23del", "BZS", "CWS1", "DEC", "GLM2", "MHAM", "MMAC1", "PTEN1", "TEP1"],
    ),
    ReferenceGene(
        gene_id="348", symbol="APOE",
        description="apolipoprotein E",
        chromosome="19", location="19q13.32",
        function_summary="Lipoprotein component mediating lipid transport; APOE4 is an Alzheimer disease risk allele.",
        aliases=["AD2", "APO-E", "ApoE4", "LDLCQ5", "LPG"],
    ),
    ReferenceGene(
        gene_id="3043", symbol="HBB",
        description="hemoglobin subunit beta",
        chromosome="11", location="11p15.4",
        function_summary="Beta chain of adult hemoglobin; mutations cause sickle cell disease and beta-thalassemia.",
        aliases=["CD113t-C", "ECYT6", "beta-globin"],
    ),
    ReferenceGene(
        gene_id="7422", symbol="VEGFA",
        description="vascular endothelial growth factor A",
        chromosome="6", location="6p21.1",
        function_summary="Growth factor inducing endothelial cell proliferation, migration and angiogenesis.",
        aliases=["L-VEGF", "MVCD1", "VEGF", "VPF"],
    ),
    ReferenceGene(
        gene_id="1636", symbol="ACE",
        description="angiotensin I converting enzyme",
        chromosome="17", location="17q23.3",
        function_summary="Dipeptidyl carboxypeptidase converting angiotensin I to angiotensin II.",
        aliases=["ACE1", "CD143", "DCP", "DCP1", "ICH", "MVCD3"],
    ),
]


class ReferenceTable:
    """Case-insensitive index over the offline reference genes."""

    def __init__(self, genes: Optional[List[ReferenceGene]] = None):
        self.genes = list(genes if genes is not None else REFERENCE_GENES)
        self._by_id: Dict[str, ReferenceGene] = {}
        self._by_symbol: Dict[str, ReferenceGene] = {}
        self._by_alias: Dict[str, ReferenceGene] = {}
        for gene in self.genes:
            self._by_id[gene.gene_id] = gene
            self._by_symbol[gene.symbol.upper()] = gene
            for alias in gene.aliases:
                # Canonical symbols take precedence over aliases of other genes
                self._by_alias.setdefault(alias.upper(), gene)

    def lookup(self, query: str) -> Optional[ReferenceGene]:
        """Exact match on gene ID, canonical symbol, then alias."""
        key = query.strip().upper()
        if not key:
            return None
        return self._by_id.get(key) or self._by_symbol.get(key) or self._by_alias.get(key)
