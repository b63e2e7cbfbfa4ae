"""Static vocabulary for the hardware-store product classifier.

Holds every table the rule-based parts of the pipeline read:

- KNOWLEDGE_BASE: primary/secondary keywords, regex patterns and a weight
  per category key (keyword analysis, pattern matching)
- SEMANTIC_PATTERNS: cross-lingual synonyms (semantic analysis)
- CATEGORY_SYNONYMS: bonus vocabulary for the existing-category deep scan
- LEXICAL_VARIANTS: spellings that name the same category (duplicate guard)
- BROAD_CATEGORIES: coarse buckets used when nothing else matched

Tables are immutable; build a new KnowledgeBase to customize vocabulary.
"""
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Pattern, Tuple


@dataclass(frozen=True)
class KnowledgeBaseEntry:
    """Keyword and pattern rules for one category key.

    Attributes:
        category_key: Category id the rules point to (e.g. "tornilleria")
        primary_keywords: Strong evidence, scored 2 x weight per hit
        secondary_keywords: Supporting evidence, scored 1 x weight per hit
        patterns: Compiled case-insensitive regexes, boolean hits
        weight: Category-specific multiplier in (0, 1]
    """
    category_key: str
    primary_keywords: Tuple[str, ...]
    secondary_keywords: Tuple[str, ...]
    patterns: Tuple[Pattern[str], ...]
    weight: float

    def __post_init__(self):
        if not 0.0 < self.weight <= 1.0:
            raise ValueError(f"weight must be in (0, 1], got {self.weight}")

    @classmethod
    def build(
        cls,
        category_key: str,
        primary: Tuple[str, ...],
        secondary: Tuple[str, ...],
        patterns: Tuple[str, ...],
        weight: float,
    ) -> "KnowledgeBaseEntry":
        """Create an entry from plain strings, compiling the patterns once."""
        return cls(
            category_key=category_key,
            primary_keywords=tuple(k.lower() for k in primary),
            secondary_keywords=tuple(k.lower() for k in secondary),
            patterns=tuple(re.compile(p, re.IGNORECASE) for p in patterns),
            weight=weight,
        )

    def matched_keywords(self, text_lower: str) -> list[str]:
        """Keywords (primary first) found as substrings of the text."""
        return [
            keyword
            for keyword in (*self.primary_keywords, *self.secondary_keywords)
            if keyword in text_lower
        ]


@dataclass(frozen=True)
class BroadCategory:
    """A coarse catch-all bucket of the fallback cascade."""
    category_id: str
    name: str
    keywords: Tuple[str, ...]


@dataclass(frozen=True)
class KnowledgeBase:
    """Bundle of all vocabulary tables read by the classifier."""
    entries: Tuple[KnowledgeBaseEntry, ...]
    semantic_patterns: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
    category_synonyms: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
    lexical_variants: Tuple[Tuple[str, ...], ...] = ()
    broad_categories: Tuple[BroadCategory, ...] = ()

    def get(self, category_key: str) -> KnowledgeBaseEntry | None:
        """Look up an entry by category key."""
        for entry in self.entries:
            if entry.category_key == category_key:
                return entry
        return None

    @property
    def category_keys(self) -> list[str]:
        """Category keys in table order."""
        return [entry.category_key for entry in self.entries]


# Table order is significant: pattern matching and ties in keyword
# analysis resolve to the earliest entry.
DEFAULT_ENTRIES: Tuple[KnowledgeBaseEntry, ...] = (
    KnowledgeBaseEntry.build(
        "herramientas",
        primary=("martillo", "destornillador", "alicate", "llave", "sierra", "taladro", "nivel", "escuadra"),
        secondary=("mango", "acero", "cromado", "profesional", "industrial", "ergonómico"),
        patterns=(
            r"martillo.*\d+.*oz",
            r"destornillador.*(phillips|plano|cruz)",
            r"llave.*\d+.*mm",
        ),
        weight=0.9,
    ),
    KnowledgeBaseEntry.build(
        "tornilleria",
        primary=("tornillo", "tuerca", "perno", "clavo", "arandela", "taquete", "ancla"),
        secondary=("galvanizado", "inoxidable", "phillips", "plano", "hexagonal", "métrico"),
        patterns=(
            r"tornillo.*\d+.*[\"']",
            r"tuerca.*\d+.*mm",
            r"perno.*m\d+",
        ),
        weight=0.95,
    ),
    KnowledgeBaseEntry.build(
        "pintura",
        primary=("pintura", "barniz", "esmalte", "primer", "sellador", "thinner", "brocha", "rodillo"),
        secondary=("vinílica", "acrílica", "látex", "anticorrosivo", "mate", "satinado", "brillante"),
        patterns=(
            r"pintura.*\d+.*l(itros?)?",
            r"barniz.*(mate|brillante)",
            r"esmalte.*(acrílico|alquídico)",
        ),
        weight=0.88,
    ),
    KnowledgeBaseEntry.build(
        "electrico",
        primary=("cable", "interruptor", "contacto", "foco", "led", "transformador", "fusible"),
        secondary=("volt", "amp", "thw", "awg", "watts", "lumens", "dimmer"),
        patterns=(
            r"cable.*\d+.*awg",
            r"foco.*\d+.*w(atts?)?",
            r"interruptor.*\d+.*amp",
        ),
        weight=0.92,
    ),
    KnowledgeBaseEntry.build(
        "plomeria",
        primary=("tubería", "tubo", "codo", "válvula", "llave", "sifón", "tapón", "reducción"),
        secondary=("pvc", "cpvc", "galvanizado", "cobre", "pulgada", "conexión"),
        patterns=(
            r"tubo.*\d+.*[\"']",
            r"codo.*\d+.*grados?",
            r"válvula.*\d+.*[\"']",
        ),
        weight=0.90,
    ),
    KnowledgeBaseEntry.build(
        "construccion",
        primary=("cemento", "arena", "grava", "block", "ladrillo", "varilla", "alambre"),
        secondary=("portland", "estructural", "corrugado", "galvanizado", "bulto", "metro"),
        patterns=(
            r"cemento.*\d+.*kg",
            r"varilla.*\d+.*mm",
            r"alambre.*\d+.*cal",
        ),
        weight=0.85,
    ),
)

# First hit wins, in this order.
DEFAULT_SEMANTIC_PATTERNS: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    "herramientas": ("tool", "herramienta", "manual", "hand"),
    "tornilleria": ("screw", "bolt", "nut", "fastener", "sujetador"),
    "electrico": ("electric", "eléctrico", "wire", "cable", "switch"),
    "pintura": ("paint", "coating", "finish", "acabado"),
    "plomeria": ("pipe", "plumbing", "water", "agua", "drainage"),
})

# Keyed by a fragment of the category name; each synonym found in the
# product text adds 0.3 to the deep-scan score (capped at 0.6).
DEFAULT_CATEGORY_SYNONYMS: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    "herramientas": ("tools", "utensilio", "implemento", "equipo"),
    "electricidad": ("electrico", "electrical", "energia", "corriente"),
    "plomeria": ("plomería", "fontaneria", "hidraulica", "agua", "tuberia"),
    "construccion": ("construcción", "obra", "albañil", "cemento", "material"),
    "pintura": ("paint", "color", "acabado", "recubrimiento"),
    "ferreteria": ("hardware", "tornillo", "sujetador", "fijacion"),
    "seguridad": ("proteccion", "safety", "equipo de proteccion"),
    "jardin": ("jardín", "jardineria", "plantas", "exterior"),
})

# Two names sharing a group (as substrings of their normalized forms)
# are the same category.
DEFAULT_LEXICAL_VARIANTS: Tuple[Tuple[str, ...], ...] = (
    ("electricidad", "electrico", "electrical"),
    ("construccion", "construcción"),
    ("fontaneria", "fontanería", "plomeria"),
    ("jardineria", "jardinería"),
    ("ferreteria", "ferretería"),
    ("herramienta", "herramientas"),
    ("pintura", "pinturas"),
    ("general", "generales"),
)

DEFAULT_BROAD_CATEGORIES: Tuple[BroadCategory, ...] = (
    BroadCategory(
        "ferreteria-general", "Ferretería General",
        ("tornillo", "clavo", "tuerca", "arandela", "perno", "remache", "sujetador"),
    ),
    BroadCategory(
        "herramientas-manuales", "Herramientas Manuales",
        ("martillo", "destornillador", "alicate", "llave", "sierra", "lima", "escofina"),
    ),
    BroadCategory(
        "herramientas-electricas", "Herramientas Eléctricas",
        ("taladro", "amoladora", "sierra circular", "lijadora", "rotomartillo"),
    ),
    BroadCategory(
        "material-electrico", "Material Eléctrico",
        ("cable", "interruptor", "contacto", "foco", "reflector", "breaker", "alambre"),
    ),
    BroadCategory(
        "plomeria-hidraulica", "Plomería e Hidráulica",
        ("tubo", "codo", "válvula", "llave", "manguera", "conexión", "reducción"),
    ),
    BroadCategory(
        "pintura-acabados", "Pintura y Acabados",
        ("pintura", "brocha", "rodillo", "thinner", "barniz", "esmalte", "lija"),
    ),
    BroadCategory(
        "jardineria", "Jardinería",
        ("pala", "rastrillo", "tijera", "manguera", "aspersor", "fertilizante", "maceta"),
    ),
    BroadCategory(
        "construccion", "Construcción",
        ("cemento", "varilla", "alambre", "malla", "poste", "ancla", "concreto"),
    ),
)

DEFAULT_KNOWLEDGE_BASE = KnowledgeBase(
    entries=DEFAULT_ENTRIES,
    semantic_patterns=DEFAULT_SEMANTIC_PATTERNS,
    category_synonyms=DEFAULT_CATEGORY_SYNONYMS,
    lexical_variants=DEFAULT_LEXICAL_VARIANTS,
    broad_categories=DEFAULT_BROAD_CATEGORIES,
)
