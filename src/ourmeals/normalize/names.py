"""Ingredient name normalization (English and French)."""

import re
from types import MappingProxyType

# Plural forms the suffix rules would get wrong, or that must win over them.
IRREGULAR_PLURALS: MappingProxyType[str, str] = MappingProxyType(
    {
        # English
        "tomatoes": "tomato",
        "potatoes": "potato",
        "leaves": "leaf",
        # French
        "tomates": "tomate",
        "oignons": "oignon",
        "poivrons": "poivron",
        "carottes": "carotte",
        "œufs": "œuf",
        "oeufs": "œuf",
        "choux": "chou",
        "eaux": "eau",
        "feuilles": "feuille",
        "gousses": "gousse",
        "tranches": "tranche",
        "pommes de terre": "pomme de terre",
    }
)

# Longest alternatives first so "de la farine" loses "de la", not just "de".
# Elided forms ("d'", "de l'") may be glued to the noun.
_FRENCH_DETERMINER_RE = re.compile(r"^(?:de l['’]\s*|(?:de la|des|du|de)\s+|d['’]\s*)")
_WHITESPACE_RE = re.compile(r"\s+")


def _strip_determiner(name: str) -> str:
    return _FRENCH_DETERMINER_RE.sub("", name, count=1)


def _singularize(name: str) -> str:
    """Apply the first matching plural suffix rule, if any."""
    if name.endswith("ies"):
        return name[:-3] + "y"
    if name.endswith("es") and not name.endswith("ses"):
        return name[:-2]
    if name.endswith("s") and not name.endswith("ss"):
        return name[:-1]
    if name.endswith("eaux"):
        return name[:-1]
    return name


def _normalize_once(name: str) -> str:
    n = _WHITESPACE_RE.sub(" ", name.lower().strip())
    n = _strip_determiner(n)
    if n in IRREGULAR_PLURALS:
        return IRREGULAR_PLURALS[n]
    return _singularize(n)


def normalize_name(name: str | None) -> str:
    """
    Normalize an ingredient name to its lowercase singular form.

    - Lowercase, trim and collapse whitespace
    - Strip a leading French determiner ("de", "des", "du", "de la", "d'", "de l'")
    - Map irregular plurals through IRREGULAR_PLURALS
    - Otherwise drop one plural suffix (-ies, -es, -s, -eaux)

    The single pass is repeated until the name stops changing, which keeps
    normalize_name(normalize_name(x)) == normalize_name(x) for inputs such as
    "de des tomates". Every pass after the first shortens the name, so the
    loop terminates.
    """
    if not name:
        return ""

    current = str(name)
    while True:
        normalized = _normalize_once(current)
        if normalized == current:
            return normalized
        current = normalized
