"""
Keyword Catalog - locale-spanning add-to-cart phrases

Keywords live in ``data/keywords.yaml`` so new locales can be added
without touching code. Every keyword is case-folded on load.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml

from ..exceptions import CatalogError

logger = logging.getLogger(__name__)

KEYWORDS_FILE = Path(__file__).parent / "data" / "keywords.yaml"

SUPPORTED_LOCALES = (
    "en", "he", "es", "fr", "de", "it", "pt", "ru",
    "ar", "zh", "ja", "ko", "nl", "pl", "tr",
)


def load_keywords(path: Optional[Path] = None) -> Dict[str, List[str]]:
    """
    Load the keyword catalog.

    Args:
        path: YAML file with ``{locale: [keyword, ...]}``; defaults to the bundled catalog

    Returns:
        Mapping locale -> case-folded keywords, in file order

    Raises:
        CatalogError: file missing or not a locale mapping
    """
    path = Path(path) if path else KEYWORDS_FILE
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise CatalogError(f"Keyword catalog not found: {path}")
    except yaml.YAMLError as e:
        raise CatalogError(f"Invalid keyword catalog {path}: {e}")

    if not isinstance(data, dict):
        raise CatalogError(f"Keyword catalog {path} must map locales to keyword lists")

    catalog: Dict[str, List[str]] = {}
    for locale, words in data.items():
        if not isinstance(words, list):
            raise CatalogError(f"Locale {locale!r} in {path} must be a list")
        catalog[str(locale)] = [str(w).casefold() for w in words if str(w).strip()]

    logger.debug(f"Loaded {sum(len(v) for v in catalog.values())} keywords for {len(catalog)} locales")
    return catalog


@lru_cache(maxsize=1)
def all_keywords() -> Tuple[str, ...]:
    """Flattened, de-duplicated keywords of the bundled catalog."""
    seen = []
    for words in load_keywords().values():
        for word in words:
            if word not in seen:
                seen.append(word)
    return tuple(seen)
