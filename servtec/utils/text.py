"""
Text normalization helpers shared by the classifier and the resolver
"""
import re
import unicodedata
from functools import lru_cache
from typing import Iterable, List, Pattern

# Keywords this short only match as whole words ("ya" must not hit "playa")
WHOLE_WORD_MAX_LENGTH = 3


def fold(text: str) -> str:
    """
    Lower-case and strip accents.

    'Clínica DAÑADA' -> 'clinica danada'
    """
    decomposed = unicodedata.normalize("NFKD", text.lower())
    return "".join(c for c in decomposed if not unicodedata.combining(c))


@lru_cache(maxsize=4096)
def _word_pattern(keyword: str) -> Pattern:
    return re.compile(rf"(?<!\w){re.escape(keyword)}(?!\w)")


def contains_keyword(folded_text: str, keyword: str) -> bool:
    """Substring match, or whole-word match for short keywords"""
    if not keyword:
        return False
    if len(keyword) <= WHOLE_WORD_MAX_LENGTH:
        return _word_pattern(keyword).search(folded_text) is not None
    return keyword in folded_text


def matching_keywords(folded_text: str, keywords: Iterable[str]) -> List[str]:
    """Distinct keywords found in the text, in lexicon order"""
    return [k for k in keywords if contains_keyword(folded_text, k)]


def title_case(text: str) -> str:
    """Collapse whitespace and capitalize every word"""
    return " ".join(w.capitalize() for w in text.split())
