import re
import unicodedata
from typing import Iterable, List, Optional

from vitrine.constants import GREETING_FILLERS, GREETINGS, STOPWORDS


_NON_WORD_REGEX = re.compile(r"[^a-z0-9_\s]")
_SPACES_REGEX = re.compile(r"\s+")


def strip_accents(s: str) -> str:
    s = unicodedata.normalize("NFKD", s or "")
    return "".join([c for c in s if not unicodedata.combining(c)])


def normalize_text(text: Optional[str]) -> str:
    """
    Forma canonica para comparacao: minusculo, sem acento, sem pontuacao,
    espacos colapsados. Usada igual para mensagem do usuario e dados do catalogo.
    """
    s = strip_accents((text or "").lower())
    s = _NON_WORD_REGEX.sub("", s)
    return _SPACES_REGEX.sub(" ", s).strip()


def find_normalized_match(query: str, items: Iterable[str]) -> Optional[str]:
    normalized = normalize_text(query)
    if not normalized:
        return None
    for item in items:
        if item and normalize_text(item) == normalized:
            return item
    return None


def content_words(text: str, min_len: int = 3) -> List[str]:
    """Tokens normalizados sem stopwords ("quero ver calcas" -> ["calcas"])."""
    return [
        tok for tok in normalize_text(text).split()
        if tok not in STOPWORDS and len(tok) >= min_len
    ]


def is_greeting(message: str) -> bool:
    t = normalize_text(message)

    if not t:
        return False

    if t in GREETINGS:
        return True

    # "oi tudo bem", "bom dia moca"; nao pega "oito", "oi jeans" nem "oi quero ver calcas"
    for g in GREETINGS:
        if not t.startswith(g + " "):
            continue
        rest = t[len(g) + 1:]
        if rest in GREETINGS or all(tok in GREETING_FILLERS for tok in rest.split()):
            return True

    return False


def contains_any(text: str, keywords: Iterable[str]) -> bool:
    t = normalize_text(text)
    return any(k in t for k in keywords)
