"""
Matching aproximado por distancia de edicao (Levenshtein).

Usado como segunda tentativa quando o nome digitado nao bate exatamente
(normalizado) com nenhum valor do catalogo.
"""
from typing import Iterable, NamedTuple, Optional

from rapidfuzz.distance import Levenshtein

from vitrine.text_utils import normalize_text


class MatchResult(NamedTuple):
    match: Optional[str]
    similarity: float


def levenshtein_distance(a: str, b: str) -> int:
    return Levenshtein.distance(a, b)


def find_closest_match(
    query: str,
    candidates: Iterable[str],
    threshold: float = 70.0,
) -> MatchResult:
    """
    Retorna o candidato mais parecido com a query e a similaridade (0-100).

    - Match exato normalizado retorna na hora com similaridade 100.
    - Senao: similaridade = (maxLen - distancia) / maxLen * 100, com maxLen
      calculado UMA vez sobre query + todos os candidatos (mesma escala).
    - Empate: vence o primeiro candidato na ordem recebida.
    - Abaixo do threshold: match=None, mas a melhor similaridade e devolvida.
    """
    normalized_query = normalize_text(query)
    pairs = [(c, normalize_text(c)) for c in candidates if c]
    if not normalized_query or not pairs:
        return MatchResult(None, 0.0)

    for candidate, normalized in pairs:
        if normalized == normalized_query:
            return MatchResult(candidate, 100.0)

    max_len = max([len(normalized_query)] + [len(n) for _, n in pairs])

    best_match: Optional[str] = None
    best_similarity = -1.0
    for candidate, normalized in pairs:
        distance = levenshtein_distance(normalized_query, normalized)
        similarity = (max_len - distance) / max_len * 100.0
        if similarity > best_similarity:
            best_similarity = similarity
            best_match = candidate

    if best_similarity >= threshold:
        return MatchResult(best_match, best_similarity)

    return MatchResult(None, max(best_similarity, 0.0))
