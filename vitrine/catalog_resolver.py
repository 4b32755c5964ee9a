"""
Resolve nomes vindos do classificador contra o catalogo real da loja.

Ordem em cada nivel: match exato normalizado -> fuzzy (Levenshtein).
Retorna None quando nada bate (o orquestrador responde "nao encontrei").
"""
import logging
from typing import Iterable, List, Optional

from vitrine import settings
from vitrine.fuzzy_match import find_closest_match
from vitrine.models import Product
from vitrine.text_utils import content_words, find_normalized_match, normalize_text

logger = logging.getLogger(__name__)


def match_item(query: Optional[str], items: Iterable[str], threshold: float) -> Optional[str]:
    if not query or not normalize_text(query):
        return None
    items = [i for i in items if i]
    exact = find_normalized_match(query, items)
    if exact:
        return exact
    return find_closest_match(query, items, threshold).match


def _rescue_queries(text: str) -> List[str]:
    """Frase inteira, depois so as palavras de conteudo, depois cada uma."""
    queries = [normalize_text(text)]
    words = content_words(text)
    joined = " ".join(words)
    if joined and joined not in queries:
        queries.append(joined)
    for w in words:
        if w not in queries:
            queries.append(w)
    return [q for q in queries if q]


class CatalogResolver:
    def __init__(
        self,
        catalog,
        category_threshold: float = settings.CATEGORY_MATCH_THRESHOLD,
        subcategory_threshold: float = settings.SUBCATEGORY_MATCH_THRESHOLD,
        product_threshold: float = settings.PRODUCT_MATCH_THRESHOLD,
        candidate_limit: int = settings.PRODUCT_CANDIDATE_LIMIT,
    ) -> None:
        self.catalog = catalog
        self.category_threshold = category_threshold
        self.subcategory_threshold = subcategory_threshold
        self.product_threshold = product_threshold
        self.candidate_limit = candidate_limit

    def resolve_category(self, tenant_id: str, raw_name: Optional[str]) -> Optional[str]:
        if not raw_name:
            return None
        categories = self.catalog.list_categories(tenant_id)
        return match_item(raw_name, categories, self.category_threshold)

    def resolve_subcategory(self, tenant_id: str, category: str, raw_name: Optional[str]) -> Optional[str]:
        if not category or not raw_name:
            return None
        subs = self.catalog.list_subcategories(tenant_id, category)
        return match_item(raw_name, subs, self.subcategory_threshold)

    def resolve_product(
        self,
        tenant_id: str,
        raw_name: Optional[str],
        fallback_product_id: Optional[str],
        fallback_on_miss: bool = False,
    ) -> Optional[Product]:
        raw_name = (raw_name or "").strip()

        if raw_name:
            product = self.catalog.find_product_by_name(tenant_id, raw_name)
            if product:
                return product

            candidates = self.catalog.find_products(tenant_id, limit=self.candidate_limit)
            fuzzy = find_closest_match(raw_name, [p.name for p in candidates], self.product_threshold)
            if fuzzy.match:
                logger.info("resolver product_fuzzy similarity=%.1f", fuzzy.similarity)
                return next(p for p in candidates if p.name == fuzzy.match)

            if not fallback_on_miss:
                return None

        if fallback_product_id:
            return self.catalog.get_product(tenant_id, fallback_product_id)
        return None

    # -------------------------------------------------------------------
    # Resgate fuzzy (so etapa fuzzy) para classificacao de baixa confianca
    # -------------------------------------------------------------------
    def _rescue(self, text: str, candidates: List[str], threshold: float) -> Optional[str]:
        candidates = [c for c in candidates if c]
        if not candidates:
            return None
        for query in _rescue_queries(text):
            result = find_closest_match(query, candidates, threshold)
            if result.match:
                return result.match
        return None

    def rescue_category(self, tenant_id: str, text: str) -> Optional[str]:
        return self._rescue(text, self.catalog.list_categories(tenant_id), self.category_threshold)

    def rescue_subcategory(self, tenant_id: str, category: str, text: str) -> Optional[str]:
        if not category:
            return None
        subs = self.catalog.list_subcategories(tenant_id, category)
        return self._rescue(text, subs, self.subcategory_threshold)
