"""
Orquestrador de um turno de conversa.

mensagem -> (handoff?) -> classificacao -> corte de confianca / resgate fuzzy
-> handler da intencao -> patch de sessao -> (humanizacao) -> resposta
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from vitrine import settings
from vitrine.catalog_resolver import CatalogResolver
from vitrine.constants import (
    GENERATION_FAILURE,
    GENERIC_APOLOGY,
    HANDOFF_ACK,
    HANDOFF_IN_PROGRESS,
)
from vitrine.intelligence_logger import log_fuzzy_rescue, log_generation, log_intent_decision
from vitrine.llm_service import GenerationError, _redact_text
from vitrine.models import Intent, IntentResult
from vitrine.product_response import generate_product_response, maybe_humanize_reply
from vitrine.responses import (
    category_list_response,
    category_response,
    not_found_response,
    product_list_response,
    store_info_response,
)
from vitrine.session_state import SessionData, SessionPatch, SessionStore

logger = logging.getLogger(__name__)


@dataclass
class HandlerOutcome:
    reply: str
    patch: SessionPatch = field(default_factory=SessionPatch)
    needs_human: bool = False
    humanize: bool = False


@dataclass
class TurnResult:
    reply: Optional[str]
    intent: Intent
    confidence: float
    needs_human: bool
    session: Dict[str, Any]


@dataclass
class _Turn:
    user_id: str
    tenant_id: str
    text: str
    result: IntentResult
    session: SessionData
    company_name: Optional[str] = None


class FlowController:
    def __init__(
        self,
        catalog,
        sessions: SessionStore,
        classifier,
        generator,
        resolver: Optional[CatalogResolver] = None,
        min_confidence: float = settings.MIN_INTENT_CONFIDENCE,
        rescue_confidence: float = settings.FUZZY_RESCUE_CONFIDENCE,
        list_limit: int = settings.PRODUCT_LIST_LIMIT,
        humanize_enabled: Optional[bool] = None,
        rng=None,
    ):
        self.catalog = catalog
        self.sessions = sessions
        self.classifier = classifier
        self.generator = generator
        self.resolver = resolver or CatalogResolver(catalog)
        self.min_confidence = min_confidence
        self.rescue_confidence = rescue_confidence
        self.list_limit = list_limit
        self.humanize_enabled = humanize_enabled
        self.rng = rng

        self._handlers: Dict[Intent, Callable[[_Turn], HandlerOutcome]] = {
            Intent.GREETING: self._handle_greeting,
            Intent.LIST_CATEGORIES: self._handle_list_categories,
            Intent.STORE_INFO: self._handle_store_info,
            Intent.VIEW_CATEGORY: self._handle_view_category,
            Intent.VIEW_SUBCATEGORY: self._handle_view_subcategory,
            Intent.VIEW_PRODUCT: self._handle_view_product,
            Intent.ASK_PRODUCT_ATTRIBUTE: self._handle_ask_attribute,
            Intent.LIST_PRODUCTS: self._handle_list_products,
            Intent.TALK_TO_HUMAN: self._handle_talk_to_human,
            Intent.UNKNOWN: self._handle_unknown,
        }

    # ---------------------------------------------------------------
    # entrada
    # ---------------------------------------------------------------
    def handle_message(
        self,
        user_id: str,
        tenant_id: str,
        text: str,
        company_name: Optional[str] = None,
    ) -> TurnResult:
        try:
            return self._handle(user_id, tenant_id, text, company_name)
        except Exception:
            logger.exception("flow error user=%s msg=%s", user_id, _redact_text(text or ""))
            return TurnResult(
                reply=GENERIC_APOLOGY,
                intent=Intent.UNKNOWN,
                confidence=0.0,
                needs_human=True,
                session=self._safe_snapshot(user_id),
            )

    def _safe_snapshot(self, user_id: str) -> Dict[str, Any]:
        try:
            return self.sessions.snapshot(user_id)
        except Exception:
            logger.exception("flow snapshot_error user=%s", user_id)
            return {}

    def _handle(self, user_id: str, tenant_id: str, text: str, company_name: Optional[str]) -> TurnResult:
        if not text or not text.strip():
            logger.info("flow silent_drop user=%s reason=empty_text", user_id)
            return TurnResult(None, Intent.UNKNOWN, 0.0, False, self.sessions.snapshot(user_id))

        if self.sessions.is_handed_off(user_id):
            logger.info("flow handed_off user=%s", user_id)
            return TurnResult(
                HANDOFF_IN_PROGRESS, Intent.TALK_TO_HUMAN, 1.0, True, self.sessions.snapshot(user_id)
            )

        context = self.sessions.context(user_id)
        result = self.classifier.classify(text, context)
        low_confidence = result.confidence < self.min_confidence
        log_intent_decision(user_id, text, result.intent.value, result.confidence, result.source, low_confidence)

        if low_confidence:
            rescued = self._rescue(user_id, tenant_id, text, context.last_category)
            if rescued is None:
                logger.info("flow not_found user=%s intent=%s", user_id, result.intent.value)
                return TurnResult(
                    not_found_response(self.rng),
                    result.intent,
                    result.confidence,
                    False,
                    self.sessions.snapshot(user_id),
                )
            result = rescued

        turn = _Turn(
            user_id=user_id,
            tenant_id=tenant_id,
            text=text,
            result=result,
            session=SessionData(
                last_category=context.last_category,
                last_subcategory=context.last_subcategory,
                last_product_id=context.last_product,
            ),
            company_name=company_name,
        )
        outcome = self._handlers[result.intent](turn)

        if not outcome.patch.is_empty():
            self.sessions.apply(user_id, outcome.patch)

        reply = outcome.reply
        humanize_enabled = (
            settings.HUMANIZE_REPLIES_ENABLED if self.humanize_enabled is None else self.humanize_enabled
        )
        if outcome.humanize and humanize_enabled:
            reply = maybe_humanize_reply(self.generator, reply, self._company_name(turn), enabled=True)

        logger.info(
            "flow reply user=%s intent=%s confidence=%.2f source=%s",
            user_id,
            result.intent.value,
            result.confidence,
            result.source,
        )
        return TurnResult(
            reply=reply,
            intent=result.intent,
            confidence=result.confidence,
            needs_human=outcome.needs_human,
            session=self.sessions.snapshot(user_id),
        )

    def _rescue(self, user_id: str, tenant_id: str, text: str, last_category: Optional[str]) -> Optional[IntentResult]:
        category = self.resolver.rescue_category(tenant_id, text)
        log_fuzzy_rescue(user_id, text, "category", category)
        if category:
            return IntentResult(
                intent=Intent.VIEW_CATEGORY,
                category=category,
                confidence=self.rescue_confidence,
                source="fuzzy_rescue",
            )

        if last_category:
            subcategory = self.resolver.rescue_subcategory(tenant_id, last_category, text)
            log_fuzzy_rescue(user_id, text, "subcategory", subcategory)
            if subcategory:
                return IntentResult(
                    intent=Intent.VIEW_SUBCATEGORY,
                    category=last_category,
                    subcategory=subcategory,
                    confidence=self.rescue_confidence,
                    source="fuzzy_rescue",
                )
        return None

    def _company_name(self, turn: _Turn) -> Optional[str]:
        if turn.company_name is None:
            company = self.catalog.get_company(turn.tenant_id)
            turn.company_name = company.name if company else ""
        return turn.company_name or None

    def _not_found(self, patch: Optional[SessionPatch] = None) -> HandlerOutcome:
        return HandlerOutcome(not_found_response(self.rng), patch or SessionPatch(), humanize=True)

    def _product_list(self, products: List, patch: SessionPatch) -> HandlerOutcome:
        if not products:
            return self._not_found(patch)
        patch.product_id = products[0].id
        return HandlerOutcome(product_list_response(products, self.rng), patch, humanize=True)

    # ---------------------------------------------------------------
    # handlers
    # ---------------------------------------------------------------
    def _handle_greeting(self, turn: _Turn) -> HandlerOutcome:
        categories = self.catalog.list_categories(turn.tenant_id)
        reply = category_list_response(
            categories, greeting=True, company_name=self._company_name(turn), rng=self.rng
        )
        return HandlerOutcome(reply)

    def _handle_list_categories(self, turn: _Turn) -> HandlerOutcome:
        categories = self.catalog.list_categories(turn.tenant_id)
        return HandlerOutcome(category_list_response(categories, rng=self.rng), humanize=bool(categories))

    def _handle_store_info(self, turn: _Turn) -> HandlerOutcome:
        company = self.catalog.get_company(turn.tenant_id)
        return HandlerOutcome(store_info_response(company, turn.result.attribute))

    def _handle_view_category(self, turn: _Turn) -> HandlerOutcome:
        category = self.resolver.resolve_category(turn.tenant_id, turn.result.category)
        if not category:
            return self._not_found()

        patch = SessionPatch(category=category)
        subcategories = self.catalog.list_subcategories(turn.tenant_id, category)
        if subcategories:
            return HandlerOutcome(category_response(category, subcategories, self.rng), patch, humanize=True)

        products = self.catalog.find_products(turn.tenant_id, category=category, limit=self.list_limit)
        return self._product_list(products, patch)

    def _handle_view_subcategory(self, turn: _Turn) -> HandlerOutcome:
        raw_category = turn.result.category or turn.session.last_category
        category = self.resolver.resolve_category(turn.tenant_id, raw_category)
        if not category:
            return self._not_found()

        subcategory = self.resolver.resolve_subcategory(turn.tenant_id, category, turn.result.subcategory)
        if not subcategory:
            return self._not_found()

        patch = SessionPatch(category=category, subcategory=subcategory)
        products = self.catalog.find_products(
            turn.tenant_id, category=category, subcategory=subcategory, limit=self.list_limit
        )
        return self._product_list(products, patch)

    def _answer_product(self, turn: _Turn, fallback_on_miss: bool) -> HandlerOutcome:
        product = self.resolver.resolve_product(
            turn.tenant_id,
            turn.result.product,
            turn.session.last_product_id,
            fallback_on_miss=fallback_on_miss,
        )
        if not product:
            return self._not_found()

        patch = SessionPatch(product_id=product.id)
        try:
            reply = generate_product_response(self.generator, product, turn.text)
        except GenerationError as e:
            logger.info("flow generation_error product_id=%s error=%s", product.id, str(e)[:200])
            log_generation(turn.user_id, product.id, "generation_error", 0)
            return HandlerOutcome(GENERATION_FAILURE, patch)

        if reply is None:
            log_generation(turn.user_id, product.id, "rejected", 0)
            return HandlerOutcome(GENERATION_FAILURE, patch)

        log_generation(turn.user_id, product.id, "llm_generated", len(reply))
        return HandlerOutcome(reply, patch)

    def _handle_view_product(self, turn: _Turn) -> HandlerOutcome:
        return self._answer_product(turn, fallback_on_miss=False)

    def _handle_ask_attribute(self, turn: _Turn) -> HandlerOutcome:
        return self._answer_product(turn, fallback_on_miss=True)

    def _handle_list_products(self, turn: _Turn) -> HandlerOutcome:
        if turn.result.category:
            category = self.resolver.resolve_category(turn.tenant_id, turn.result.category)
            if not category:
                return self._not_found()
        else:
            category = turn.session.last_category

        if not category:
            # sem nenhum contexto: mostra o menu para o cliente escolher
            return self._handle_list_categories(turn)

        subcategory = None
        if turn.result.subcategory:
            subcategory = self.resolver.resolve_subcategory(turn.tenant_id, category, turn.result.subcategory)
        elif category == turn.session.last_category:
            subcategory = turn.session.last_subcategory

        products = self.catalog.find_products(
            turn.tenant_id, category=category, subcategory=subcategory, limit=self.list_limit
        )
        return self._product_list(products, SessionPatch(category=category, subcategory=subcategory))

    def _handle_talk_to_human(self, turn: _Turn) -> HandlerOutcome:
        logger.info("flow handoff user=%s", turn.user_id)
        return HandlerOutcome(HANDOFF_ACK, SessionPatch(hand_off=True), needs_human=True)

    def _handle_unknown(self, turn: _Turn) -> HandlerOutcome:
        return self._not_found()
