"""
Classificação de intenção da mensagem do cliente.

- RuleBasedClassifier: atalhos de menu, saudação e palavras-chave (deterministico)
- LLMIntentClassifier: pede um JSON ao modelo e valida o schema
- HybridIntentClassifier: regras primeiro, LLM so quando nenhuma regra dispara

Nenhum classificador levanta excecao: erro vira UNKNOWN com confianca 0.
"""
import json
import math
import logging
import re
from typing import Any, Dict, List, Optional

from vitrine import settings
from vitrine.constants import (
    ADDRESS_KEYWORDS,
    CATEGORY_MENU_PHRASES,
    HOURS_KEYWORDS,
    HUMAN_KEYWORDS,
    MENU_SHORTCUTS,
    PAYMENT_KEYWORDS,
)
from vitrine.llm_service import GenerationError, _redact_text
from vitrine.models import LLM_INTENTS, Intent, IntentResult, SessionContext
from vitrine.text_utils import contains_any, is_greeting, normalize_text

logger = logging.getLogger(__name__)

_FENCED_REGEX = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)
_INNER_OBJECT_REGEX = re.compile(r"\{[^{}]*\}")

_SHORTCUT_CONFIDENCE = 0.95
_KEYWORD_CONFIDENCE = 0.9


class RuleBasedClassifier:
    def classify(self, text: str, context: Optional[SessionContext] = None) -> IntentResult:
        t = normalize_text(text)
        if not t:
            return IntentResult.unknown(source="rules")

        if t in MENU_SHORTCUTS:
            intent = Intent(MENU_SHORTCUTS[t])
            return IntentResult(intent=intent, confidence=_SHORTCUT_CONFIDENCE, source="rules")

        if is_greeting(t):
            return IntentResult(intent=Intent.GREETING, confidence=_SHORTCUT_CONFIDENCE, source="rules")

        if t in CATEGORY_MENU_PHRASES:
            return IntentResult(intent=Intent.LIST_CATEGORIES, confidence=_SHORTCUT_CONFIDENCE, source="rules")

        if contains_any(t, HUMAN_KEYWORDS):
            return IntentResult(intent=Intent.TALK_TO_HUMAN, confidence=_KEYWORD_CONFIDENCE, source="rules")

        for attribute, keywords in (
            ("address", ADDRESS_KEYWORDS),
            ("hours", HOURS_KEYWORDS),
            ("payment", PAYMENT_KEYWORDS),
        ):
            if contains_any(t, keywords):
                return IntentResult(
                    intent=Intent.STORE_INFO,
                    attribute=attribute,
                    confidence=_KEYWORD_CONFIDENCE,
                    source="rules",
                )

        return IntentResult.unknown(source="rules")


# ============================
# LLM
# ============================

INTENT_SYSTEM_PROMPT = """Voce e o interpretador de intencoes de uma loja no WhatsApp.
Sua unica tarefa e classificar a mensagem do cliente.

REGRAS ABSOLUTAS:
- NUNCA responda ao cliente, somente JSON valido
- NAO invente nomes: copie categoria/subcategoria/produto como o cliente escreveu
- Campos que nao se aplicam devem ser null
- Um unico objeto JSON, sem texto antes ou depois

INTENCOES:
- LIST_CATEGORIES: quer ver o que a loja vende / menu de categorias
- VIEW_CATEGORY: quer ver uma categoria ("quero ver calcas")
- VIEW_SUBCATEGORY: quer ver um tipo dentro da categoria ("as jeans")
- VIEW_PRODUCT: quer ver um produto especifico
- ASK_PRODUCT_ATTRIBUTE: pergunta preco/tamanho/cor/etc de um produto ("quanto custa?")
- LIST_PRODUCTS: quer a lista de produtos ("me mostra os produtos")
- TALK_TO_HUMAN: quer falar com um atendente
- UNKNOWN: nada acima

CONTEXTO DA CONVERSA:
- ultima categoria: {last_category}
- ultima subcategoria: {last_subcategory}
- ultimo produto: {last_product}
Se o cliente falar "esse", "dele", "quanto custa?" sem nomear, use o contexto
(ASK_PRODUCT_ATTRIBUTE com product null).

RETORNE SOMENTE ESTE JSON:
{{
  "intent": "LIST_CATEGORIES|VIEW_CATEGORY|VIEW_SUBCATEGORY|VIEW_PRODUCT|ASK_PRODUCT_ATTRIBUTE|LIST_PRODUCTS|TALK_TO_HUMAN|UNKNOWN",
  "category": "string ou null",
  "subcategory": "string ou null",
  "product": "string ou null",
  "attribute": "string ou null",
  "confidence": 0.0
}}
"""


def build_intent_prompt(context: Optional[SessionContext]) -> str:
    context = context or SessionContext()
    return INTENT_SYSTEM_PROMPT.format(
        last_category=context.last_category or "(nenhuma)",
        last_subcategory=context.last_subcategory or "(nenhuma)",
        last_product="(existe)" if context.last_product else "(nenhum)",
    )


def _json_candidates(raw: str) -> List[str]:
    content = raw.strip()
    candidates = [content]
    for body in _FENCED_REGEX.findall(content):
        candidates.append(body.strip())
    if "{" in content and "}" in content:
        candidates.append(content[content.find("{") : content.rfind("}") + 1])
    candidates.extend(_INNER_OBJECT_REGEX.findall(content))
    return candidates


def _validate_intent_payload(payload: Dict[str, Any]) -> Optional[IntentResult]:
    intent_raw = payload.get("intent")
    if not isinstance(intent_raw, str):
        return None
    try:
        intent = Intent(intent_raw.strip().upper())
    except ValueError:
        return None
    if intent not in LLM_INTENTS:
        return None

    if "confidence" not in payload:
        return None
    confidence_raw = payload["confidence"]
    # bool e subclasse de int; "0.9" em string tambem nao vale
    if isinstance(confidence_raw, bool) or not isinstance(confidence_raw, (int, float)):
        return None
    # json.loads aceita NaN/Infinity
    if not math.isfinite(float(confidence_raw)):
        return None
    confidence_val = max(0.0, min(1.0, float(confidence_raw)))

    return IntentResult(
        intent=intent,
        category=payload.get("category"),
        subcategory=payload.get("subcategory"),
        product=payload.get("product"),
        attribute=payload.get("attribute"),
        confidence=confidence_val,
        source="llm",
    )


def parse_intent_payload(raw: Optional[str]) -> IntentResult:
    """Extrai e valida o JSON do modelo. Nunca levanta: falha -> UNKNOWN/0."""
    if not raw or not raw.strip():
        return IntentResult.unknown(source="llm")

    for candidate in _json_candidates(raw):
        try:
            data = json.loads(candidate)
        except (ValueError, TypeError):
            continue
        if not isinstance(data, dict):
            continue
        result = _validate_intent_payload(data)
        if result is not None:
            return result

    return IntentResult.unknown(source="llm")


class LLMIntentClassifier:
    def __init__(self, generator):
        self.generator = generator

    def classify(self, text: str, context: Optional[SessionContext] = None) -> IntentResult:
        if not text or not text.strip():
            return IntentResult.unknown(source="llm")

        try:
            raw = self.generator.generate(build_intent_prompt(context), text)
        except GenerationError as e:
            logger.info("intent_llm error=%s", str(e)[:200])
            return IntentResult.unknown(source="llm")

        result = parse_intent_payload(raw)
        if result.intent == Intent.UNKNOWN and result.confidence == 0.0:
            logger.info("intent_llm invalid_json output=%s", _redact_text(str(raw)))
        else:
            logger.info(
                "intent_llm output intent=%s confidence=%.2f",
                result.intent.value,
                result.confidence,
            )
        return result


class HybridIntentClassifier:
    def __init__(self, rules: RuleBasedClassifier, llm: LLMIntentClassifier):
        self.rules = rules
        self.llm = llm

    def classify(self, text: str, context: Optional[SessionContext] = None) -> IntentResult:
        result = self.rules.classify(text, context)
        if result.intent != Intent.UNKNOWN:
            return result
        return self.llm.classify(text, context)


def build_intent_classifier(strategy: Optional[str] = None, generator=None):
    strategy = (strategy or settings.INTENT_STRATEGY).lower()
    rules = RuleBasedClassifier()
    if strategy == "rules":
        return rules
    if generator is None:
        raise ValueError(f"estrategia {strategy} precisa de um gerador")
    llm = LLMIntentClassifier(generator)
    if strategy == "llm":
        return llm
    if strategy != "hybrid":
        logger.warning("INTENT_STRATEGY desconhecida (%s), usando hybrid", strategy)
    return HybridIntentClassifier(rules, llm)
