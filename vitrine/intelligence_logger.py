"""
Logging silencioso de decisões de inteligência (observabilidade).

Registra decisões internas sem impactar respostas ao usuário.
Uma linha JSON por decisão, em arquivo dedicado (INTELLIGENCE_LOG_PATH).
"""
import json
import logging
from datetime import datetime, timezone
from typing import Optional

from vitrine import settings
from vitrine.llm_service import _redact_text


# Configuração de logger dedicado
_intelligence_logger = None


def _get_logger():
    """Retorna logger dedicado para inteligência."""
    global _intelligence_logger
    if _intelligence_logger is None:
        _intelligence_logger = logging.getLogger("intelligence")
        _intelligence_logger.setLevel(logging.INFO)
        _intelligence_logger.propagate = False

        if settings.INTELLIGENCE_LOG_PATH:
            # Handler: arquivo dedicado
            handler = logging.FileHandler(settings.INTELLIGENCE_LOG_PATH, encoding="utf-8")
            handler.setLevel(logging.INFO)
            handler.setFormatter(logging.Formatter("%(message)s"))
        else:
            handler = logging.NullHandler()

        _intelligence_logger.addHandler(handler)

    return _intelligence_logger


def _emit(stage: str, session_id: str, **fields):
    log_entry = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "session_id": session_id,
        "stage": stage,
    }
    log_entry.update(fields)
    _get_logger().info(json.dumps(log_entry, ensure_ascii=False, default=str))


def log_intent_decision(
    session_id: str,
    user_message: str,
    intent: str,
    confidence: float,
    source: str,  # "rules" | "llm" | "fuzzy_rescue" | "fallback"
    low_confidence: bool = False,
):
    """
    Registra a intenção escolhida para uma mensagem.

    Args:
        session_id: ID da sessão (usuario)
        user_message: Mensagem do usuário (vai redigida)
        intent: Intenção final
        confidence: Confiança 0-1
        source: Quem decidiu
        low_confidence: Se ficou abaixo do corte
    """
    _emit(
        "intent_decision",
        session_id,
        decision_type=source,
        user_message=_redact_text(user_message),
        intent=intent,
        confidence=round(float(confidence), 3),
        low_confidence=low_confidence,
    )


def log_fuzzy_rescue(session_id: str, user_message: str, level: str, match: Optional[str]):
    """Registra tentativa de resgate fuzzy (categoria/subcategoria)."""
    _emit(
        "fuzzy_rescue",
        session_id,
        decision_type=level,
        user_message=_redact_text(user_message),
        match=match,
        success=match is not None,
    )


def log_generation(session_id: str, product_id: str, method: str, reply_length: int):
    """
    Registra geração de resposta de produto.

    method: "llm_generated" | "rejected" | "generation_error"
    """
    _emit(
        "product_generation",
        session_id,
        decision_type=method,
        product_id=product_id,
        reply_length=reply_length,
    )
