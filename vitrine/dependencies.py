"""
Singletons montados a partir das settings (injetados nas rotas via Depends).
"""
from functools import lru_cache

from vitrine import settings
from vitrine.catalog_store import SqlCatalogStore
from vitrine.flow_controller import FlowController
from vitrine.intent_classifier import build_intent_classifier
from vitrine.llm_service import get_generator
from vitrine.session_state import DatabaseKeyValueStore, InMemoryKeyValueStore, SessionStore
from vitrine.whatsapp_client import WhatsAppClient


@lru_cache()
def get_catalog_store() -> SqlCatalogStore:
    return SqlCatalogStore()


@lru_cache()
def get_session_store() -> SessionStore:
    if settings.SESSION_BACKEND == "database":
        return SessionStore(DatabaseKeyValueStore())
    return SessionStore(InMemoryKeyValueStore())


@lru_cache()
def get_flow_controller() -> FlowController:
    generator = get_generator()
    return FlowController(
        catalog=get_catalog_store(),
        sessions=get_session_store(),
        classifier=build_intent_classifier(settings.INTENT_STRATEGY, generator),
        generator=generator,
    )


@lru_cache()
def get_message_sender() -> WhatsAppClient:
    return WhatsAppClient()
