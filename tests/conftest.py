import json
import os
import random

# antes de importar qualquer modulo do projeto
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["INTELLIGENCE_LOG_PATH"] = ""
os.environ.setdefault("HUMANIZE_REPLIES_ENABLED", "false")

import pytest

from vitrine.flow_controller import FlowController
from vitrine.intent_classifier import build_intent_classifier
from vitrine.llm_service import GenerationError
from vitrine.models import Company, Product
from vitrine.session_state import SessionStore


def _p(pid, name, price, category, subcategory=None, available=True, description=None):
    return Product(
        id=pid,
        name=name,
        description=description,
        price=price,
        category=category,
        subcategory=subcategory,
        available=available,
    )


CATALOG = {
    "loja-1": [
        _p("1", "Calça Jeans Skinny", 129.9, "Calças", "Jeans", description="Jeans com elastano."),
        _p("2", "Calça Jeans Reta", 119.9, "Calças", "Jeans"),
        _p("3", "Calça Chino Bege", 99.9, "Calças", "Chino"),
        _p("4", "Camisa Social Branca", 89.9, "Camisas", "Social"),
        _p("5", "Camisa Polo Azul", 79.9, "Camisas", "Polo"),
        _p("6", "Bermuda Cargo", 69.9, "Bermudas"),
        _p("7", "Vestido Floral", 149.9, "Vestidos", "Midi", available=False),
    ],
    "loja-2": [
        _p("20", "Boné Preto", 39.9, "Acessórios", "Bonés"),
    ],
}

COMPANIES = {
    "loja-1": Company(
        id="loja-1",
        name="Loja Teste",
        whatsapp_phone_number_id="PNID-1",
        address="Rua A, 10",
        business_hours="Seg a Sex, 9h às 18h",
        payment_methods=["Pix", "Cartão"],
    ),
    "loja-2": Company(id="loja-2", name="Outra Loja", whatsapp_phone_number_id="PNID-2"),
}


class FakeCatalog:
    """Mesma interface do SqlCatalogStore, em memoria."""

    def __init__(self, products=None, companies=None):
        self.products = products if products is not None else CATALOG
        self.companies = companies if companies is not None else COMPANIES

    def _available(self, tenant_id):
        return [p for p in self.products.get(tenant_id, []) if p.available]

    def list_categories(self, tenant_id):
        return sorted({p.category for p in self._available(tenant_id) if p.category})

    def list_subcategories(self, tenant_id, category):
        return sorted({
            p.subcategory for p in self._available(tenant_id)
            if p.category == category and p.subcategory
        })

    def find_products(self, tenant_id, category=None, subcategory=None, limit=100):
        out = [
            p for p in self._available(tenant_id)
            if (not category or p.category == category)
            and (not subcategory or p.subcategory == subcategory)
        ]
        return out[:limit]

    def find_product_by_name(self, tenant_id, name):
        q = (name or "").strip().lower()
        if len(q) < 2:
            return None
        for p in self._available(tenant_id):
            if q in p.name.lower():
                return p
        return None

    def get_product(self, tenant_id, product_id):
        for p in self.products.get(tenant_id, []):
            if p.id == product_id:
                return p
        return None

    def get_company(self, tenant_id):
        return self.companies.get(tenant_id)

    def find_company_by_phone_number_id(self, phone_number_id):
        for c in self.companies.values():
            if c.whatsapp_phone_number_id == phone_number_id:
                return c
        return None


class FakeGenerator:
    """
    Responde o prompt de intencao com o JSON cadastrado para o texto
    e qualquer outro prompt com `reply`.
    """

    def __init__(self, intents=None, reply="Tenho sim, é uma ótima peça.", error=None):
        self.intents = intents or {}
        self.reply = reply
        self.error = error
        self.calls = []

    def generate(self, system_prompt, user_text, context=None):
        self.calls.append((system_prompt, user_text, context))
        if "RETORNE SOMENTE ESTE JSON" in system_prompt:
            payload = self.intents.get(user_text, {"intent": "UNKNOWN", "confidence": 0.0})
            return payload if isinstance(payload, str) else json.dumps(payload, ensure_ascii=False)
        if self.error is not None:
            raise self.error
        return self.reply


class FakeSender:
    def __init__(self, error=None):
        self.sent = []
        self.error = error

    def send_message(self, to, message, phone_number_id=None):
        if self.error is not None:
            raise self.error
        self.sent.append((to, message, phone_number_id))
        return {"messages": [{"id": "wamid.fake"}]}


@pytest.fixture
def catalog():
    return FakeCatalog()


@pytest.fixture
def sessions():
    return SessionStore()


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def make_controller(catalog, sessions):
    def _make(generator=None, strategy="hybrid", **kwargs):
        generator = generator or FakeGenerator()
        kwargs.setdefault("humanize_enabled", False)
        kwargs.setdefault("rng", random.Random(7))
        return FlowController(
            catalog=catalog,
            sessions=sessions,
            classifier=build_intent_classifier(strategy, generator),
            generator=generator,
            **kwargs,
        )
    return _make


@pytest.fixture
def generation_error():
    return GenerationError("timeout")
