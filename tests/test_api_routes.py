import pytest
from fastapi.testclient import TestClient

from main import app
from vitrine.dependencies import get_flow_controller, get_session_store

from conftest import FakeGenerator


@pytest.fixture
def client(make_controller, sessions):
    controller = make_controller(FakeGenerator(
        intents={"quero ver calças": {"intent": "VIEW_CATEGORY", "category": "calças", "confidence": 0.9}}
    ))
    app.dependency_overrides[get_flow_controller] = lambda: controller
    app.dependency_overrides[get_session_store] = lambda: sessions
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_chat_devolve_resposta_e_sessao(client):
    resp = client.post("/chat", json={"user_id": "u1", "tenant_id": "loja-1", "text": "quero ver calças"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["intent"] == "VIEW_CATEGORY"
    assert body["confidence"] == pytest.approx(0.9)
    assert body["needs_human"] is False
    assert body["session_id"] == "u1"
    assert body["session"]["last_category"] == "Calças"
    assert "• Jeans" in body["reply"]


def test_chat_sem_user_id_gera_sessao_nova(client):
    body = client.post("/chat", json={"tenant_id": "loja-1", "text": "oi"}).json()
    assert len(body["session_id"]) == 32


def test_ver_e_resetar_sessao(client, sessions):
    client.post("/chat", json={"user_id": "u1", "tenant_id": "loja-1", "text": "quero ver calças"})

    snapshot = client.get("/session/u1").json()
    assert snapshot["session"]["last_category"] == "Calças"

    assert client.delete("/session/u1").status_code == 200
    assert sessions.get_category("u1") is None
