import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base
from vitrine.session_state import (
    DatabaseKeyValueStore,
    InMemoryKeyValueStore,
    SessionPatch,
    SessionStore,
)


@pytest.fixture
def db_session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture(params=["memory", "database"])
def store(request, db_session_factory):
    if request.param == "memory":
        return SessionStore(InMemoryKeyValueStore())
    return SessionStore(DatabaseKeyValueStore(db_session_factory))


def test_usuario_novo_comeca_vazio(store):
    assert store.get_category("u1") is None
    assert store.get_subcategory("u1") is None
    assert store.get_product("u1") is None
    assert store.is_handed_off("u1") is False


def test_trocar_categoria_limpa_subcategoria_e_produto(store):
    store.set_category("u1", "Calças")
    store.set_subcategory("u1", "Jeans")
    store.set_product("u1", "1")

    store.set_category("u1", "Camisas")

    assert store.get_category("u1") == "Camisas"
    assert store.get_subcategory("u1") is None
    assert store.get_product("u1") is None


def test_trocar_subcategoria_limpa_produto(store):
    store.set_category("u1", "Calças")
    store.set_subcategory("u1", "Jeans")
    store.set_product("u1", "1")

    store.set_subcategory("u1", "Chino")

    assert store.get_category("u1") == "Calças"
    assert store.get_product("u1") is None


def test_subcategoria_sem_categoria_e_rejeitada(store):
    with pytest.raises(ValueError):
        store.set_subcategory("u1", "Jeans")
    assert store.get_subcategory("u1") is None


def test_usuarios_nao_compartilham_estado(store):
    store.set_category("u1", "Calças")
    assert store.get_category("u2") is None


def test_reset_apaga_tudo(store):
    store.set_category("u1", "Calças")
    store.set_hand_off("u1")

    store.reset("u1")

    assert store.snapshot("u1") == {
        "last_category": None,
        "last_subcategory": None,
        "last_product_id": None,
        "handed_off": False,
    }


def test_apply_segue_a_ordem_da_cascata(store):
    store.set_category("u1", "Camisas")
    store.set_product("u1", "4")

    store.apply("u1", SessionPatch(category="Calças", subcategory="Jeans", product_id="1"))

    ctx = store.context("u1")
    assert ctx.last_category == "Calças"
    assert ctx.last_subcategory == "Jeans"
    assert ctx.last_product == "1"


def test_handoff_persiste(store):
    store.apply("u1", SessionPatch(hand_off=True))
    assert store.is_handed_off("u1") is True
    store.set_category("u1", "Calças")
    assert store.is_handed_off("u1") is True


def test_memoria_devolve_copias():
    backend = InMemoryKeyValueStore()
    backend.set("k", {"a": 1})
    value = backend.get("k")
    value["a"] = 2
    assert backend.get("k") == {"a": 1}
