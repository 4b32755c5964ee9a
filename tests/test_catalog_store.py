import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, Empresa, Produto
from vitrine.catalog_store import SqlCatalogStore


@pytest.fixture
def seeded():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    db = factory()
    loja = Empresa(
        nome="Loja Teste",
        whatsapp_phone_number_id="PNID-1",
        endereco="Rua A, 10",
        horario_funcionamento="9h às 18h",
        formas_pagamento=["Pix", "Cartão"],
    )
    outra = Empresa(nome="Outra", whatsapp_phone_number_id="PNID-2", formas_pagamento=[])
    db.add_all([loja, outra])
    db.flush()
    db.add_all([
        Produto(id_empresa=loja.id, nome="Calça Jeans Skinny", preco=129.90, categoria="Calças", subcategoria="Jeans"),
        Produto(id_empresa=loja.id, nome="Calça Chino Bege", preco=99.90, categoria="Calças", subcategoria="Chino"),
        Produto(id_empresa=loja.id, nome="Camisa Polo Azul", preco=79.90, categoria="Camisas", subcategoria="Polo"),
        Produto(id_empresa=loja.id, nome="Bermuda Cargo", preco=69.90, categoria="Bermudas"),
        Produto(id_empresa=loja.id, nome="Vestido Floral", preco=149.90, categoria="Vestidos", disponivel=False),
        Produto(id_empresa=outra.id, nome="Boné Preto", preco=39.90, categoria="Acessórios"),
    ])
    db.commit()
    ids = {"loja": str(loja.id), "outra": str(outra.id)}
    db.close()

    yield SqlCatalogStore(factory), ids
    engine.dispose()


def test_categorias_distintas_e_so_disponiveis(seeded):
    store, ids = seeded
    assert store.list_categories(ids["loja"]) == ["Bermudas", "Calças", "Camisas"]
    assert store.list_categories(ids["outra"]) == ["Acessórios"]


def test_subcategorias_ignoram_vazias(seeded):
    store, ids = seeded
    assert store.list_subcategories(ids["loja"], "Calças") == ["Chino", "Jeans"]
    assert store.list_subcategories(ids["loja"], "Bermudas") == []


def test_find_products_filtra_e_limita(seeded):
    store, ids = seeded
    calcas = store.find_products(ids["loja"], category="Calças")
    assert [p.name for p in calcas] == ["Calça Jeans Skinny", "Calça Chino Bege"]
    assert calcas[0].price == pytest.approx(129.9)

    jeans = store.find_products(ids["loja"], category="Calças", subcategory="Jeans")
    assert [p.name for p in jeans] == ["Calça Jeans Skinny"]

    assert len(store.find_products(ids["loja"], limit=2)) == 2


def test_find_product_by_name_parcial_e_por_loja(seeded):
    store, ids = seeded
    assert store.find_product_by_name(ids["loja"], "polo azul").name == "Camisa Polo Azul"
    assert store.find_product_by_name(ids["loja"], "vestido") is None
    assert store.find_product_by_name(ids["outra"], "polo") is None
    assert store.find_product_by_name(ids["loja"], "a") is None


def test_get_product_escopado_pela_loja(seeded):
    store, ids = seeded
    product = store.find_product_by_name(ids["loja"], "bermuda")
    assert store.get_product(ids["loja"], product.id).name == "Bermuda Cargo"
    assert store.get_product(ids["outra"], product.id) is None
    assert store.get_product(ids["loja"], "abc") is None


def test_empresa_por_phone_number_id(seeded):
    store, ids = seeded
    company = store.find_company_by_phone_number_id("PNID-1")
    assert company.id == ids["loja"]
    assert company.payment_methods == ["Pix", "Cartão"]
    assert store.find_company_by_phone_number_id("desconhecido") is None
    assert store.get_company(ids["outra"]).name == "Outra"
