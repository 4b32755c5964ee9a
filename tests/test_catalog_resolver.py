import pytest

from vitrine.catalog_resolver import CatalogResolver, match_item

from conftest import FakeCatalog


@pytest.fixture
def resolver():
    return CatalogResolver(FakeCatalog())


def test_match_item_exato_antes_do_fuzzy():
    assert match_item("CALÇAS", ["Calças", "Camisas"], 60) == "Calças"
    assert match_item("calca", ["Calças", "Camisas"], 60) == "Calças"
    assert match_item("", ["Calças"], 0) is None
    assert match_item(None, ["Calças"], 0) is None


def test_resolve_category(resolver):
    assert resolver.resolve_category("loja-1", "calças") == "Calças"
    assert resolver.resolve_category("loja-1", "bermuda") == "Bermudas"
    assert resolver.resolve_category("loja-1", "eletronicos") is None
    assert resolver.resolve_category("loja-1", None) is None


def test_categoria_so_de_produto_indisponivel_nao_aparece(resolver):
    assert resolver.resolve_category("loja-1", "Vestidos") is None


def test_resolve_subcategory(resolver):
    assert resolver.resolve_subcategory("loja-1", "Calças", "jeans") == "Jeans"
    assert resolver.resolve_subcategory("loja-1", "Calças", "social") is None
    assert resolver.resolve_subcategory("loja-1", "", "jeans") is None


def test_resolve_product_por_nome(resolver):
    assert resolver.resolve_product("loja-1", "jeans reta", None).id == "2"


def test_resolve_product_fuzzy(resolver):
    # "camisa polo azull" x "camisa polo azul": 1 edicao em 20 -> 95%
    assert resolver.resolve_product("loja-1", "camisa polo azull", None).id == "5"


def test_resolve_product_sem_nome_usa_o_da_sessao(resolver):
    assert resolver.resolve_product("loja-1", None, "3").id == "3"
    assert resolver.resolve_product("loja-1", "", None) is None


def test_resolve_product_nome_sem_match(resolver):
    assert resolver.resolve_product("loja-1", "geladeira frost free", "3") is None
    fallback = resolver.resolve_product("loja-1", "geladeira frost free", "3", fallback_on_miss=True)
    assert fallback.id == "3"


def test_resolve_product_respeita_a_loja(resolver):
    assert resolver.resolve_product("loja-2", "calça jeans skinny", None) is None
    assert resolver.resolve_product("loja-2", "boné", None).id == "20"


def test_rescue_category_por_palavra(resolver):
    assert resolver.rescue_category("loja-1", "bermuda") == "Bermudas"
    assert resolver.rescue_category("loja-1", "quero ver umas camisa ai") == "Camisas"
    assert resolver.rescue_category("loja-1", "asdfgh") is None


def test_rescue_subcategory(resolver):
    assert resolver.rescue_subcategory("loja-1", "Camisas", "polos") == "Polo"
    assert resolver.rescue_subcategory("loja-1", "Camisas", "asdfgh") is None
    assert resolver.rescue_subcategory("loja-1", None, "polo") is None
