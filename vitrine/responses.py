"""
Respostas de template (sem LLM).

As frases de abertura/fechamento variam a cada chamada para o bot nao
soar repetitivo; as linhas com "•" (dados do catalogo) nunca variam.
"""
import random
from typing import List, Optional, Sequence

from vitrine.constants import MENU_HINT, NO_PRODUCTS
from vitrine.models import Company, Product

VARIED_RESPONSES = {
    "category": [
        "Temos essas opções em",
        "Aqui estão os itens em",
        "Você pode escolher entre",
        "Nossas linhas em",
        "Na categoria",
    ],
    "question": [
        "Qual você gostaria de explorar?",
        "Qual delas te interessa?",
        "Qual você quer conhecer melhor?",
        "O que você procura?",
        "Qual você gostaria de ver?",
    ],
    "product_list": [
        "Temos essas opções:",
        "Esses são nossos produtos:",
        "Aqui estão as nossas peças:",
        "Confira o que temos:",
        "Essas são nossas opções:",
    ],
    "ask_product": [
        "Fique à vontade para tirar dúvidas sobre qualquer um.",
        "Posso te ajudar com informações sobre eles.",
        "Manda a pergunta sobre qualquer um deles!",
        "Qual deles você gostaria de saber mais?",
        "Quer saber detalhes de algum?",
    ],
    "not_found": [
        "Não encontrei nada com esse nome.",
        "Desculpa, não localizei isso.",
        "Hmm, não achei nada assim.",
        "Não temos isso disponível no momento.",
        "Esse item não está no nosso catálogo.",
    ],
    "greeting": [
        "Olá! 👋",
        "Oi! Tudo bem? 😊",
        "Olá, seja bem-vindo(a)!",
    ],
}


def _pick(kind: str, rng: Optional[random.Random] = None) -> str:
    return (rng or random).choice(VARIED_RESPONSES[kind])


def format_price(price: Optional[float]) -> str:
    """59.9 -> 'R$ 59,90'"""
    if price is None:
        return "preço sob consulta"
    inteiro, centavos = f"{price:,.2f}".split(".")
    return f"R$ {inteiro.replace(',', '.')},{centavos}"


def _bullets(items: Sequence[str]) -> str:
    return "\n".join(f"• {i}" for i in items if i)


def category_list_response(
    categories: List[str],
    greeting: bool = False,
    company_name: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> str:
    if not categories:
        return NO_PRODUCTS

    lines = []
    if greeting:
        intro = _pick("greeting", rng)
        if company_name:
            intro = f"{intro} Aqui é da *{company_name}*."
        lines.append(intro)
    lines.append("Nossas categorias:")
    lines.append(_bullets(categories))
    lines.append("")
    lines.append(_pick("question", rng))
    if greeting:
        lines.append(MENU_HINT)
    return "\n".join(lines)


def category_response(category: str, subcategories: List[str], rng: Optional[random.Random] = None) -> str:
    intro = _pick("category", rng)
    question = _pick("question", rng)
    return f"{intro} *{category}*:\n{_bullets(subcategories)}\n\n{question}"


def product_list_response(products: List[Product], rng: Optional[random.Random] = None) -> str:
    intro = _pick("product_list", rng)
    lines = _bullets([f"{p.name} — {format_price(p.price)}" for p in products])
    question = _pick("ask_product", rng)
    return f"{intro}\n{lines}\n\n{question}"


def not_found_response(rng: Optional[random.Random] = None) -> str:
    return f"{_pick('not_found', rng)}\nTente buscar uma categoria ou subcategoria."


def store_info_response(company: Optional[Company], attribute: Optional[str] = None) -> str:
    """Endereço / horário / pagamento. attribute None = tudo."""
    address = company.address if company else None
    hours = company.business_hours if company else None
    payments = company.payment_methods if company else []

    lines = []
    if attribute in (None, "address"):
        lines.append(f"📍 Endereço: {address}" if address else "📍 Endereço ainda não cadastrado.")
    if attribute in (None, "hours"):
        lines.append(f"🕒 Horário: {hours}" if hours else "🕒 Horário ainda não cadastrado.")
    if attribute in (None, "payment"):
        if payments:
            lines.append("💳 Formas de pagamento: " + ", ".join(payments))
        else:
            lines.append("💳 Formas de pagamento ainda não cadastradas.")
    return "\n".join(lines)


def bullet_lines(text: str) -> List[str]:
    return [line.strip() for line in (text or "").splitlines() if line.strip().startswith("•")]
