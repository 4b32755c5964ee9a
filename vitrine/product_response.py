"""
Resposta gerada por IA sobre um produto especifico.

A IA so humaniza: os dados vem do catalogo e a resposta e checada antes de
sair (tamanho minimo, sem links, sem preco diferente do cadastrado).
"""
import logging
import re
from typing import Any, Dict, Optional

from vitrine import settings
from vitrine.llm_service import GenerationError, _redact_text
from vitrine.models import Product
from vitrine.responses import bullet_lines, format_price

logger = logging.getLogger(__name__)

MAX_REPLY_LENGTH = 1200

_URL_REGEX = re.compile(r"(https?://|www\.)", re.IGNORECASE)
_PRICE_REGEX = re.compile(r"R\$\s*(\d[\d.,]*)")

PRODUCT_SYSTEM_PROMPT = """VOCÊ É UM ATENDENTE DE LOJA REAL. REGRA FUNDAMENTAL: **NUNCA INVENTE INFORMAÇÕES**.

PROIBIÇÕES ABSOLUTAS:
1. NÃO INVENTE PALAVRAS OU CONCEITOS
2. NÃO USE INFORMAÇÕES QUE NÃO ESTÃO NO CONTEXTO
3. NÃO DESCREVA CARACTERÍSTICAS NÃO MENCIONADAS
4. SE NÃO SABE, DIGA: "Não tenho essa informação"
5. NÃO INICIE COM SAUDAÇÕES, VÁ DIRETO AO ASSUNTO
6. NÃO ENVIE LINKS

DADOS DISPONÍVEIS (use APENAS esses):
- Nome: {name}
- Descrição: {description}
- Preço: {price}
- Categoria: {category}
- Subcategoria: {subcategory}

ESCREVA COMO UMA PESSOA REAL:
- Natural, sem clichês ("Perfeito!", "Ótima escolha!")
- Conciso (WhatsApp, não email)
- No máximo 1 emoji

LEMBRE-SE: você só conhece as 5 informações acima. Nada mais existe para você.
"""

HUMANIZE_PROMPT = """Você é um atendente humano de WhatsApp da empresa "{company_name}".

REGRAS IMPORTANTES:
- NÃO adicione informações novas
- NÃO invente preços, promoções ou condições
- NÃO faça perguntas novas
- NÃO mude o significado do texto
- Mantenha EXATAMENTE iguais as linhas que começam com "•"
- Apenas torne a mensagem mais natural, educada e amigável
- Mensagem curta (WhatsApp)

Responda somente com o texto reescrito.
"""


def build_product_context(product: Product) -> Dict[str, Any]:
    return {
        "nome": product.name,
        "descricao": product.description or "(não informada)",
        "preco": format_price(product.price) if product.price is not None else "(não informado)",
        "categoria": product.category,
        "subcategoria": product.subcategory or "(não informada)",
    }


def build_product_prompt(product: Product) -> str:
    ctx = build_product_context(product)
    return PRODUCT_SYSTEM_PROMPT.format(
        name=ctx["nome"],
        description=ctx["descricao"],
        price=ctx["preco"],
        category=ctx["categoria"],
        subcategory=ctx["subcategoria"],
    )


def is_valid_response(text: Optional[str], min_length: int = settings.MIN_GENERATED_REPLY_LENGTH) -> bool:
    return bool(text) and len(text.strip()) >= min_length


def _parse_amount(raw: str) -> Optional[float]:
    s = raw.strip(".,")
    if "," in s:
        s = s.replace(".", "").replace(",", ".")
    try:
        return float(s)
    except ValueError:
        return None


def _generated_text_is_safe(text: str, product: Product) -> bool:
    if len(text) > MAX_REPLY_LENGTH:
        return False
    if _URL_REGEX.search(text):
        return False
    for raw in _PRICE_REGEX.findall(text):
        amount = _parse_amount(raw)
        if amount is None or product.price is None:
            return False
        if abs(amount - float(product.price)) >= 0.01:
            return False
    return True


def generate_product_response(generator, product: Product, user_message: str) -> Optional[str]:
    """
    Retorna a resposta da IA ou None quando ela nao presta (vazia, curta
    ou insegura). GenerationError sobe para o orquestrador.
    """
    logger.info("product_response product_id=%s msg=%s", product.id, _redact_text(user_message))
    text = generator.generate(build_product_prompt(product), user_message, build_product_context(product))
    text = (text or "").strip()

    if not is_valid_response(text):
        logger.info("product_response invalid length=%s", len(text))
        return None
    if not _generated_text_is_safe(text, product):
        logger.info("product_response unsafe output=%s", _redact_text(text))
        return None
    return text


def humanize_reply(generator, base_text: str, company_name: str = "nossa loja") -> str:
    return generator.generate(HUMANIZE_PROMPT.format(company_name=company_name), base_text).strip()


def maybe_humanize_reply(
    generator,
    base_text: str,
    company_name: Optional[str] = None,
    enabled: Optional[bool] = None,
) -> str:
    """Reescreve o template quando ligado; qualquer problema devolve o original."""
    if enabled is None:
        enabled = settings.HUMANIZE_REPLIES_ENABLED
    if not enabled or not base_text:
        return base_text

    try:
        rewritten = humanize_reply(generator, base_text, company_name or "nossa loja")
    except GenerationError as e:
        logger.info("humanize error=%s", str(e)[:200])
        return base_text

    if not is_valid_response(rewritten) or len(rewritten) > MAX_REPLY_LENGTH:
        return base_text

    # dados do catalogo ("•") tem que sobreviver intactos
    survived = set(bullet_lines(rewritten))
    if any(line not in survived for line in bullet_lines(base_text)):
        logger.info("humanize discarded reason=bullets_changed")
        return base_text
    return rewritten
