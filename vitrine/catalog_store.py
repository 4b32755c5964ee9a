"""
Catalogo em SQL (SQLAlchemy). Somente leitura para o nucleo do chatbot.

Tudo e escopado por empresa (tenant_id = Empresa.id em string) e,
para o cliente, so aparece o que esta disponivel.
"""
import logging
from typing import Callable, List, Optional

from sqlalchemy import func

from database import Empresa, Produto
from vitrine.models import Company, Product

logger = logging.getLogger(__name__)


def _as_int(value) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _to_product(row: Produto) -> Product:
    preco = row.preco
    return Product(
        id=str(row.id),
        name=row.nome,
        description=row.descricao,
        price=float(preco) if preco is not None else None,
        category=row.categoria,
        subcategory=row.subcategoria,
        available=bool(row.disponivel),
    )


def _to_company(row: Empresa) -> Company:
    return Company(
        id=str(row.id),
        name=row.nome,
        whatsapp_phone_number_id=row.whatsapp_phone_number_id,
        address=row.endereco,
        business_hours=row.horario_funcionamento,
        payment_methods=[str(p) for p in (row.formas_pagamento or [])],
    )


class SqlCatalogStore:
    def __init__(self, session_factory: Optional[Callable] = None) -> None:
        if session_factory is None:
            from database import SessionLocal
            session_factory = SessionLocal
        self._session_factory = session_factory

    def _available(self, db, tenant_id: str):
        return db.query(Produto).filter(
            Produto.id_empresa == _as_int(tenant_id),
            Produto.disponivel == True,  # noqa: E712
        )

    def list_categories(self, tenant_id: str) -> List[str]:
        db = self._session_factory()
        try:
            rows = (
                self._available(db, tenant_id)
                .with_entities(Produto.categoria)
                .distinct()
                .order_by(Produto.categoria)
                .all()
            )
            return [r[0] for r in rows if r[0]]
        finally:
            db.close()

    def list_subcategories(self, tenant_id: str, category: str) -> List[str]:
        db = self._session_factory()
        try:
            rows = (
                self._available(db, tenant_id)
                .filter(Produto.categoria == category)
                .with_entities(Produto.subcategoria)
                .distinct()
                .order_by(Produto.subcategoria)
                .all()
            )
            return [r[0] for r in rows if r[0]]
        finally:
            db.close()

    def find_products(
        self,
        tenant_id: str,
        category: Optional[str] = None,
        subcategory: Optional[str] = None,
        limit: int = 100,
    ) -> List[Product]:
        db = self._session_factory()
        try:
            q = self._available(db, tenant_id)
            if category:
                q = q.filter(Produto.categoria == category)
            if subcategory:
                q = q.filter(Produto.subcategoria == subcategory)
            rows = q.order_by(Produto.id).limit(limit).all()
            return [_to_product(r) for r in rows]
        finally:
            db.close()

    def find_product_by_name(self, tenant_id: str, name: str) -> Optional[Product]:
        q_name = (name or "").strip().lower()
        if len(q_name) < 2:
            return None
        db = self._session_factory()
        try:
            row = (
                self._available(db, tenant_id)
                .filter(func.lower(Produto.nome).contains(q_name, autoescape=True))
                .order_by(Produto.id)
                .first()
            )
            return _to_product(row) if row else None
        finally:
            db.close()

    def get_product(self, tenant_id: str, product_id: str) -> Optional[Product]:
        pid = _as_int(product_id)
        if pid is None:
            return None
        db = self._session_factory()
        try:
            row = (
                db.query(Produto)
                .filter(Produto.id == pid, Produto.id_empresa == _as_int(tenant_id))
                .first()
            )
            return _to_product(row) if row else None
        finally:
            db.close()

    # ---------------------------------------------------------------
    # empresas (tenants)
    # ---------------------------------------------------------------
    def get_company(self, tenant_id: str) -> Optional[Company]:
        cid = _as_int(tenant_id)
        if cid is None:
            return None
        db = self._session_factory()
        try:
            row = db.query(Empresa).filter(Empresa.id == cid).first()
            return _to_company(row) if row else None
        finally:
            db.close()

    def find_company_by_phone_number_id(self, phone_number_id: str) -> Optional[Company]:
        if not phone_number_id:
            return None
        db = self._session_factory()
        try:
            row = (
                db.query(Empresa)
                .filter(Empresa.whatsapp_phone_number_id == str(phone_number_id))
                .first()
            )
            if not row:
                logger.info("catalog company_not_found phone_number_id=%s", phone_number_id)
                return None
            return _to_company(row)
        finally:
            db.close()
