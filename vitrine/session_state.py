"""
Estado curto da conversa por usuario (ultima categoria/subcategoria/produto
e flag de atendimento humano).

O SessionStore aplica as regras de invalidacao em cascata; o armazenamento
em si fica atras de um KeyValueStore (memoria ou tabela no banco).
"""
import threading
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, Optional

from vitrine.models import SessionContext


class KeyValueStore:
    def get(self, key: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def set(self, key: str, value: Dict[str, Any]) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError


class InMemoryKeyValueStore(KeyValueStore):
    """Mapa do processo inteiro, sem TTL (cresce sem limite)."""

    def __init__(self) -> None:
        self._data: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            value = self._data.get(key)
            return dict(value) if value is not None else None

    def set(self, key: str, value: Dict[str, Any]) -> None:
        with self._lock:
            self._data[key] = dict(value)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)


class DatabaseKeyValueStore(KeyValueStore):
    """Uma linha JSON por usuario na tabela chat_session_state."""

    def __init__(self, session_factory: Optional[Callable] = None) -> None:
        if session_factory is None:
            from database import SessionLocal
            session_factory = SessionLocal
        self._session_factory = session_factory

    def _find(self, db, key: str):
        from database import ChatSessionState
        return db.query(ChatSessionState).filter(ChatSessionState.user_id == key).first()

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        db = self._session_factory()
        try:
            row = self._find(db, key)
            if not row:
                return None
            return dict(row.state or {})
        finally:
            db.close()

    def set(self, key: str, value: Dict[str, Any]) -> None:
        from database import ChatSessionState
        db = self._session_factory()
        try:
            row = self._find(db, key)
            if not row:
                row = ChatSessionState(user_id=key, state=dict(value))
                db.add(row)
            else:
                row.state = dict(value)
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def delete(self, key: str) -> None:
        db = self._session_factory()
        try:
            row = self._find(db, key)
            if row:
                db.delete(row)
                db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()


@dataclass
class SessionData:
    last_category: Optional[str] = None
    last_subcategory: Optional[str] = None
    last_product_id: Optional[str] = None
    handed_off: bool = False

    @classmethod
    def from_dict(cls, raw: Optional[Dict[str, Any]]) -> "SessionData":
        raw = raw or {}
        return cls(
            last_category=raw.get("last_category"),
            last_subcategory=raw.get("last_subcategory"),
            last_product_id=raw.get("last_product_id"),
            handed_off=bool(raw.get("handed_off", False)),
        )


@dataclass
class SessionPatch:
    """Mudancas de sessao produzidas por um turno (aplicadas em cascata)."""

    category: Optional[str] = None
    subcategory: Optional[str] = None
    product_id: Optional[str] = None
    hand_off: bool = False

    def is_empty(self) -> bool:
        return not (self.category or self.subcategory or self.product_id or self.hand_off)


class SessionStore:
    def __init__(self, backend: Optional[KeyValueStore] = None) -> None:
        self._backend = backend or InMemoryKeyValueStore()

    def _load(self, user_id: str) -> SessionData:
        return SessionData.from_dict(self._backend.get(user_id))

    def _save(self, user_id: str, data: SessionData) -> None:
        self._backend.set(user_id, asdict(data))

    # ---------------------------------------------------------------
    # categoria / subcategoria / produto
    # ---------------------------------------------------------------
    def set_category(self, user_id: str, category: str) -> None:
        data = self._load(user_id)
        data.last_category = category
        data.last_subcategory = None
        data.last_product_id = None
        self._save(user_id, data)

    def get_category(self, user_id: str) -> Optional[str]:
        return self._load(user_id).last_category

    def set_subcategory(self, user_id: str, subcategory: str) -> None:
        data = self._load(user_id)
        if not data.last_category:
            raise ValueError("subcategoria sem categoria definida")
        data.last_subcategory = subcategory
        data.last_product_id = None
        self._save(user_id, data)

    def get_subcategory(self, user_id: str) -> Optional[str]:
        return self._load(user_id).last_subcategory

    def set_product(self, user_id: str, product_id: str) -> None:
        data = self._load(user_id)
        data.last_product_id = product_id
        self._save(user_id, data)

    def get_product(self, user_id: str) -> Optional[str]:
        return self._load(user_id).last_product_id

    # ---------------------------------------------------------------
    # handoff
    # ---------------------------------------------------------------
    def set_hand_off(self, user_id: str) -> None:
        data = self._load(user_id)
        data.handed_off = True
        self._save(user_id, data)

    def is_handed_off(self, user_id: str) -> bool:
        return self._load(user_id).handed_off

    def reset(self, user_id: str) -> None:
        self._backend.delete(user_id)

    # ---------------------------------------------------------------
    # helpers do orquestrador
    # ---------------------------------------------------------------
    def context(self, user_id: str) -> SessionContext:
        data = self._load(user_id)
        return SessionContext(
            last_category=data.last_category,
            last_subcategory=data.last_subcategory,
            last_product=data.last_product_id,
        )

    def snapshot(self, user_id: str) -> Dict[str, Any]:
        return asdict(self._load(user_id))

    def apply(self, user_id: str, patch: SessionPatch) -> None:
        if patch.category:
            self.set_category(user_id, patch.category)
        if patch.subcategory:
            self.set_subcategory(user_id, patch.subcategory)
        if patch.product_id:
            self.set_product(user_id, patch.product_id)
        if patch.hand_off:
            self.set_hand_off(user_id)
