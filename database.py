from sqlalchemy import (
    create_engine,
    Column,
    Integer,
    String,
    Text,
    Boolean,
    TIMESTAMP,
    Numeric,
    ForeignKey,
    JSON,
    text,
)
from sqlalchemy.orm import sessionmaker, declarative_base, relationship
from sqlalchemy.dialects.postgresql import JSONB
from dotenv import load_dotenv
import os

load_dotenv()

# Variáveis do .env
DB_USER = os.getenv("DB_USER", "postgres")
DB_PASSWORD = os.getenv("DB_PASSWORD", "postgres")
DB_HOST = os.getenv("DB_HOST", "localhost")
DB_PORT = os.getenv("DB_PORT", "5432")
DB_NAME = os.getenv("DB_NAME", "vitrine")

DATABASE_URL = os.getenv("DATABASE_URL") or (
    f"postgresql://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}"
)

_engine_kwargs = {}
if DATABASE_URL.startswith("sqlite"):
    _engine_kwargs["connect_args"] = {"check_same_thread": False}

engine = create_engine(DATABASE_URL, **_engine_kwargs)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

# JSONB no Postgres, JSON generico nos demais (sqlite nos testes)
JsonType = JSON().with_variant(JSONB(), "postgresql")

# ============================
# MODELOS DO BANCO
# ============================

class Empresa(Base):
    """Loja (tenant). Identificada pelo phone_number_id do WhatsApp."""
    __tablename__ = "empresas"

    id = Column(Integer, primary_key=True, index=True)
    nome = Column(String(150), nullable=False)
    whatsapp_phone_number_id = Column(String(50), unique=True, index=True, nullable=False)
    endereco = Column(Text)
    horario_funcionamento = Column(String(150))
    formas_pagamento = Column(JsonType, nullable=False, default=list)
    created_at = Column(TIMESTAMP, server_default=text("CURRENT_TIMESTAMP"))

    produtos = relationship("Produto", back_populates="empresa")


class Produto(Base):
    """
    Categoria e subcategoria nao sao tabelas: sao valores distintos
    destes campos por empresa.
    """
    __tablename__ = "produtos"

    id = Column(Integer, primary_key=True, index=True)
    id_empresa = Column(Integer, ForeignKey("empresas.id"), nullable=False, index=True)
    nome = Column(String(150), nullable=False)
    descricao = Column(Text)
    preco = Column(Numeric(10, 2), nullable=False)
    estoque = Column(Integer, default=0)
    categoria = Column(String(100), nullable=False, index=True)
    subcategoria = Column(String(100))
    disponivel = Column(Boolean, default=True, index=True)
    created_at = Column(TIMESTAMP, server_default=text("CURRENT_TIMESTAMP"))

    empresa = relationship("Empresa", back_populates="produtos")


# ============================
# ESTADO DA CONVERSA (PERSISTENTE)
# ============================

class ChatSessionState(Base):
    """
    Guarda o estado da conversa do usuário quando SESSION_BACKEND=database,
    para não perder categoria/produto/handoff quando reiniciar o servidor.
    """
    __tablename__ = "chat_session_state"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(100), unique=True, index=True, nullable=False)

    # estado inteiro em JSON
    state = Column(JsonType, nullable=False, default=dict)

    created_at = Column(TIMESTAMP, server_default=text("CURRENT_TIMESTAMP"))
    updated_at = Column(TIMESTAMP, server_default=text("CURRENT_TIMESTAMP"))


def init_db():
    """Cria as tabelas no banco, se ainda não existirem."""
    Base.metadata.create_all(bind=engine)
