"""
Popula o banco com uma loja de demonstração e um catálogo de roupas.

uso: python seed_catalog.py
"""
from database import Empresa, Produto, SessionLocal, init_db
from vitrine import settings

PRODUTOS = [
    # nome, descricao, preco, estoque, categoria, subcategoria
    ("Calça Jeans Skinny", "Jeans com elastano, lavagem escura.", 129.90, 12, "Calças", "Jeans"),
    ("Calça Jeans Reta", "Modelagem reta, lavagem clara.", 119.90, 8, "Calças", "Jeans"),
    ("Calça Chino Bege", "Sarja leve, cintura média.", 99.90, 6, "Calças", "Chino"),
    ("Camisa Social Branca", "Tricoline 100% algodão, manga longa.", 89.90, 15, "Camisas", "Social"),
    ("Camisa Polo Azul", "Piquet, gola com dois botões.", 79.90, 20, "Camisas", "Polo"),
    ("Camiseta Básica Preta", "Malha penteada, gola careca.", 49.90, 30, "Camisas", "Camiseta"),
    ("Bermuda Cargo", "Sarja com bolsos laterais.", 69.90, 10, "Bermudas", None),
    ("Boné Aba Curva", "Ajuste traseiro com fivela.", 39.90, 5, "Acessórios", "Bonés"),
]


def main():
    init_db()
    db = SessionLocal()
    try:
        phone_number_id = settings.WHATSAPP_PHONE_NUMBER_ID or "100000000000001"
        empresa = (
            db.query(Empresa)
            .filter(Empresa.whatsapp_phone_number_id == phone_number_id)
            .first()
        )
        if empresa:
            print(f"Loja já existe (id={empresa.id}), nada a fazer.")
            return

        empresa = Empresa(
            nome="Loja Demo",
            whatsapp_phone_number_id=phone_number_id,
            endereco="Rua Exemplo, 123 - Centro",
            horario_funcionamento="Seg a Sáb, 09h às 18h",
            formas_pagamento=["Pix", "Cartão de crédito", "Cartão de débito"],
        )
        db.add(empresa)
        db.flush()

        for nome, descricao, preco, estoque, categoria, subcategoria in PRODUTOS:
            db.add(Produto(
                id_empresa=empresa.id,
                nome=nome,
                descricao=descricao,
                preco=preco,
                estoque=estoque,
                categoria=categoria,
                subcategoria=subcategoria,
                disponivel=True,
            ))

        db.commit()
        print(f"Seed ok: empresa id={empresa.id}, {len(PRODUTOS)} produtos")
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
