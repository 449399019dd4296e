from app.auth import hash_password
from app.db import (
    fetch_card_data,
    init_schema,
    insert_customer,
    insert_invoice,
    insert_user,
)

USERS = [
    {"name": "User", "email": "user@nextmail.com", "password": "123456"},
]

CUSTOMERS = [
    {"id": "cust_evil_rabbit", "name": "Evil Rabbit", "email": "evil@rabbit.com"},
    {"id": "cust_delba", "name": "Delba de Oliveira", "email": "delba@oliveira.com"},
    {"id": "cust_lee", "name": "Lee Robinson", "email": "lee@robinson.com"},
    {"id": "cust_michael", "name": "Michael Novotny", "email": "michael@novotny.com"},
]

# amount en centavos
INVOICES = [
    {"customer_id": "cust_evil_rabbit", "amount": 15795, "status": "pending", "date": "2022-12-06"},
    {"customer_id": "cust_delba", "amount": 20348, "status": "pending", "date": "2022-11-14"},
    {"customer_id": "cust_lee", "amount": 3040, "status": "paid", "date": "2022-10-29"},
    {"customer_id": "cust_michael", "amount": 44800, "status": "paid", "date": "2023-09-10"},
    {"customer_id": "cust_delba", "amount": 34577, "status": "pending", "date": "2023-08-05"},
    {"customer_id": "cust_lee", "amount": 54246, "status": "pending", "date": "2023-07-16"},
    {"customer_id": "cust_evil_rabbit", "amount": 666, "status": "pending", "date": "2023-06-27"},
]


def seed() -> None:
    """Crea tablas y carga datos demo. Idempotente."""
    init_schema()

    for u in USERS:
        insert_user(u["name"], u["email"], hash_password(u["password"]))

    for c in CUSTOMERS:
        insert_customer(c["id"], c["name"], c["email"])

    # invoices no tienen clave natural: solo si la tabla está vacía
    if fetch_card_data()["number_of_invoices"] == 0:
        for inv in INVOICES:
            insert_invoice(inv["customer_id"], inv["amount"], inv["status"], inv["date"])
