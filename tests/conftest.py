"""
Shared test fixtures.

The same sample rows back an in-memory store and a SQLite-file store, so
every engine test can run against both the in-process predicate evaluation
and the SQL pushdown.
"""

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app.api.transactions import get_transaction_store
from app.core.database import Base, create_db_engine
from app.main import app
from app.models.transaction import Transaction
from app.services.query_engine import TransactionQueryEngine
from app.services.transaction_store import InMemoryTransactionStore, SqlAlchemyTransactionStore


def make_row(transaction_id, when, name, product, category, brand, tags, region, gender, age,
             quantity, total, final, payment, status, delivery):
    return {
        "transaction_id": transaction_id,
        "date": when,
        "customer_id": f"CUST-{transaction_id:03d}",
        "customer_name": name,
        "phone_number": "9876543210",
        "gender": gender,
        "age": age,
        "customer_region": region,
        "customer_type": "Returning",
        "product_id": f"PROD-{transaction_id:03d}",
        "product_name": product,
        "brand": brand,
        "product_category": category,
        "tags": tags,
        "quantity": quantity,
        "price_per_unit": round(total / quantity, 2),
        "discount_percentage": round((total - final) * 100 / total, 2),
        "total_amount": total,
        "final_amount": final,
        "payment_method": payment,
        "order_status": status,
        "delivery_type": delivery,
        "store_id": "ST-001",
        "store_location": "Mumbai",
        "salesperson_id": "EMP-001",
        "employee_name": "Ravi Kumar",
    }


# Store order is list order. Ids 42 and 4 share a timestamp.
SAMPLE_ROWS = [
    make_row(1, datetime(2024, 1, 5, 10, 0), "Alice Johnson", "Organic Face Wash", "Beauty", "Mamaearth",
             "organic,skincare", "North", "Female", 25, 3, 100.0, 90.0, "UPI", "Completed", "Standard"),
    make_row(2, datetime(2024, 2, 10, 14, 30), "Bob Smith", "Wireless Earbuds", "Electronics", "Sony",
             "gadgets,wireless", "South", "Male", 34, 1, 2000.0, 1800.0, "Credit Card", "Completed", "Express"),
    make_row(42, datetime(2024, 3, 15, 9, 0), "Carol White", "Yoga Mat", "Sports", "Nike",
             "fitness", "East", "Female", 41, 2, 600.0, 600.0, "Cash", "Pending", "Standard"),
    make_row(4, datetime(2024, 3, 15, 9, 0), "David Brown", "Cotton T-Shirt", "Clothing", "Zara",
             "casual, cotton", "West", "Male", 52, 4, 800.0, 720.0, "UPI", "Cancelled", "Store Pickup"),
    make_row(5, datetime(2024, 6, 30, 23, 30), "Eve Davis", "Sunscreen", "Beauty", "Nivea",
             "Skincare,summer", "North", "Female", None, 5, 1500.0, 1200.0, "Debit Card", "Completed", "Express"),
    make_row(100, datetime(2024, 12, 31, 12, 0), "Frank Miller", "Bluetooth Speaker", "Electronics", "boAt",
             None, "Central", "Male", 60, 2, 3000.0, 2700.0, "Credit Card", "Returned", "Standard"),
]


def make_transactions(rows=None) -> list[Transaction]:
    return [Transaction(**row) for row in (rows if rows is not None else SAMPLE_ROWS)]


def build_sql_store(db_path, rows=None) -> SqlAlchemyTransactionStore:
    engine = create_db_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, autoflush=False)
    with factory() as session:
        session.add_all(make_transactions(rows))
        session.commit()
    return SqlAlchemyTransactionStore(factory)


@pytest.fixture
def memory_store():
    return InMemoryTransactionStore(make_transactions())


@pytest.fixture
def sql_store(tmp_path):
    return build_sql_store(tmp_path / "transactions.db")


@pytest.fixture(params=["memory", "sql"])
def store(request):
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture
def query_engine(store):
    return TransactionQueryEngine(store, use_facet_cache=False)


@pytest.fixture
def client(memory_store):
    app.dependency_overrides[get_transaction_store] = lambda: memory_store
    yield TestClient(app)
    app.dependency_overrides.clear()


def ids(records) -> list[int]:
    """Transaction ids of ORM records or serialized TransactionResponse models."""
    return [record.transaction_id for record in records]
