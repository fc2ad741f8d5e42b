"""
Database Seed Script.

Loads the transaction dataset on first startup:
1. CSV import   – when SEED_CSV_PATH is set, rows are parsed and inserted
                  in batches, capped at SEED_MAX_RECORDS, duplicate
                  Transaction IDs skipped
2. Demo dataset – otherwise, SEED_DEMO_RECORDS deterministic transactions
                  are generated so the API has something to browse
"""

import csv
import random
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Optional

from sqlalchemy import insert
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.redis import cache_delete
from app.models.transaction import Transaction
from app.services.facet_resolver import FACET_CACHE_KEY

logger = logging.getLogger(__name__)
settings = get_settings()

REGIONS = ["North", "South", "East", "West", "Central"]
GENDERS = ["Male", "Female"]
CUSTOMER_TYPES = ["New", "Returning", "Loyal"]
PAYMENT_METHODS = ["Credit Card", "Debit Card", "UPI", "Cash", "Wallet", "Net Banking"]
ORDER_STATUSES = ["Completed", "Pending", "Cancelled", "Returned"]
DELIVERY_TYPES = ["Standard", "Express", "Store Pickup"]

# Category -> (brands, products, tags)
CATALOG = {
    "Electronics": (
        ["Samsung", "Apple", "Sony", "boAt"],
        ["Wireless Earbuds", "Smartphone", "Bluetooth Speaker", "Smartwatch"],
        ["gadgets", "wireless", "portable", "smart"],
    ),
    "Clothing": (
        ["Levi's", "Zara", "H&M", "Puma"],
        ["Denim Jacket", "Cotton T-Shirt", "Running Shorts", "Hoodie"],
        ["casual", "cotton", "fashion", "sports"],
    ),
    "Beauty": (
        ["Lakme", "Nivea", "Mamaearth", "Biotique"],
        ["Face Wash", "Moisturizer", "Lipstick", "Sunscreen"],
        ["organic", "skincare", "makeup", "fragrance-free"],
    ),
    "Home": (
        ["IKEA", "Prestige", "Milton", "Philips"],
        ["Table Lamp", "Pressure Cooker", "Water Bottle", "Cushion Cover"],
        ["kitchen", "decor", "eco-friendly", "durable"],
    ),
    "Sports": (
        ["Nike", "Adidas", "Yonex", "Decathlon"],
        ["Yoga Mat", "Badminton Racket", "Football", "Dumbbell Set"],
        ["fitness", "outdoor", "training", "durable"],
    ),
}

FIRST_NAMES = ["Aarav", "Diya", "Kabir", "Meera", "Rohan", "Ananya", "Vihaan", "Isha", "Arjun", "Saanvi"]
LAST_NAMES = ["Sharma", "Patel", "Reddy", "Iyer", "Gupta", "Khan", "Nair", "Singh", "Das", "Mehta"]


# ─── CSV import ─────────────────────────────────────────────────

def _parse_int(value: Any, default: Optional[int] = 0) -> Optional[int]:
    try:
        return int(float(str(value).strip()))
    except (TypeError, ValueError):
        return default


def _parse_float(value: Any, default: float = 0.0) -> float:
    try:
        return float(str(value).strip())
    except (TypeError, ValueError):
        return default


def _parse_date(value: Any, fallback: datetime) -> datetime:
    text = str(value or "").strip()
    if not text:
        return fallback
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        logger.warning(f"Unparsable date {text!r}, using load time")
        return fallback
    # Stored dates are naive UTC, like the query bounds they are compared with
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _text(value: Any) -> Optional[str]:
    text = str(value).strip() if value is not None else ""
    return text or None


def transform_row(row: dict[str, str], loaded_at: datetime) -> Optional[dict[str, Any]]:
    """Map one dataset CSV row onto Transaction attributes. Rows without an ID are dropped."""
    transaction_id = _parse_int(row.get("Transaction ID"), default=None)
    if transaction_id is None:
        return None

    return {
        "transaction_id": transaction_id,
        "date": _parse_date(row.get("Date"), loaded_at),
        "customer_id": _text(row.get("Customer ID")) or "",
        "customer_name": _text(row.get("Customer Name")) or "",
        "phone_number": _text(row.get("Phone Number")),
        "gender": _text(row.get("Gender")),
        "age": _parse_int(row.get("Age"), default=None),
        "customer_region": _text(row.get("Customer Region")) or "",
        "customer_type": _text(row.get("Customer Type")),
        "product_id": _text(row.get("Product ID")) or "",
        "product_name": _text(row.get("Product Name")) or "",
        "brand": _text(row.get("Brand")),
        "product_category": _text(row.get("Product Category")) or "",
        "tags": _text(row.get("Tags")),
        "quantity": _parse_int(row.get("Quantity")),
        "price_per_unit": _parse_float(row.get("Price per Unit")),
        "discount_percentage": _parse_float(row.get("Discount Percentage")),
        "total_amount": _parse_float(row.get("Total Amount")),
        "final_amount": _parse_float(row.get("Final Amount")),
        "payment_method": _text(row.get("Payment Method")) or "",
        "order_status": _text(row.get("Order Status")) or "",
        "delivery_type": _text(row.get("Delivery Type")),
        "store_id": _text(row.get("Store ID")),
        "store_location": _text(row.get("Store Location")),
        "salesperson_id": _text(row.get("Salesperson ID")),
        "employee_name": _text(row.get("Employee Name")),
    }


def _insert_batch(db: Session, batch: list[dict[str, Any]], batch_number: int) -> int:
    db.execute(insert(Transaction), batch)
    db.commit()
    logger.info(f"Batch {batch_number}: inserted {len(batch)} records")
    return len(batch)


def import_csv(
    db: Session,
    path: str | Path,
    batch_size: int = 5000,
    max_records: Optional[int] = None,
) -> int:
    """
    Stream a dataset CSV into the transactions table in batches.
    Returns the number of inserted records.
    """
    csv_path = Path(path)
    if not csv_path.exists():
        raise FileNotFoundError(f"CSV file not found at: {csv_path}")

    loaded_at = datetime.now()
    seen_ids: set[int] = set()
    batch: list[dict[str, Any]] = []
    batch_number = 0
    inserted = 0
    skipped = 0

    with csv_path.open(newline="", encoding="utf-8") as f:
        for row in csv.DictReader(f):
            if max_records and len(seen_ids) >= max_records:
                logger.info(f"Record cap of {max_records} reached")
                break

            record = transform_row(row, loaded_at)
            if record is None or record["transaction_id"] in seen_ids:
                skipped += 1
                continue
            seen_ids.add(record["transaction_id"])
            batch.append(record)

            if len(batch) >= batch_size:
                batch_number += 1
                inserted += _insert_batch(db, batch, batch_number)
                batch = []

    if batch:
        batch_number += 1
        inserted += _insert_batch(db, batch, batch_number)

    logger.info(f"Imported {inserted} transactions from {csv_path} ({skipped} rows skipped)")
    return inserted


# ─── Demo data ──────────────────────────────────────────────────

def generate_demo_transactions(count: int, seed: int = 42) -> list[dict[str, Any]]:
    """Deterministic synthetic transactions for local development."""
    rng = random.Random(seed)
    start = datetime(2023, 1, 1)
    records = []

    for i in range(count):
        category = rng.choice(list(CATALOG))
        brands, products, tag_pool = CATALOG[category]
        quantity = rng.randint(1, 5)
        price = round(rng.uniform(99, 4999), 2)
        discount = rng.choice([0, 5, 10, 15, 20, 25])
        total = round(quantity * price, 2)
        customer = rng.randrange(len(FIRST_NAMES) * len(LAST_NAMES))

        records.append({
            "transaction_id": i + 1,
            "date": start + timedelta(days=rng.uniform(0, 730)),
            "customer_id": f"CUST-{customer:04d}",
            "customer_name": f"{FIRST_NAMES[customer % 10]} {LAST_NAMES[customer // 10]}",
            "phone_number": f"9{rng.randint(100000000, 999999999)}",
            "gender": rng.choice(GENDERS),
            "age": rng.randint(18, 65),
            "customer_region": rng.choice(REGIONS),
            "customer_type": rng.choice(CUSTOMER_TYPES),
            "product_id": f"PROD-{rng.randint(1, 400):04d}",
            "product_name": rng.choice(products),
            "brand": rng.choice(brands),
            "product_category": category,
            "tags": ",".join(rng.sample(tag_pool, k=rng.randint(1, 3))),
            "quantity": quantity,
            "price_per_unit": price,
            "discount_percentage": float(discount),
            "total_amount": total,
            "final_amount": round(total * (100 - discount) / 100, 2),
            "payment_method": rng.choice(PAYMENT_METHODS),
            "order_status": rng.choice(ORDER_STATUSES),
            "delivery_type": rng.choice(DELIVERY_TYPES),
            "store_id": f"ST-{rng.randint(1, 20):03d}",
            "store_location": rng.choice(["Mumbai", "Delhi", "Bengaluru", "Chennai", "Kolkata"]),
            "salesperson_id": f"EMP-{rng.randint(1, 60):03d}",
            "employee_name": f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}",
        })
    return records


def seed_database(db: Session) -> None:
    """
    Loads the dataset on first startup.
    Skips seeding if transactions already exist.
    """
    existing = db.query(Transaction).count()
    if existing > 0:
        logger.info(f"Database already has {existing} transactions, skipping seed")
        return

    if settings.SEED_CSV_PATH:
        logger.info(f"Importing transactions from {settings.SEED_CSV_PATH}...")
        import_csv(
            db,
            settings.SEED_CSV_PATH,
            batch_size=settings.SEED_BATCH_SIZE,
            max_records=settings.SEED_MAX_RECORDS,
        )
        cache_delete(FACET_CACHE_KEY)
        return

    logger.info(f"Seeding database with {settings.SEED_DEMO_RECORDS} demo transactions...")
    records = generate_demo_transactions(settings.SEED_DEMO_RECORDS)
    for start in range(0, len(records), settings.SEED_BATCH_SIZE):
        db.execute(insert(Transaction), records[start:start + settings.SEED_BATCH_SIZE])
    db.commit()
    cache_delete(FACET_CACHE_KEY)
    logger.info("Database seeded successfully")
