#!/usr/bin/env python3
"""
Seed the catalog from a JSON file, or from a few built-in sample outfits.
Entries may use the storefront's camelCase keys (itemId, oldPrice, inStock)
or snake_case; images may be bare filenames or {"url", "variantId"} objects.

Usage:
    python scripts/seed_products.py --file catalog.json
    python scripts/seed_products.py --samples
"""
import argparse
import json
import os
import sys

# allow running from repo/scripts
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from app.db import SessionLocal, init_db
from app.repositories.product_repo import ProductRepository
from app.services.catalog_service import parse_csv, parse_price

SAMPLE_PRODUCTS = [
    {
        "itemId": "G-101",
        "name_en": "Floral Summer Dress",
        "name_ar": "فستان صيفي مزهر",
        "category": "girls",
        "price": 80,
        "oldPrice": 100,
        "sizes": ["2Y", "3Y", "4Y"],
        "colors": ["Pink", "Yellow"],
        "images": [{"url": "dress-pink.jpg", "variantId": "P1"}, {"url": "dress-yellow.jpg", "variantId": "Y1"}],
    },
    {
        "itemId": "B-205",
        "name_en": "Denim Overalls",
        "name_ar": "أفرول جينز",
        "category": "boys",
        "price": 65,
        "sizes": ["3Y", "5Y"],
        "colors": [],
        "images": ["overalls.jpg"],
    },
    {
        "itemId": "N-010",
        "name_en": "Cotton Onesie Set",
        "name_ar": "طقم أفرهول قطن",
        "category": "newborn",
        "price": 45,
        "sizes": ["0-3M", "3-6M"],
        "colors": [],
        "images": [],
    },
]


def _list(value):
    if isinstance(value, str):
        return parse_csv(value)
    return [str(v).strip() for v in (value or []) if str(v).strip()]


def _normalize_entry(entry):
    """Map one source entry onto ProductRepository.create keyword arguments."""
    in_stock = entry.get("inStock", entry.get("in_stock", True))
    return {
        "item_id": entry.get("itemId") or entry.get("item_id"),
        "name": entry.get("name"),
        "name_en": entry.get("name_en"),
        "name_ar": entry.get("name_ar"),
        "description": entry.get("description"),
        "description_en": entry.get("description_en"),
        "description_ar": entry.get("description_ar"),
        "category": entry.get("category") or "all",
        "price": parse_price(entry.get("price")) or 0,
        "old_price": parse_price(entry.get("oldPrice", entry.get("old_price")), "old_price"),
        "sizes": _list(entry.get("sizes")),
        "colors": _list(entry.get("colors")),
        "images": list(entry.get("images") or []),
        "in_stock": in_stock is True or str(in_stock).lower() == "true",
    }


def load_entries(path: str):
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        return data.get("items", list(data.values()))
    return data


def seed(entries):
    init_db()
    db = SessionLocal()
    repo = ProductRepository(db)
    created = 0
    try:
        for entry in entries:
            fields = _normalize_entry(entry)
            if not (fields["name_en"] or fields["name_ar"] or fields["name"]):
                continue
            repo.create(**fields)
            created += 1
        db.commit()
        print("Seeded products:", created)
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
    return created


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--file", "-f", help="Path to a JSON list of products")
    parser.add_argument("--samples", action="store_true", help="Seed the built-in sample outfits")
    args = parser.parse_args()
    if args.file:
        if not os.path.exists(args.file):
            print("File not found:", args.file)
            sys.exit(1)
        seed(load_entries(args.file))
    elif args.samples:
        seed(SAMPLE_PRODUCTS)
    else:
        parser.print_help()
