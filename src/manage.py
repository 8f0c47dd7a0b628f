"""Storefront management CLI.

Usage:
    python src/manage.py setup-db      # Create tables for SQL providers
    python src/manage.py drop-db       # Drop them
    python src/manage.py seed          # Load a small demo catalog and promo codes
    python src/manage.py purge-carts   # Delete carts past their expiry
"""

import argparse
import json
import sys
from datetime import UTC, datetime, timedelta

_DEMO_PRODUCTS = [
    {
        "name": "Trail Runner",
        "description": "Lightweight trail running shoe with a grippy outsole",
        "category": "Footwear",
        "brand": "Northpeak",
        "images": ["https://cdn.example.com/products/trail-runner.jpg"],
        "tags": ["running", "outdoor"],
        "variants": [
            {"name": "42 / Blue", "sku": "TR-42-BLU", "price": 89.9, "stock": 25, "attributes": {"size": "42"}},
            {"name": "44 / Black", "sku": "TR-44-BLK", "price": 89.9, "stock": 10, "attributes": {"size": "44"}},
        ],
    },
    {
        "name": "Merino Crew",
        "description": "Soft merino wool crew neck sweater",
        "category": "Apparel",
        "brand": "Fjellwear",
        "images": ["https://cdn.example.com/products/merino-crew.jpg"],
        "tags": ["wool", "winter"],
        "variants": [
            {"name": "M / Grey", "sku": "MC-M-GRY", "price": 120.0, "stock": 15, "attributes": {"size": "M"}},
            {"name": "L / Navy", "sku": "MC-L-NVY", "price": 120.0, "stock": 8, "attributes": {"size": "L"}},
        ],
    },
]

_DEMO_PROMOS = [
    {"code": "WELCOME10", "discount_type": "percentage", "value": 10, "max_discount": 25},
    {"code": "FLAT15", "discount_type": "fixed", "value": 15, "min_order_amount": 50, "max_uses": 100},
]


def setup_database():
    from storefront.domain import storefront
    from storefront.utils.db import setup_db

    storefront.init()
    print("Creating storefront database schema...")
    touched = setup_db(storefront)
    print(f"  Schema ready for providers: {', '.join(touched) or '(none, in-memory)'}")


def drop_database():
    from storefront.domain import storefront
    from storefront.utils.db import drop_db

    storefront.init()
    print("Dropping storefront database schema...")
    touched = drop_db(storefront)
    print(f"  Schema dropped for providers: {', '.join(touched) or '(none, in-memory)'}")


def seed():
    from storefront.catalog.management import CreateProduct
    from storefront.domain import storefront
    from storefront.promotion.management import CreatePromoCode

    storefront.init()
    now = datetime.now(UTC)
    with storefront.domain_context():
        for product in _DEMO_PRODUCTS:
            command = CreateProduct(
                **{k: v for k, v in product.items() if k not in ("images", "tags", "variants")},
                images=json.dumps(product["images"]),
                tags=json.dumps(product["tags"]),
                variants=json.dumps(product["variants"]),
            )
            product_id = storefront.process(command, asynchronous=False)
            print(f"  Product {product['name']}: {product_id}")

        for promo in _DEMO_PROMOS:
            storefront.process(
                CreatePromoCode(**promo, valid_from=now, valid_to=now + timedelta(days=90)),
                asynchronous=False,
            )
            print(f"  Promo code {promo['code']}")
    print("Done.")


def purge_carts():
    from storefront.cart.management import PurgeExpiredCarts
    from storefront.domain import storefront

    storefront.init()
    with storefront.domain_context():
        purged = storefront.process(PurgeExpiredCarts(), asynchronous=False)
    print(f"Purged {purged} expired cart(s).")


def main():
    parser = argparse.ArgumentParser(description="Storefront management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    subparsers.add_parser("seed", help="Load a demo catalog and promo codes")
    subparsers.add_parser("purge-carts", help="Delete expired carts")

    args = parser.parse_args()

    commands = {
        "setup-db": setup_database,
        "drop-db": drop_database,
        "seed": seed,
        "purge-carts": purge_carts,
    }
    handler = commands.get(args.command)
    if handler is None:
        parser.print_help()
        sys.exit(1)
    handler()


if __name__ == "__main__":
    main()
