from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Optional

from .assistant import ShoppingAssistant
from .catalog_store import CatalogStore
from .llm_client import QueryBudget, ReasoningClient
from .pipeline_types import Mode
from .ranking import format_table


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="budgeteer", description="Search the catalog and build shopping lists.")
    ap.add_argument("--catalog", type=Path, default=None,
                    help="Catalog CSV (defaults to BUDGETEER_CATALOG_PATH or data/catalog.csv)")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("search", help="Fuzzy catalog search")
    p.add_argument("term")
    p.add_argument("--cheapest-first", action="store_true", help="Sort results by price")

    p = sub.add_parser("stats", help="Price statistics for a product id")
    p.add_argument("item_id", type=int)

    p = sub.add_parser("query", help="Natural-language query")
    p.add_argument("text")
    p.add_argument("--mode", choices=[m.value for m in Mode], default=None,
                   help="Defaults to budget_insight for budget questions, else cheapest_mix")
    p.add_argument("--local-only", action="store_true", help="Never call the remote reasoning service")

    p = sub.add_parser("list", help="Build a refined shopping list")
    p.add_argument("request")
    p.add_argument("--local-only", action="store_true")

    return ap


def _assistant(store: CatalogStore, local_only: bool) -> ShoppingAssistant:
    reasoner = ReasoningClient(api_key="" if local_only else None, budget=QueryBudget())
    return ShoppingAssistant(store, reasoner)


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    store = CatalogStore.from_csv(args.catalog)

    if args.command == "search":
        items = store.compare_prices(args.term) if args.cheapest_first else store.search(args.term)
        print(format_table(items))
    elif args.command == "stats":
        if not store.find_by_id(args.item_id):
            print(f"Item {args.item_id} not found")
            return 1
        print(f"Average price: ${store.average_price(args.item_id):.2f}")
        print(f"Min price:     ${store.min_price(args.item_id):.2f}")
        print(f"Max price:     ${store.max_price(args.item_id):.2f}")
    elif args.command == "query":
        print(_assistant(store, args.local_only).resolve_query(args.text, Mode(args.mode) if args.mode else None))
    elif args.command == "list":
        assistant = _assistant(store, args.local_only)
        items = assistant.build_shopping_list(args.request)
        print(format_table(items))
        print(assistant.insight(items))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
