#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from backoffice.core.config import VALID_PRODUCT_KEYS  # noqa: E402
from backoffice.core.database import Base, SessionLocal, engine  # noqa: E402
import backoffice.models  # noqa: E402,F401
from backoffice.services.product_keys import ProductKeyLedger  # noqa: E402

DEFAULT_KEYS = {
    "RPK-2024-ADMIN-001": "starter",
    "RPK-2024-ADMIN-002": "professional",
    "RPK-2024-ADMIN-003": "enterprise",
    "RPK-2024-ADMIN-004": "starter",
    "RPK-2024-ADMIN-005": "professional",
    "RPK-2024-DEMO-001": "starter",
    "RPK-2024-DEMO-002": "professional",
    "RPK-2024-DEMO-003": "enterprise",
}


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Pré-carrega chaves de produto com seus planos.")
    parser.add_argument(
        "--key",
        action="append",
        metavar="CHAVE=PLANO",
        help="Chave extra no formato CHAVE=PLANO (pode repetir)",
    )
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Cria as tabelas antes (apenas para SQLite local)",
    )
    return parser.parse_args()


def _parse_entries(raw_entries: list[str] | None) -> dict[str, str]:
    entries = dict(DEFAULT_KEYS)
    for raw in raw_entries or []:
        key, sep, plan = raw.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"Entrada inválida: {raw!r} (use CHAVE=PLANO)")
        entries[key.strip()] = plan.strip().lower()
    return entries


def main() -> int:
    args = parse_args()

    try:
        entries = _parse_entries(args.key)
    except ValueError as exc:
        print(str(exc))
        return 1

    if args.create_tables:
        Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        created = ProductKeyLedger(db, VALID_PRODUCT_KEYS).seed(entries)
        db.commit()
    except ValueError as exc:
        db.rollback()
        print(str(exc))
        return 1
    finally:
        db.close()

    print(f"Chaves criadas: {len(created)} | ignoradas (já existentes): {len(entries) - len(created)}")
    missing = sorted(key for key in entries if key not in VALID_PRODUCT_KEYS)
    if missing:
        print("Aviso: fora de VALID_PRODUCT_KEYS (não poderão ser usadas): " + ", ".join(missing))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
