"""Ledger de chaves de produto.

A validade é em dois níveis: pertencer à lista de chaves configurada
(``VALID_PRODUCT_KEYS``) e não ter sido resgatada ainda (tabela
``product_keys``). Uma chave pode estar na lista e mesmo assim esgotada.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backoffice.core.config import VALID_PRODUCT_KEYS
from backoffice.core.errors import KeyAlreadyUsed, KeyNotAllowed
from backoffice.models.product_key import ProductKey
from backoffice.models.restaurant import DEFAULT_PLAN, PLANS
from backoffice.models.user import utcnow

logger = logging.getLogger(__name__)
PRODUCT_KEY_PREFIX = "[PRODUCT_KEY]"


@dataclass(frozen=True)
class KeyAvailability:
    """Chave livre para resgate; indisponibilidade é sempre uma exceção."""

    key: str
    plan: str = DEFAULT_PLAN


def normalize_key(key: Optional[str]) -> str:
    return (key or "").strip().upper()


class ProductKeyLedger:
    def __init__(self, db: Session, allowed_keys: Iterable[str]) -> None:
        self.db = db
        self._allowed_keys = frozenset(key.strip() for key in allowed_keys if key and key.strip())

    def is_key_format_allowed(self, key: Optional[str]) -> bool:
        return (key or "").strip() in self._allowed_keys

    def find(self, key: Optional[str]) -> Optional[ProductKey]:
        return self.db.query(ProductKey).filter(ProductKey.key == normalize_key(key)).first()

    def check_availability(self, key: Optional[str]) -> KeyAvailability:
        if not self.is_key_format_allowed(key):
            logger.info("%s rejected: not in allow-list", PRODUCT_KEY_PREFIX)
            raise KeyNotAllowed()

        record = self.find(key)
        if record is not None and record.is_used:
            logger.info("%s rejected: already used key_id=%s", PRODUCT_KEY_PREFIX, record.id)
            raise KeyAlreadyUsed()

        plan = record.plan if record is not None else DEFAULT_PLAN
        return KeyAvailability(key=normalize_key(key), plan=plan)

    def redeem(self, key: Optional[str], user_id: int) -> ProductKey:
        """Marca a chave como usada por ``user_id``.

        Participa da transação de quem chama (faz flush, não commit). A marcação
        é um compare-and-set: só atualiza se ``is_used`` ainda for falso.
        """
        self.check_availability(key)
        normalized = normalize_key(key)
        now = utcnow()

        result = self.db.execute(
            update(ProductKey)
            .where(ProductKey.key == normalized, ProductKey.is_used.is_(False))
            .values(is_used=True, used_by_id=user_id, used_at=now, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 1:
            record = self.find(normalized)
            self.db.refresh(record)
            logger.info("%s redeemed key_id=%s user_id=%s", PRODUCT_KEY_PREFIX, record.id, user_id)
            return record

        if self.find(normalized) is not None:
            # outra requisição marcou a chave entre a checagem e o update
            raise KeyAlreadyUsed()

        # Sem registro pré-carregado: o índice único em ``key`` barra o insert concorrente.
        # Após IntegrityError a transação fica inválida e quem chama precisa dar rollback.
        record = ProductKey(key=normalized, is_used=True, used_by_id=user_id, used_at=now)
        self.db.add(record)
        try:
            self.db.flush()
        except IntegrityError as exc:
            raise KeyAlreadyUsed() from exc

        logger.info("%s redeemed unseeded key_id=%s user_id=%s", PRODUCT_KEY_PREFIX, record.id, user_id)
        return record

    def seed(self, entries: Mapping[str, str]) -> list[ProductKey]:
        """Cria registros pré-carregados (chave -> plano) ainda não existentes."""
        created: list[ProductKey] = []
        for raw_key, plan in entries.items():
            normalized = normalize_key(raw_key)
            if plan not in PLANS:
                raise ValueError(f"Plano inválido para {normalized}: {plan}")
            if self.find(normalized) is not None:
                continue
            record = ProductKey(key=normalized, plan=plan, is_used=False)
            self.db.add(record)
            created.append(record)
        self.db.flush()
        return created


def get_default_allowed_keys() -> tuple[str, ...]:
    return VALID_PRODUCT_KEYS
