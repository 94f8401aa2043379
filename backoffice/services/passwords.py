from __future__ import annotations

import bcrypt

BCRYPT_ROUNDS = 12
BCRYPT_MAX_BYTES = 72


# =========================
# PASSWORD (bcrypt direto, sem passlib)
# - passlib quebra com bcrypt 5.x
# - bcrypt só considera 72 bytes; acima disso truncamos em vez de levantar erro
# =========================
def _normalize_password_for_bcrypt(password: str) -> bytes:
    pw = (password or "").encode("utf-8")
    if len(pw) <= BCRYPT_MAX_BYTES:
        return pw
    return pw[:BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(_normalize_password_for_bcrypt(password), salt).decode("utf-8")


def verify_password(plain_password: str, password_hash: str | None) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(
            _normalize_password_for_bcrypt(plain_password),
            password_hash.encode("utf-8"),
        )
    except ValueError:
        # hash em formato inválido (ex.: registro legado corrompido)
        return False
