from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

from jose import JWTError, jwt

from backoffice.core.config import JWT_ALGORITHM, JWT_EXPIRE_MINUTES, JWT_SECRET_KEY
from backoffice.core.errors import TokenInvalid


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """Emite e valida o JWT de sessão (stateless, sem revogação no servidor).

    - "sub" precisa ser STRING (senão o jose reclama 'Subject must be a string')
    - "user_id" vai junto por compatibilidade com clientes antigos
    """

    def __init__(
        self,
        secret: str,
        *,
        algorithm: str = "HS256",
        expire_minutes: int = 60,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.secret = secret
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes
        self._clock = clock

    def _require_secret(self) -> str:
        if not self.secret:
            raise RuntimeError("JWT_SECRET_KEY não configurado.")
        return self.secret

    def issue(self, user_id: int, *, expires_minutes: Optional[int] = None) -> str:
        now = self._clock()
        minutes = self.expire_minutes if expires_minutes is None else expires_minutes
        exp = now + timedelta(minutes=minutes)

        payload: Dict[str, Any] = {
            "sub": str(user_id),
            "user_id": str(user_id),
            "iat": int(now.timestamp()),
            "exp": int(exp.timestamp()),
        }
        return jwt.encode(payload, self._require_secret(), algorithm=self.algorithm)

    def verify(self, token: Optional[str]) -> int:
        """Retorna o id do usuário do token ou levanta TokenInvalid."""
        if not token:
            raise TokenInvalid()
        secret = self._require_secret()
        try:
            payload = jwt.decode(token, secret, algorithms=[self.algorithm])
        except JWTError as exc:
            raise TokenInvalid() from exc

        user_id = _extract_user_id(payload)
        if user_id is None:
            raise TokenInvalid("Token inválido (sem user_id)")
        return user_id


def _extract_user_id(payload: Dict[str, Any]) -> Optional[int]:
    raw = payload.get("sub")
    if raw is None:
        raw = payload.get("user_id")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str) and raw.strip().isdigit():
        return int(raw.strip())
    return None


def get_token_service() -> TokenService:
    return TokenService(
        JWT_SECRET_KEY,
        algorithm=JWT_ALGORITHM,
        expire_minutes=JWT_EXPIRE_MINUTES,
    )
