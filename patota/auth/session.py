"""
Session Gate - Contexto de sessão da aplicação

Ciclo de vida explícito:
- start(): assina as notificações de auth do Supabase
- resolve(): token -> SessionContext (autenticado? admin?)
- handle_auth_event(): a cada notificação revalida a capacidade de admin
- stop(): cancela a assinatura
"""
import threading
from typing import Any, Dict, Optional, Tuple

from jose import JWTError, jwt
from loguru import logger

from ..config import PatotaSettings, get_settings
from ..database import execute, rows
from ..errors import BackendError
from .models import AuthEvent, SessionUser


class SessionContext:
    """Sessão resolvida para uma requisição"""

    def __init__(
        self,
        member_id: Optional[str] = None,
        email: Optional[str] = None,
        is_admin: bool = False,
        access_token: Optional[str] = None
    ):
        self.member_id = member_id
        self.email = email
        self.is_admin = is_admin
        self.access_token = access_token

    @property
    def is_authenticated(self) -> bool:
        return self.member_id is not None

    @classmethod
    def anonymous(cls) -> "SessionContext":
        return cls()

    def __repr__(self) -> str:
        return f"SessionContext(member_id={self.member_id!r}, is_admin={self.is_admin})"


class AdminCapability:
    """Consulta de autorização: existe linha em admins para o membro?"""

    def __init__(self, supabase):
        self.supabase = supabase

    def check(self, member_id: str) -> bool:
        """Ausência de linha = não é admin (nunca erro)"""
        try:
            response = execute(
                self.supabase.table("admins").select("member_id").eq(
                    "member_id", member_id
                ).limit(1),
                "consulta de admin",
            )
        except BackendError as e:
            logger.warning(f"Consulta de admin para {member_id} falhou, tratando como não-admin: {e.message}")
            return False
        return len(rows(response)) > 0


class SessionGate:
    """Porteiro de sessão: identidade + flag de admin"""

    def __init__(self, supabase, settings: Optional[PatotaSettings] = None):
        self.supabase = supabase
        self.settings = settings or get_settings()
        self.admin_capability = AdminCapability(supabase)
        # member_id -> (access_token, is_admin); token novo substitui o anterior
        self._admin_cache: Dict[str, Tuple[str, bool]] = {}
        self._lock = threading.Lock()
        self._subscription = None

    # =============================================
    # Ciclo de vida
    # =============================================

    @property
    def started(self) -> bool:
        return self._subscription is not None

    def start(self) -> None:
        if self._subscription is not None:
            return
        self._subscription = self.supabase.auth.on_auth_state_change(self.handle_auth_event)
        logger.info("Session gate iniciado")

    def stop(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        with self._lock:
            self._admin_cache.clear()
        logger.info("Session gate encerrado")

    # =============================================
    # Notificações de auth
    # =============================================

    def handle_auth_event(self, event: str, session: Any) -> None:
        """Revalida o admin a cada mudança de sessão"""
        user = getattr(session, "user", None) if session is not None else None
        if user is None:
            if event == AuthEvent.SIGNED_OUT:
                with self._lock:
                    self._admin_cache.clear()
            return

        member_id = str(user.id)
        if event == AuthEvent.SIGNED_OUT:
            self._drop_member(member_id)
            return

        is_admin = self.admin_capability.check(member_id)
        token = getattr(session, "access_token", None)
        with self._lock:
            if token:
                self._admin_cache[member_id] = (token, is_admin)
            else:
                self._admin_cache.pop(member_id, None)
        logger.debug(f"Auth {event}: {member_id} admin={is_admin}")

    def forget(self, access_token: Optional[str]) -> None:
        """Logout: descarta o cache do token"""
        if not access_token:
            return
        with self._lock:
            stale = [mid for mid, (token, _) in self._admin_cache.items() if token == access_token]
            for member_id in stale:
                del self._admin_cache[member_id]

    def _drop_member(self, member_id: str) -> None:
        with self._lock:
            self._admin_cache.pop(member_id, None)

    # =============================================
    # Resolução por requisição
    # =============================================

    def authenticate(self, access_token: Optional[str]) -> Optional[SessionUser]:
        """Valida o token de acesso; None se ausente/inválido"""
        if not access_token:
            return None

        if self.settings.SUPABASE_JWT_SECRET:
            try:
                payload = jwt.decode(
                    access_token,
                    self.settings.SUPABASE_JWT_SECRET,
                    algorithms=[self.settings.JWT_ALGORITHM],
                    audience=self.settings.JWT_AUDIENCE,
                )
            except JWTError:
                return None
            sub = payload.get("sub")
            if not sub:
                return None
            return SessionUser(id=str(sub), email=payload.get("email"))

        try:
            response = self.supabase.auth.get_user(access_token)
        except Exception as e:
            logger.warning(f"Token rejeitado pelo Supabase Auth: {e}")
            return None

        user = getattr(response, "user", None) if response else None
        if not user:
            return None
        return SessionUser(id=str(user.id), email=getattr(user, "email", None))

    def is_admin(self, member_id: str, access_token: str) -> bool:
        with self._lock:
            cached = self._admin_cache.get(member_id)
        if cached and cached[0] == access_token:
            return cached[1]

        is_admin = self.admin_capability.check(member_id)
        with self._lock:
            self._admin_cache[member_id] = (access_token, is_admin)
        return is_admin

    def resolve(self, access_token: Optional[str]) -> SessionContext:
        user = self.authenticate(access_token)
        if user is None:
            return SessionContext.anonymous()
        return SessionContext(
            member_id=user.id,
            email=user.email,
            is_admin=self.is_admin(user.id, access_token),
            access_token=access_token,
        )
