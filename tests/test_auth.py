"""
Auth Tests - Session gate, login por link mágico e guardas de rota
"""
from types import SimpleNamespace

import pytest
from jose import jwt
from pydantic import ValidationError

from patota.auth.models import AuthEvent, LoginRequest, OtpVerifyRequest
from patota.auth.session import AdminCapability, SessionContext, SessionGate


def make_session(member_id, token, email=None):
    return SimpleNamespace(access_token=token, user=SimpleNamespace(id=member_id, email=email))


class TestAuthModels:
    """Modelos de login"""

    def test_login_email_lowercased(self):
        assert LoginRequest(email="ANA@Patota.com").email == "ana@patota.com"

    def test_login_invalid_email(self):
        with pytest.raises(ValidationError):
            LoginRequest(email="nao-e-email")

    def test_otp_token_length(self):
        with pytest.raises(ValidationError):
            OtpVerifyRequest(email="ana@patota.com", token="123")


class TestAdminCapability:
    """Consulta na tabela admins"""

    def test_admin_row_present(self, fake_supabase):
        assert AdminCapability(fake_supabase).check("m-adm") is True

    def test_admin_row_absent(self, fake_supabase):
        assert AdminCapability(fake_supabase).check("m-ana") is False

    def test_query_failure_is_not_admin(self, fake_supabase):
        fake_supabase.fail("table", "admins", "connection reset")
        assert AdminCapability(fake_supabase).check("m-adm") is False


class TestSessionGate:
    """Ciclo de vida e resolução de sessão"""

    def test_start_and_stop_subscription(self, fake_supabase):
        gate = SessionGate(fake_supabase)
        assert not gate.started

        gate.start()
        assert gate.started
        assert len(fake_supabase.auth.listeners) == 1

        gate.start()  # idempotente
        assert len(fake_supabase.auth.listeners) == 1

        gate.stop()
        assert not gate.started
        assert fake_supabase.auth.listeners == []

    def test_resolve_without_token(self, fake_supabase):
        context = SessionGate(fake_supabase).resolve(None)
        assert isinstance(context, SessionContext)
        assert not context.is_authenticated
        assert context.is_admin is False

    def test_resolve_member(self, fake_supabase, make_token):
        context = SessionGate(fake_supabase).resolve(make_token("m-ana", "ana@patota.com"))
        assert context.is_authenticated
        assert context.member_id == "m-ana"
        assert context.email == "ana@patota.com"
        assert context.is_admin is False

    def test_resolve_admin(self, fake_supabase, make_token):
        context = SessionGate(fake_supabase).resolve(make_token("m-adm"))
        assert context.is_admin is True

    def test_expired_token_is_anonymous(self, fake_supabase, make_token):
        context = SessionGate(fake_supabase).resolve(make_token("m-ana", expires_in=-60))
        assert not context.is_authenticated

    def test_wrong_secret_is_anonymous(self, fake_supabase):
        token = jwt.encode({"sub": "m-ana", "aud": "authenticated"}, "outro-segredo", algorithm="HS256")
        assert not SessionGate(fake_supabase).resolve(token).is_authenticated

    def test_admin_flag_cached_per_token(self, fake_supabase, make_token):
        gate = SessionGate(fake_supabase)
        token = make_token("m-adm")

        gate.resolve(token)
        gate.resolve(token)

        admin_queries = [c for c in fake_supabase.calls if c[:2] == ("table", "admins")]
        assert len(admin_queries) == 1

    def test_auth_event_revalidates_admin(self, fake_supabase, make_token):
        """Notificação de auth reconsulta a tabela admins"""
        gate = SessionGate(fake_supabase)
        gate.start()
        token = make_token("m-ana")
        assert gate.resolve(token).is_admin is False

        fake_supabase.seed("admins", {"member_id": "m-ana"})
        assert gate.resolve(token).is_admin is False  # ainda em cache

        fake_supabase.auth.emit(AuthEvent.TOKEN_REFRESHED, make_session("m-ana", token))
        assert gate.resolve(token).is_admin is True
        gate.stop()

    def test_signed_out_drops_member(self, fake_supabase, make_token):
        gate = SessionGate(fake_supabase)
        gate.start()
        token = make_token("m-adm")
        gate.resolve(token)

        fake_supabase.auth.emit(AuthEvent.SIGNED_OUT, make_session("m-adm", token))
        assert "m-adm" not in gate._admin_cache
        gate.stop()

    def test_signed_out_without_session_clears_cache(self, fake_supabase, make_token):
        gate = SessionGate(fake_supabase)
        gate.resolve(make_token("m-ana"))
        gate.resolve(make_token("m-adm"))

        gate.handle_auth_event(AuthEvent.SIGNED_OUT, None)
        assert gate._admin_cache == {}

    def test_forget_token(self, fake_supabase, make_token):
        gate = SessionGate(fake_supabase)
        token = make_token("m-ana")
        gate.resolve(token)
        gate.forget(token)
        assert "m-ana" not in gate._admin_cache

    def test_refreshed_tokens_replace_cache_entry(self, fake_supabase, make_token):
        """Um membro ocupa no máximo uma entrada, por mais tokens que use"""
        gate = SessionGate(fake_supabase)
        tokens = [make_token("m-ana", expires_in=3600 + i) for i in range(50)]
        for token in tokens:
            assert gate.resolve(token).is_authenticated

        assert len(gate._admin_cache) == 1
        assert gate._admin_cache["m-ana"] == (tokens[-1], False)

    def test_refresh_event_replaces_old_token(self, fake_supabase, make_token):
        gate = SessionGate(fake_supabase)
        gate.start()
        old, new = make_token("m-adm", expires_in=60), make_token("m-adm", expires_in=3600)
        gate.resolve(old)

        fake_supabase.auth.emit(AuthEvent.TOKEN_REFRESHED, make_session("m-adm", new))
        assert gate._admin_cache == {"m-adm": (new, True)}
        gate.stop()


class TestLoginRoutes:
    """Login sem senha"""

    def test_request_magic_link(self, client, fake_supabase):
        response = client.post("/login", json={"email": "ANA@patota.com"})
        assert response.status_code == 200
        assert response.json()["success"] is True

        sent = fake_supabase.auth.otp_requests[0]
        assert sent["email"] == "ana@patota.com"
        assert sent["options"]["email_redirect_to"] == "http://testserver/auth/confirm"

    def test_magic_link_failure_is_alert(self, client, fake_supabase):
        fake_supabase.fail("auth", "sign_in_with_otp", "Email rate limit exceeded")
        response = client.post("/login", json={"email": "ana@patota.com"})
        assert response.status_code == 400
        assert response.json()["detail"] == "Email rate limit exceeded"

    def test_login_page_anonymous(self, client):
        response = client.get("/login")
        assert response.status_code == 200

    def test_login_page_redirects_when_logged_in(self, client, auth_headers):
        response = client.get("/login", headers=auth_headers("m-ana"), follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == "/"

    def test_confirm_link_sets_cookie(self, client, fake_supabase, make_token):
        token = make_token("m-ana", "ana@patota.com")
        fake_supabase.auth.verify_session = make_session("m-ana", token, "ana@patota.com")

        response = client.get("/auth/confirm?token_hash=abc&type=email", follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == "/"
        assert response.cookies.get("access_token") == token

        me = client.get("/auth/me")
        assert me.status_code == 200
        assert me.json()["id"] == "m-ana"
        assert me.json()["is_admin"] is False

    def test_confirm_without_session(self, client):
        response = client.get("/auth/confirm?token_hash=abc", follow_redirects=False)
        assert response.status_code == 400
        assert response.json()["detail"] == "Link inválido ou expirado"

    def test_verify_code_reports_admin(self, client, fake_supabase, make_token):
        token = make_token("m-adm", "adm@patota.com")
        fake_supabase.auth.verify_session = make_session("m-adm", token, "adm@patota.com")

        response = client.post("/auth/verify", json={"email": "adm@patota.com", "token": "123456"})
        assert response.status_code == 200
        assert response.json()["is_admin"] is True
        assert response.cookies.get("access_token") == token

    def test_logout_clears_cookie(self, client, auth_headers):
        response = client.post("/logout", headers=auth_headers("m-ana"), follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == "/login"
        assert "access_token" in response.headers.get("set-cookie", "")


class TestRouteGuards:
    """Sem sessão vai para /login; sem admin volta para /"""

    @pytest.mark.parametrize("path", ["/", "/eventos", "/financeiro", "/ranking", "/regras", "/auth/me"])
    def test_member_pages_require_login(self, client, path):
        response = client.get(path, follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == "/login"

    @pytest.mark.parametrize("path", ["/admin", "/admin/caixa", "/admin/membros"])
    def test_admin_pages_redirect_members(self, client, auth_headers, path):
        response = client.get(path, headers=auth_headers("m-ana"), follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == "/"

    def test_admin_page_anonymous_goes_to_login(self, client):
        response = client.get("/admin", follow_redirects=False)
        assert response.headers["location"] == "/login"

    def test_admin_page_for_admin(self, client, auth_headers):
        response = client.get("/admin", headers=auth_headers("m-adm"))
        assert response.status_code == 200
