"""
Pytest configuration and fixtures for Patota CCC tests

FakeSupabase guarda as tabelas em memória e imita a superfície do cliente
usada pelos serviços (table/rpc/storage/auth).
"""
import copy
import sys
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from jose import jwt

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from patota.config import get_settings  # noqa: E402

JWT_SECRET = "test-jwt-secret"


class FakeAPIError(Exception):
    """Imita o APIError do postgrest (expõe .message)"""

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class FakeResponse:
    def __init__(self, data, count=None):
        self.data = data
        self.count = count


# =============================================
# Query builder
# =============================================

def _sort_key(col):
    return lambda r: (r.get(col) is None, r.get(col) if r.get(col) is not None else "")


class FakeQuery:
    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.op = "select"
        self.payload = None
        self.on_conflict = None
        self.filters = []
        self.orders = []
        self._limit = None

    # operações
    def select(self, *columns, **kwargs):
        self.op = "select"
        return self

    def insert(self, payload):
        self.op = "insert"
        self.payload = payload
        return self

    def update(self, payload):
        self.op = "update"
        self.payload = payload
        return self

    def upsert(self, payload, on_conflict=None, **kwargs):
        self.op = "upsert"
        self.payload = payload
        self.on_conflict = on_conflict
        return self

    # filtros
    def eq(self, col, value):
        self.filters.append(lambda r: r.get(col) == value)
        return self

    def in_(self, col, values):
        values = list(values)
        self.filters.append(lambda r: r.get(col) in values)
        return self

    def gte(self, col, value):
        self.filters.append(lambda r: r.get(col) is not None and r.get(col) >= value)
        return self

    def lt(self, col, value):
        self.filters.append(lambda r: r.get(col) is not None and r.get(col) < value)
        return self

    def order(self, col, desc=False):
        self.orders.append((col, desc))
        return self

    def limit(self, n):
        self._limit = n
        return self

    def _matching(self):
        return [r for r in self.db.tables.setdefault(self.table, []) if all(f(r) for f in self.filters)]

    def execute(self):
        self.db.calls.append(("table", self.table, self.op, copy.deepcopy(self.payload)))
        self.db.raise_if_failing("table", self.table, self.payload)

        if self.op == "select":
            result = self._matching()
            for col, desc in reversed(self.orders):
                result = sorted(result, key=_sort_key(col), reverse=desc)
            if self._limit is not None:
                result = result[:self._limit]
            return FakeResponse(copy.deepcopy(result))

        if self.op == "insert":
            payloads = self.payload if isinstance(self.payload, list) else [self.payload]
            inserted = [copy.deepcopy(self.db.insert(self.table, p)) for p in payloads]
            # RLS sem SELECT: grava mas não devolve a linha
            return FakeResponse([] if self.table in self.db.hidden_tables else inserted)

        if self.op == "update":
            updated = []
            for row in self._matching():
                row.update(self.payload)
                updated.append(copy.deepcopy(row))
            return FakeResponse(updated)

        if self.op == "upsert":
            keys = [k.strip() for k in (self.on_conflict or "id").split(",")]
            existing = next(
                (r for r in self.db.tables.setdefault(self.table, [])
                 if all(r.get(k) == self.payload.get(k) for k in keys)),
                None,
            )
            if existing is not None:
                existing.update(self.payload)
                return FakeResponse([copy.deepcopy(existing)])
            return FakeResponse([copy.deepcopy(self.db.insert(self.table, self.payload))])

        raise AssertionError(f"operação não suportada: {self.op}")


class FakeRpc:
    def __init__(self, db, name, params):
        self.db = db
        self.name = name
        self.params = params

    def execute(self):
        self.db.calls.append(("rpc", self.name, copy.deepcopy(self.params)))
        self.db.raise_if_failing("rpc", self.name, self.params)
        handler = self.db.rpc_handlers.get(self.name)
        if handler is None:
            raise FakeAPIError(f"function {self.name} does not exist")
        return FakeResponse(handler(self.params))


# =============================================
# Storage / Auth
# =============================================

class FakeBucket:
    def __init__(self, db, name):
        self.db = db
        self.name = name

    def upload(self, path, content, file_options=None):
        self.db.raise_if_failing("storage", "upload", {"path": path})
        self.db.uploads.append({"bucket": self.name, "path": path, "size": len(content), "options": file_options})
        return SimpleNamespace(path=path)

    def remove(self, paths):
        self.db.raise_if_failing("storage", "remove", {"paths": paths})
        self.db.uploads = [u for u in self.db.uploads if not (u["bucket"] == self.name and u["path"] in paths)]
        return [{"name": p} for p in paths]

    def get_public_url(self, path):
        return f"https://storage.test/{self.name}/{path}"


class FakeStorage:
    def __init__(self, db):
        self.db = db

    def from_(self, bucket):
        return FakeBucket(self.db, bucket)


class FakeSubscription:
    def __init__(self, auth, callback):
        self.auth = auth
        self.callback = callback

    def unsubscribe(self):
        if self.callback in self.auth.listeners:
            self.auth.listeners.remove(self.callback)


class FakeAuth:
    def __init__(self, db):
        self.db = db
        self.listeners = []
        self.otp_requests = []
        self.verify_session = None

    def on_auth_state_change(self, callback):
        self.listeners.append(callback)
        return FakeSubscription(self, callback)

    def emit(self, event, session):
        for callback in list(self.listeners):
            callback(event, session)

    def sign_in_with_otp(self, credentials):
        self.db.raise_if_failing("auth", "sign_in_with_otp", credentials)
        self.otp_requests.append(credentials)
        return SimpleNamespace(user=None, session=None)

    def verify_otp(self, params):
        self.db.raise_if_failing("auth", "verify_otp", params)
        return SimpleNamespace(user=getattr(self.verify_session, "user", None), session=self.verify_session)

    def get_user(self, token):
        raise FakeAPIError("invalid JWT")


# =============================================
# Banco em memória + RPCs
# =============================================

class FakeSupabase:
    def __init__(self):
        self.tables = {}
        self.calls = []
        self.uploads = []
        self.failures = []
        self.hidden_tables = set()
        self.storage = FakeStorage(self)
        self.auth = FakeAuth(self)
        self.rpc_handlers = {
            "marcar_presenca": self._marcar_presenca,
            "confirmar_pagamento": self._confirmar_pagamento,
            "adicionar_convidados": self._adicionar_convidados,
            "gerar_mensalidades_mes": self._gerar_mensalidades_mes,
        }

    def table(self, name):
        return FakeQuery(self, name)

    def rpc(self, name, params=None):
        return FakeRpc(self, name, params or {})

    # falhas injetadas
    def fail(self, kind, name, message="erro simulado", when=None):
        self.failures.append((kind, name, message, when))

    def raise_if_failing(self, kind, name, payload):
        for f_kind, f_name, message, when in self.failures:
            if f_kind == kind and f_name == name and (when is None or when(payload)):
                raise FakeAPIError(message)

    def rpc_calls(self, name):
        return [c[2] for c in self.calls if c[0] == "rpc" and c[1] == name]

    # dados
    def insert(self, table, payload):
        row = dict(payload)
        row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("criado_em", datetime.now(timezone.utc).isoformat())
        self.tables.setdefault(table, []).append(row)
        return row

    def seed(self, table, *records):
        return [self.insert(table, r) for r in records]

    def find(self, table, **match):
        return [r for r in self.tables.get(table, []) if all(r.get(k) == v for k, v in match.items())]

    def _marcar_presenca(self, p):
        existing = self.find("event_attendance", event_id=p["p_event_id"], member_id=p["p_member_id"])
        if existing:
            existing[0]["status"] = p["p_status"]
            existing[0]["marcado_por"] = p["p_admin_id"]
        else:
            self.insert("event_attendance", {
                "event_id": p["p_event_id"],
                "member_id": p["p_member_id"],
                "status": p["p_status"],
                "marcado_por": p["p_admin_id"],
            })
        if p["p_status"] == "ATRASO":
            self.insert("fines", {
                "member_id": p["p_member_id"],
                "event_id": p["p_event_id"],
                "tipo": "ATRASO",
                "valor": 5.0,
            })
        return None

    def _confirmar_pagamento(self, p):
        payment = self.find("payments", id=p["p_payment_id"])[0]
        payment["status"] = "CONFIRMADO"
        payment["confirmado_por"] = p["p_admin_id"]
        if payment.get("due_id"):
            for due in self.find("dues", id=payment["due_id"]):
                due["status"] = "PAGO"
        self.insert("cash_ledger", {
            "tipo": "ENTRADA",
            "categoria": "MULTA" if payment.get("fine_id") else "MENSALIDADE",
            "valor": payment["valor"],
            "data_lancamento": datetime.now(timezone.utc).date().isoformat(),
            "lancado_por": None,
        })
        return None

    def _adicionar_convidados(self, p):
        rsvp = self.find("event_rsvp", event_id=p["p_event_id"], member_id=p["p_member_id"])
        if rsvp:
            rsvp[0]["convidados"] = p["p_quantidade"]
        else:
            self.insert("event_rsvp", {
                "event_id": p["p_event_id"],
                "member_id": p["p_member_id"],
                "status": None,
                "convidados": p["p_quantidade"],
            })
        return None

    def _gerar_mensalidades_mes(self, p):
        created = 0
        for member in self.find("members", ativo=True):
            if self.find("dues", member_id=member["id"], competencia=p["p_competencia"]):
                continue
            self.insert("dues", {
                "member_id": member["id"],
                "competencia": p["p_competencia"],
                "valor": p["p_valor"],
                "vencimento": p["p_vencimento"],
                "status": "PENDENTE",
            })
            created += 1
        return created


# =============================================
# Fixtures
# =============================================

@pytest.fixture(autouse=True)
def settings_env(monkeypatch):
    """Ambiente de teste com segredo JWT (validação local do token)"""
    monkeypatch.setenv("SUPABASE_URL", "http://localhost:54321")
    monkeypatch.setenv("SUPABASE_KEY", "service-role-key")
    monkeypatch.setenv("SUPABASE_JWT_SECRET", JWT_SECRET)
    monkeypatch.setenv("SITE_URL", "http://testserver")
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest.fixture
def fake_supabase():
    db = FakeSupabase()
    db.seed(
        "members",
        {"id": "m-ana", "nome": "Ana", "email": "ana@patota.com", "telefone": "1199990001", "ativo": True},
        {"id": "m-bruno", "nome": "Bruno", "email": "bruno@patota.com", "telefone": "1199990002", "ativo": True},
        {"id": "m-adm", "nome": "Zé Admin", "email": "adm@patota.com", "telefone": None, "ativo": True},
    )
    db.seed("admins", {"member_id": "m-adm"})
    return db


@pytest.fixture
def make_token():
    """Gera um access token assinado como o Supabase Auth"""
    def _make(member_id, email=None, expires_in=3600):
        payload = {
            "sub": member_id,
            "email": email,
            "aud": "authenticated",
            "role": "authenticated",
            "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
        }
        return jwt.encode(payload, JWT_SECRET, algorithm="HS256")
    return _make


@pytest.fixture
def auth_headers(make_token):
    def _headers(member_id):
        return {"Authorization": f"Bearer {make_token(member_id)}"}
    return _headers


@pytest.fixture
def app(fake_supabase):
    from patota.server import create_app
    return create_app(fake_supabase, auth_client_factory=lambda: fake_supabase)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


def iso_in(days=0, hours=0):
    """data_hora relativa a agora, em ISO UTC"""
    return (datetime.now(timezone.utc) + timedelta(days=days, hours=hours)).isoformat()
