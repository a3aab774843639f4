"""
Exceções da aplicação

Toda falha do Supabase chega ao usuário como um alerta com a mensagem crua;
nada é re-tentado.
"""
from typing import List, Optional


class PatotaError(Exception):
    """Erro base"""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BackendError(PatotaError):
    """Falha de leitura/escrita/RPC no Supabase (mensagem crua preservada)"""


class InvalidRequest(PatotaError):
    """Entrada recusada antes de chegar ao Supabase"""


class NotFoundError(PatotaError):
    """Registro inexistente"""

    status_code = 404


class PaymentStateError(PatotaError):
    """Pagamento já está em estado terminal (CONFIRMADO/REJEITADO)"""

    status_code = 409


class BatchSaveError(PatotaError):
    """Falha no meio do 'salvar tudo' de presenças

    O laço não é transacional: `applied` lista os membros que já foram
    gravados antes da falha.
    """

    def __init__(self, message: str, applied: Optional[List[str]] = None, failed_member_id: Optional[str] = None):
        super().__init__(message)
        self.applied = applied or []
        self.failed_member_id = failed_member_id


class LoginRequired(PatotaError):
    """Sem sessão: redireciona para /login"""

    status_code = 401


class AdminRequired(PatotaError):
    """Sessão sem permissão de admin: redireciona para /"""

    status_code = 403
