"""
Finance Router - Página financeira do membro
"""
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from ..auth.dependencies import require_member
from ..auth.session import SessionContext
from ..config import get_settings
from ..database import get_supabase
from .models import FinanceOverview, Payment
from .service import FinanceService

router = APIRouter(prefix="/financeiro", tags=["Financeiro"])


def get_finance_service(supabase=Depends(get_supabase)) -> FinanceService:
    return FinanceService(supabase)


@router.get("", response_model=FinanceOverview)
def finance_page(
    member: SessionContext = Depends(require_member),
    service: FinanceService = Depends(get_finance_service)
):
    """
    Mensalidades, multas e pagamentos do membro

    total_pendente soma mensalidades PENDENTE e todas as multas.
    """
    return service.overview(member.member_id)


@router.post("/comprovante", response_model=Payment)
def upload_receipt(
    file: UploadFile = File(...),
    due_id: Optional[str] = Form(None),
    fine_id: Optional[str] = Form(None),
    member: SessionContext = Depends(require_member),
    service: FinanceService = Depends(get_finance_service)
):
    """Envia comprovante e cria pagamento PENDENTE (aguarda o admin)"""
    # lê no máximo um byte além do limite; o serviço recusa o excesso
    content = file.file.read(get_settings().RECEIPT_MAX_BYTES + 1)
    return service.submit_receipt(
        member.member_id,
        file.filename,
        content,
        file.content_type,
        due_id=due_id or None,
        fine_id=fine_id or None,
    )
