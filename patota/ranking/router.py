"""
Ranking Router - Ranking de participação e regras
"""
from fastapi import APIRouter, Depends, Query

from ..auth.dependencies import require_member
from ..auth.session import SessionContext
from ..database import get_supabase
from .models import RankingPage, RankingView, RulesPage
from .service import RankingService, rules

router = APIRouter(tags=["Ranking"])


@router.get("/ranking", response_model=RankingPage)
def ranking_page(
    visao: RankingView = Query(RankingView.mensal, description="mensal ou geral"),
    member: SessionContext = Depends(require_member),
    supabase=Depends(get_supabase)
):
    """Ranking por pontos (maior primeiro); a linha do membro vem com eu=true"""
    return RankingService(supabase).get_ranking(visao, member.member_id)


@router.get("/regras", response_model=RulesPage)
def rules_page(member: SessionContext = Depends(require_member)):
    return rules()
