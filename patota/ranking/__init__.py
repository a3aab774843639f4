"""
Ranking Module - Ranking de participação e regras da patota
"""
from .models import RankingView
from .service import RankingService, rank, rules

__all__ = ["RankingView", "RankingService", "rank", "rules"]
