"""
Patota CCC - Gestão da patota de futebol
"""
__version__ = "1.0.0"
