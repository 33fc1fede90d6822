"""
ChainRisk analytics.

Pattern statistics over a normalized transaction sample and the two
rule-based scorers (investigator risk, user safety). The end-to-end
pipeline lives in analytics.analysis_pipeline; import it from there.
"""

from backend_chainrisk.analytics.investigator_risk import calculate_investigator_risk
from backend_chainrisk.analytics.models import AnalysisResult, KnownInteractions, RiskAssessment
from backend_chainrisk.analytics.patterns import analyze_transactions
from backend_chainrisk.analytics.user_safety import calculate_user_safety

__all__ = [
    "AnalysisResult",
    "KnownInteractions",
    "RiskAssessment",
    "analyze_transactions",
    "calculate_investigator_risk",
    "calculate_user_safety",
]
