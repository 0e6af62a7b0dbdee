from .metric_scorers import score_negative_metric, score_or_zero, score_positive_metric
from .fundamental import (
    build_fundamentals_insight,
    calculate_fundamentals_quality_score,
    classify_fundamentals,
)
from .valuation import (
    build_valuation_insight,
    classify_peg_ratio,
    classify_valuation,
    evaluate_peg_ratio,
    select_growth_metric,
)
from .technical import analyze_technicals
from .sentiment import analyze_sentiment
from .historical import (
    calculate_returns,
    calculate_volatility,
    detect_trend,
    normalize_price_series,
    summarize_history,
)
from .scenarios import generate_scenarios
from .planning import generate_planning_guidance
from .composer import analyze_stock
from .portfolio import (
    build_portfolio_context,
    calculate_allocation,
    calculate_portfolio_beta,
    calculate_portfolio_metrics,
    calculate_portfolio_stress_test,
    detect_concentration_risk,
    suggest_portfolio_action,
)
from .active_manager import (
    apply_risk_guardrails,
    build_active_manager_recommendation,
    calculate_confidence_score,
    determine_base_action,
    determine_return_bias,
    map_horizon,
)
