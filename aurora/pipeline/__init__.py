from .portfolio_insights import (
    HoldingInsight,
    PipelineError,
    PortfolioInsightsBundle,
    build_portfolio_insights,
)
