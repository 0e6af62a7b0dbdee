from aurora.models.insights import (
    AnalysisResult,
    AnalysisSummary,
    FundamentalsInsight,
    HistoricalSummary,
    PegAssessment,
    PlanningGuidance,
    ReturnSummary,
    ScenarioBand,
    ScenarioSummary,
    SentimentRead,
    TechnicalRead,
    ValuationInsight,
)
from aurora.models.portfolio import (
    ConcentrationRisk,
    HoldingScenarioSnapshot,
    Portfolio,
    PortfolioActionSuggestion,
    PortfolioAllocation,
    PortfolioContext,
    PortfolioHolding,
    PortfolioMetrics,
    PortfolioStressTestResult,
    PositionWeight,
    StressTestEntry,
)
from aurora.models.profile import UserProfile
from aurora.models.recommendation import ActiveManagerRecommendation
from aurora.models.stock import (
    HistoricalData,
    HistoricalDataPoint,
    StockData,
    StockFundamentals,
    StockSentiment,
    StockTechnicals,
)

__all__ = [
    "ActiveManagerRecommendation",
    "AnalysisResult",
    "AnalysisSummary",
    "ConcentrationRisk",
    "FundamentalsInsight",
    "HistoricalData",
    "HistoricalDataPoint",
    "HistoricalSummary",
    "HoldingScenarioSnapshot",
    "PegAssessment",
    "PlanningGuidance",
    "Portfolio",
    "PortfolioActionSuggestion",
    "PortfolioAllocation",
    "PortfolioContext",
    "PortfolioHolding",
    "PortfolioMetrics",
    "PortfolioStressTestResult",
    "PositionWeight",
    "ReturnSummary",
    "ScenarioBand",
    "ScenarioSummary",
    "SentimentRead",
    "StockData",
    "StockFundamentals",
    "StockSentiment",
    "StockTechnicals",
    "StressTestEntry",
    "TechnicalRead",
    "UserProfile",
    "ValuationInsight",
]
