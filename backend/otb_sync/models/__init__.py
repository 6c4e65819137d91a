from otb_sync.models.sink import (
    AgentPerformance,
    AlosAdbHeatmap,
    AnnualTarget,
    BobRevenueAnalysis,
    BookingPace,
    DailyMarketRn,
    DailyMarketRnTotals,
    DashboardUser,
    MarketMainmarket,
    MonthlyData,
    RnHeatmap,
    RnHeatmapMeta,
    TodayAgentRn,
    TodayMetrics,
    TodayRnByMonth,
    TodayRnByMonthMarket,
)

__all__ = [
    'AgentPerformance',
    'AlosAdbHeatmap',
    'AnnualTarget',
    'BobRevenueAnalysis',
    'BookingPace',
    'DailyMarketRn',
    'DailyMarketRnTotals',
    'DashboardUser',
    'MarketMainmarket',
    'MonthlyData',
    'RnHeatmap',
    'RnHeatmapMeta',
    'TodayAgentRn',
    'TodayMetrics',
    'TodayRnByMonth',
    'TodayRnByMonthMarket',
]
