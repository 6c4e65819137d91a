"""
Tables of the dashboard database. Every table except ``users`` is owned by the sync
replacer: each cycle deletes all rows and inserts the freshly computed snapshot.
"""
from datetime import datetime

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, Integer, String

from otb_sync.db.base import Base


class TodayMetrics(Base):
    __tablename__ = 'today_metrics'

    id = Column(Integer, primary_key=True, index=True)
    today_reservations = Column(Integer, nullable=False, default=0)
    today_rn = Column(Integer, nullable=False, default=0)
    today_revenue = Column(Float, nullable=False, default=0.0)
    synced_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class MonthlyData(Base):
    __tablename__ = 'monthly_data'

    id = Column(Integer, primary_key=True, index=True)
    month_num = Column(String(2), nullable=False)
    month_label = Column(String(8), nullable=False)
    total_rn = Column(Integer, nullable=False, default=0)
    total_revenue = Column(Float, nullable=False, default=0.0)
    avg_rate = Column(Float, nullable=False, default=0.0)
    total_rn_2025 = Column(Integer, nullable=False, default=0)
    total_revenue_2025 = Column(Float, nullable=False, default=0.0)
    avg_rate_2025 = Column(Float, nullable=False, default=0.0)
    total_rn_2024 = Column(Integer, nullable=False, default=0)
    total_revenue_2024 = Column(Float, nullable=False, default=0.0)
    avg_rate_2024 = Column(Float, nullable=False, default=0.0)
    total_rn_2023 = Column(Integer, nullable=False, default=0)
    total_revenue_2023 = Column(Float, nullable=False, default=0.0)
    avg_rate_2023 = Column(Float, nullable=False, default=0.0)
    total_rn_2022 = Column(Integer, nullable=False, default=0)
    total_revenue_2022 = Column(Float, nullable=False, default=0.0)
    avg_rate_2022 = Column(Float, nullable=False, default=0.0)
    synced_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class RnHeatmap(Base):
    __tablename__ = 'rn_heatmap'

    id = Column(Integer, primary_key=True, index=True)
    month_key = Column(String(16), nullable=False, index=True)
    market = Column(String(128), nullable=False)
    room_type = Column(String(64), nullable=False)
    rn = Column(Float, nullable=False, default=0.0)
    price = Column(Float, nullable=False, default=0.0)
    synced_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class RnHeatmapMeta(Base):
    __tablename__ = 'rn_heatmap_meta'

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String(64), nullable=False, unique=True)
    value = Column(Integer, nullable=True)
    synced_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class AlosAdbHeatmap(Base):
    __tablename__ = 'alos_adb_heatmap'

    id = Column(Integer, primary_key=True, index=True)
    data = Column(JSON, nullable=False)
    synced_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class BobRevenueAnalysis(Base):
    __tablename__ = 'bob_revenue_analysis'

    id = Column(Integer, primary_key=True, index=True)
    month_num = Column(String(2), nullable=False)
    market = Column(String(128), nullable=True)
    year = Column(Integer, nullable=False, index=True)
    bob_revenue = Column(Float, nullable=False, default=0.0)
    bob_pax = Column(Integer, nullable=False, default=0)
    bob_rn = Column(Integer, nullable=False, default=0)
    synced_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class TodayAgentRn(Base):
    __tablename__ = 'today_agent_rn'

    id = Column(Integer, primary_key=True, index=True)
    segment = Column(String(255), nullable=False)
    rn_count = Column(Integer, nullable=False, default=0)
    revenue = Column(Float, nullable=False, default=0.0)
    synced_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class TodayRnByMonth(Base):
    __tablename__ = 'today_rn_by_month'

    id = Column(Integer, primary_key=True, index=True)
    month_num = Column(String(2), nullable=False)
    total_rn = Column(Integer, nullable=False, default=0)
    total_revenue = Column(Float, nullable=False, default=0.0)
    adb = Column(Float, nullable=False, default=0.0)
    synced_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class TodayRnByMonthMarket(Base):
    __tablename__ = 'today_rn_by_month_market'

    id = Column(Integer, primary_key=True, index=True)
    month_num = Column(String(2), nullable=False)
    market = Column(String(128), nullable=False)
    rn = Column(Integer, nullable=False, default=0)
    market_total = Column(Integer, nullable=False, default=0)
    synced_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class DailyMarketRn(Base):
    __tablename__ = 'daily_market_rn'

    id = Column(Integer, primary_key=True, index=True)
    date_str = Column(String(10), nullable=False, index=True)
    market = Column(String(128), nullable=False)
    rn_count = Column(Integer, nullable=False, default=0)
    market_total = Column(Integer, nullable=False, default=0)
    synced_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class DailyMarketRnTotals(Base):
    __tablename__ = 'daily_market_rn_totals'

    id = Column(Integer, primary_key=True, index=True)
    year_num = Column(Integer, nullable=False, index=True)
    month_day = Column(String(5), nullable=False)
    total_rn = Column(Integer, nullable=False, default=0)
    synced_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class BookingPace(Base):
    __tablename__ = 'booking_pace'

    id = Column(Integer, primary_key=True, index=True)
    month_num = Column(String(2), nullable=False)
    month_label = Column(String(8), nullable=False)
    last_30_days_rn = Column(Integer, nullable=False, default=0)
    last_15_days_rn = Column(Integer, nullable=False, default=0)
    last_30_days_2025_rn = Column(Integer, nullable=False, default=0)
    last_15_days_2025_rn = Column(Integer, nullable=False, default=0)
    synced_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class AnnualTarget(Base):
    __tablename__ = 'annual_target'

    id = Column(Integer, primary_key=True, index=True)
    total_revenue_2026 = Column(Float, nullable=False, default=0.0)
    synced_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class AgentPerformance(Base):
    __tablename__ = 'agent_performance'

    id = Column(Integer, primary_key=True, index=True)
    segment = Column(String(255), nullable=False)
    market = Column(String(128), nullable=False)
    revenue_2026 = Column(Float, nullable=False, default=0.0)
    revenue_2025 = Column(Float, nullable=False, default=0.0)
    agent_order = Column(Integer, nullable=False, default=0)
    synced_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class MarketMainmarket(Base):
    __tablename__ = 'market_mainmarket'

    id = Column(Integer, primary_key=True, index=True)
    segment = Column(String(128), nullable=False)
    revenue_2026 = Column(Float, nullable=False, default=0.0)
    revenue_2025 = Column(Float, nullable=False, default=0.0)
    revenue_2024 = Column(Float, nullable=False, default=0.0)
    revenue_2023 = Column(Float, nullable=False, default=0.0)
    revenue_2022 = Column(Float, nullable=False, default=0.0)
    rn_2026 = Column(Integer, nullable=False, default=0)
    rn_2025 = Column(Integer, nullable=False, default=0)
    rn_2024 = Column(Integer, nullable=False, default=0)
    rn_2023 = Column(Integer, nullable=False, default=0)
    rn_2022 = Column(Integer, nullable=False, default=0)
    synced_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class DashboardUser(Base):
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(128), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    display_name = Column(String(255), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
