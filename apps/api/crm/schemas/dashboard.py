"""Dashboard response schemas."""

from decimal import Decimal

from crm.schemas.base import CamelModel


class StageMetric(CamelModel):
    stage: str
    count: int
    total_value: Decimal


class DashboardMetrics(CamelModel):
    total_contacts: int
    active_companies: int
    open_deals: int
    projected_revenue: Decimal
    stage_metrics: list[StageMetric]
