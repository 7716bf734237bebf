"""
Sales Report Runner

Runs the catalogue of sales reports against one loaded warehouse, optionally
exporting each report, and collects per-report results. A failing report is
recorded and the remaining reports still run.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Dict, Iterable, Optional

import polars as pl
import structlog

from sales_insights.analytics import (
    avg_cost_by_category,
    bottom_products,
    category_contribution,
    category_hierarchy,
    cost_segment_counts,
    cumulative_trend,
    customer_age_extremes,
    customer_segment_counts,
    customers_by_country,
    customers_by_gender,
    distinct_countries,
    key_metrics,
    order_date_range,
    product_yoy,
    products_by_category,
    revenue_by_category,
    revenue_by_customer,
    sold_items_by_country,
    top_products,
    yearly_trend,
)
from sales_insights.config import get_settings
from sales_insights.exceptions import SalesInsightsError
from sales_insights.warehouse import SalesWarehouse
from .exporter import ReportExporter

logger = structlog.get_logger(__name__)

ReportFunc = Callable[[SalesWarehouse], pl.DataFrame]


REPORTS: Dict[str, ReportFunc] = {
    # Exploration
    "distinct_countries": lambda w: distinct_countries(w.customers),
    "category_hierarchy": lambda w: category_hierarchy(w.products),
    "order_date_range": lambda w: order_date_range(w.sales),
    "customer_age_extremes": lambda w: customer_age_extremes(w.customers),
    # KPIs and magnitude
    "key_metrics": key_metrics,
    "customers_by_country": customers_by_country,
    "customers_by_gender": customers_by_gender,
    "products_by_category": products_by_category,
    "avg_cost_by_category": avg_cost_by_category,
    "revenue_by_category": revenue_by_category,
    "revenue_by_customer": revenue_by_customer,
    "sold_items_by_country": sold_items_by_country,
    # Ranking
    "top_products": top_products,
    "bottom_products": bottom_products,
    # Trends
    "yearly_trend": lambda w: yearly_trend(w.sales),
    "cumulative_trend": lambda w: cumulative_trend(w.sales, get_settings().report.trend_granularity),
    "product_yoy": lambda w: product_yoy(w.sales, w.products),
    # Contribution and segmentation
    "category_contribution": category_contribution,
    "cost_segments": lambda w: cost_segment_counts(w.products),
    "customer_segments": lambda w: customer_segment_counts(w.sales),
}


class ReportStatus(str, Enum):
    """Outcome of one report"""
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class ReportResult:
    """Result of running one report"""
    name: str
    status: ReportStatus
    rows: int
    started_at: datetime
    completed_at: datetime
    duration_seconds: float
    output_path: Optional[str] = None
    error: Optional[str] = None
    data: Optional[pl.DataFrame] = field(default=None, repr=False)


class SalesReportRunner:
    """
    Runs registered reports over a warehouse.

    Example:
        runner = SalesReportRunner(warehouse, exporter=ReportExporter())
        results = runner.run(["key_metrics", "product_yoy"])
    """

    def __init__(
        self,
        warehouse: SalesWarehouse,
        exporter: Optional[ReportExporter] = None,
        reports: Optional[Dict[str, ReportFunc]] = None,
    ):
        self.warehouse = warehouse
        self.exporter = exporter
        self.reports = dict(reports if reports is not None else REPORTS)

    def run_report(self, name: str) -> ReportResult:
        """Run a single registered report"""
        started_at = datetime.now(timezone.utc)
        df = None
        output_path = None
        error = None

        try:
            df = self.reports[name](self.warehouse)
            if self.exporter is not None:
                output_path = self.exporter.export(name, df)
        except (SalesInsightsError, pl.exceptions.PolarsError) as e:
            logger.error("Report failed", report=name, error=str(e))
            error = str(e)

        completed_at = datetime.now(timezone.utc)

        return ReportResult(
            name=name,
            status=ReportStatus.FAILED if error else ReportStatus.COMPLETED,
            rows=len(df) if df is not None else 0,
            started_at=started_at,
            completed_at=completed_at,
            duration_seconds=(completed_at - started_at).total_seconds(),
            output_path=output_path,
            error=error,
            data=df,
        )

    def run(self, names: Optional[Iterable[str]] = None) -> Dict[str, ReportResult]:
        """
        Run the named reports (all registered reports by default).

        Raises:
            KeyError: If a name is not registered; nothing is run
        """
        names = list(names) if names is not None else list(self.reports)
        unknown = [n for n in names if n not in self.reports]
        if unknown:
            raise KeyError(f"Unknown reports: {unknown}")

        logger.info("Running sales reports", reports=len(names))
        results = {name: self.run_report(name) for name in names}

        failed = [r.name for r in results.values() if r.status == ReportStatus.FAILED]
        logger.info(
            "Sales reports complete",
            completed=len(results) - len(failed),
            failed=failed,
            duration_seconds=round(sum(r.duration_seconds for r in results.values()), 3),
        )

        return results
