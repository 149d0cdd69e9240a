from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List

from flask import copy_current_request_context

from extensions import api
from backoffice.api_client import unwrap


def fetch_dashboard_metrics() -> Dict[str, Any]:
    return unwrap(api.get("/dashboard")) or {}


def fetch_quick_stats() -> Dict[str, Any]:
    return unwrap(api.get("/dashboard/quick-stats")) or {}


def fetch_revenue_analytics() -> Any:
    return unwrap(api.get("/dashboard/revenue"))


def fetch_customer_analytics() -> Any:
    return unwrap(api.get("/dashboard/customers"))


@dataclass
class DashboardData:
    metrics: Dict[str, Any] = field(default_factory=dict)
    quick_stats: Dict[str, Any] = field(default_factory=dict)
    revenue: Any = None
    customers: Any = None

    @property
    def revenue_chart(self) -> Dict[str, List[Any]]:
        growth = self.metrics.get("revenueGrowth") or []
        return {
            "labels": [str(row.get("month") or "").split(" ")[0] for row in growth],
            "data": [row.get("revenue") or 0 for row in growth],
        }

    @property
    def customer_chart(self) -> Dict[str, List[Any]]:
        growth = self.metrics.get("customerGrowth") or []
        return {
            "labels": [str(row.get("month") or "").split(" ")[0] for row in growth],
            "data": [row.get("count") or 0 for row in growth],
        }

    @property
    def payment_status_chart(self) -> Dict[str, List[Any]]:
        distribution = self.metrics.get("paymentStatusDistribution") or {}
        labels = ["paid", "pending", "overdue", "cancelled"]
        return {
            "labels": [label.capitalize() for label in labels],
            "data": [distribution.get(label) or 0 for label in labels],
        }


def fetch_dashboard(max_workers: int = 4) -> DashboardData:
    """Run the four aggregate calls at once.

    Waits for all of them; the first failure (in call order) is re-raised so the
    screen fails as a whole instead of rendering part of the data.
    """
    calls: List[Callable[[], Any]] = [
        fetch_dashboard_metrics,
        fetch_quick_stats,
        fetch_revenue_analytics,
        fetch_customer_analytics,
    ]
    # worker threads need the request context to read the session token
    wrapped = [copy_current_request_context(call) for call in calls]

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = [pool.submit(call) for call in wrapped]
        results = []
        first_error = None
        for future in futures:
            try:
                results.append(future.result())
            except Exception as exc:  # re-raised below once every call has finished
                results.append(None)
                if first_error is None:
                    first_error = exc

    if first_error is not None:
        raise first_error

    metrics, quick_stats, revenue, customers = results
    return DashboardData(metrics=metrics, quick_stats=quick_stats, revenue=revenue, customers=customers)
