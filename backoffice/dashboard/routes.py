# -*- coding: utf-8 -*-

from __future__ import annotations

from flask import Blueprint, render_template, flash

from backoffice.api_client import ApiError
from backoffice.auth import require_login
from backoffice.views import flash_api_error

from .api import fetch_dashboard


dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/dashboard")


# ---------- Pages ----------

@dashboard_bp.route("")
def dashboard_home():
    maybe_redirect = require_login()
    if maybe_redirect:
        return maybe_redirect

    try:
        data = fetch_dashboard()
    except ApiError as exc:
        flash_api_error("Failed to load dashboard data", exc)
        return render_template("dashboard/index.html", data=None, title="Dashboard")

    metrics = data.metrics
    stats = data.quick_stats
    return render_template(
        "dashboard/index.html",
        data=data,
        title="Dashboard",
        # Cards
        cards=[
            {"label": "Total Customers", "value": stats.get("totalCustomers") or 0, "kind": "count"},
            {"label": "New This Month", "value": stats.get("newCustomersThisMonth") or 0, "kind": "count"},
            {"label": "Total Revenue", "value": stats.get("totalRevenue") or 0, "kind": "amount"},
            {"label": "Pending Payments", "value": stats.get("pendingPayments") or 0, "kind": "amount"},
        ],
        # Charts data
        revenue_chart=data.revenue_chart,
        customer_chart=data.customer_chart,
        payment_status_chart=data.payment_status_chart,
        # Rates
        rates={
            "Customer retention": metrics.get("customerRetentionRate") or "0",
            "Avg revenue / customer": metrics.get("averageRevenuePerCustomer") or "0",
            "Payment collection": metrics.get("paymentCollectionRate") or "0",
        },
        # Lists
        recent_payments=metrics.get("recentPayments") or [],
        recent_customers=metrics.get("recentCustomers") or [],
        top_packages=metrics.get("topPackages") or [],
        connection_types=metrics.get("connectionTypeDistribution") or [],
    )
