import os
import datetime as _dt
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlsplit

import requests
from flask import Flask, Response, abort, flash, jsonify, redirect, render_template, request, url_for

from extensions import api
from backoffice.api_client import ApiError
from backoffice.auth import current_session, login_user, logout_user, require_login
from backoffice.formatting import app_timezone, format_amount, format_date, format_price, format_speed
from backoffice.invoices.rendering import render_receipt, sample_receipt


# ---------------- Navigation ----------------
NAVIGATION = [
    {"name": "Dashboard", "endpoint": "dashboard.dashboard_home"},
    {"name": "Customers", "endpoint": "customers.list_customers"},
    {"name": "Connections", "endpoint": "connections.list_connections"},
    {"name": "Payments", "endpoint": "payments.list_payments"},
    {"name": "Inventory", "endpoint": "inventory.list_inventory"},
    {"name": "Employees", "endpoint": "employees.list_employees", "admin_only": True},
    {"name": "Packages", "endpoint": "packages.list_packages"},
    {"name": "Invoice", "endpoint": "invoices.create_invoice"},
    {"name": "Settings", "endpoint": "settings"},
]

# Headers that must not be copied from the proxied backend response
HOP_BY_HOP_HEADERS = {"content-encoding", "content-length", "transfer-encoding", "connection"}


def _env_flag(name: str, default: str = "0") -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


def load_config() -> Dict[str, Any]:
    """Settings read from the environment; values passed to create_app() win."""
    return {
        "SECRET_KEY": os.environ.get("SECRET_KEY", "dev-secret-key"),
        "API_BASE_URL": os.environ.get("API_BASE_URL", "http://localhost:1337/api"),
        "API_TIMEOUT": float(os.environ.get("API_TIMEOUT", "15")),
        "API_PROXY_ENABLED": _env_flag("API_PROXY_ENABLED"),
        "CSP_PAYMENT_ORIGINS": os.environ.get("CSP_PAYMENT_ORIGINS", "https://js.stripe.com https://api.stripe.com"),
        "DISPLAY_TIMEZONE": os.environ.get("DISPLAY_TIMEZONE", "UTC"),
        "CURRENCY_LABEL": os.environ.get("CURRENCY_LABEL", "Rs"),
        "LOG_LEVEL": os.environ.get("LOG_LEVEL", "INFO").upper(),
        "COMPANY_NAME": os.environ.get("COMPANY_NAME", "Internet Services"),
        "OFFICE_ADDRESS": os.environ.get("OFFICE_ADDRESS", ""),
        "HELPLINE": os.environ.get("HELPLINE", ""),
    }


def build_csp(api_base_url: str, payment_origins: str) -> str:
    """Content-Security-Policy: self, the backend origin and the payment widget origins."""
    parts = urlsplit(api_base_url or "")
    backend = f"{parts.scheme}://{parts.netloc}" if parts.scheme and parts.netloc else ""
    extra = " ".join(o for o in (payment_origins or "").split() if o)

    connect_src = " ".join(s for s in ("'self'", backend, extra, "wss:") if s)
    script_src = " ".join(s for s in ("'self'", "'unsafe-inline'", extra) if s)
    return (
        "default-src 'self'; "
        f"script-src {script_src}; "
        f"connect-src {connect_src}; "
        "style-src 'self' 'unsafe-inline'; "
        "img-src 'self' data:; "
        "object-src 'none'; "
        "base-uri 'self'; "
        "frame-ancestors 'none';"
    )


def _safe_next(target: Optional[str]) -> str:
    if target and target.startswith("/") and not target.startswith("//"):
        return target
    return url_for("dashboard.dashboard_home")


def create_app(config: Optional[Mapping[str, Any]] = None) -> Flask:
    app = Flask(__name__)
    app.config.update(load_config())
    if config:
        app.config.update(config)
    app.secret_key = app.config["SECRET_KEY"]
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    api.init_app(app)

    # ---------------- Register Blueprints ----------------
    from backoffice.dashboard.routes import dashboard_bp
    app.register_blueprint(dashboard_bp)

    from backoffice.customers.routes import customers_bp
    app.register_blueprint(customers_bp)

    from backoffice.connections.routes import connections_bp
    app.register_blueprint(connections_bp)

    from backoffice.packages.routes import packages_bp
    app.register_blueprint(packages_bp)

    from backoffice.inventory.routes import inventory_bp
    app.register_blueprint(inventory_bp)

    from backoffice.payments.routes import payments_bp
    app.register_blueprint(payments_bp)

    from backoffice.employees.routes import employees_bp
    app.register_blueprint(employees_bp)

    from backoffice.invoices.routes import invoices_bp
    app.register_blueprint(invoices_bp)

    # ---------------- Templates ----------------
    @app.template_filter("price")
    def price_filter(value):
        return format_price(value, app.config["CURRENCY_LABEL"])

    @app.template_filter("amount")
    def amount_filter(value):
        return format_amount(value, app.config["CURRENCY_LABEL"])

    @app.template_filter("speed")
    def speed_filter(value):
        return format_speed(value)

    @app.template_filter("date")
    def date_filter(value):
        return format_date(value, app_timezone())

    @app.context_processor
    def inject_layout():
        store = current_session()
        nav = [item for item in NAVIGATION if not item.get("admin_only") or store.is_admin]
        return {
            "session_store": store,
            "navigation": nav if store.is_authenticated else [],
            "company_name": app.config.get("COMPANY_NAME"),
            "currency": app.config["CURRENCY_LABEL"],
        }

    @app.after_request
    def set_security_headers(response):
        response.headers.setdefault(
            "Content-Security-Policy",
            build_csp(app.config.get("API_BASE_URL"), app.config.get("CSP_PAYMENT_ORIGINS")),
        )
        return response

    @app.errorhandler(404)
    def page_not_found(_error):
        return render_template("not_found.html", resource="Page", back_url=url_for("index"),
                               title="Not found"), 404

    # ---------------- Auth ----------------
    @app.route("/login", methods=["GET", "POST"])
    def login():
        if request.method == "POST":
            email = (request.form.get("email") or "").strip()
            password = request.form.get("password") or ""
            if not email or not password:
                flash("⚠️ Email and password are required", "warning")
                return render_template("login.html", email=email, title="Sign in"), 400
            try:
                login_user(email, password)
            except ApiError as exc:
                app.logger.warning("Login failed for %s: %s", email, exc)
                flash(f"❌ {exc.message}", "error")
                return render_template("login.html", email=email, title="Sign in"), 401
            app.logger.info("User %s signed in", email)
            flash(f"✅ Welcome {current_session().display_name}", "success")
            return redirect(_safe_next(request.args.get("next")))

        if current_session().is_authenticated:
            return redirect(url_for("dashboard.dashboard_home"))
        return render_template("login.html", email="", title="Sign in")

    @app.route("/logout", methods=["GET", "POST"])
    def logout():
        logout_user()
        flash("✅ Signed out", "success")
        return redirect(url_for("login"))

    @app.route("/")
    def index():
        if current_session().is_authenticated:
            return redirect(url_for("dashboard.dashboard_home"))
        return redirect(url_for("login"))

    # ---------------- Settings ----------------
    @app.route("/settings")
    def settings():
        maybe_redirect = require_login()
        if maybe_redirect:
            return maybe_redirect
        store = current_session()
        return render_template("settings.html", user=store.current_user or {}, title="Settings")

    @app.route("/settings/test-receipt")
    def settings_test_receipt():
        maybe_redirect = require_login()
        if maybe_redirect:
            return maybe_redirect
        user = current_session().current_user or {}
        receipt = sample_receipt(
            _dt.datetime.now(app_timezone()),
            cashier=user.get("firstName") or "Admin",
            company_name=app.config.get("COMPANY_NAME", ""),
            office_address=app.config.get("OFFICE_ADDRESS", ""),
            helpline=app.config.get("HELPLINE", ""),
        )
        return render_receipt(receipt, app.config["CURRENCY_LABEL"])

    # ---------------- Same-origin backend proxy ----------------
    @app.route("/api/<path:path>", methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
    def api_proxy(path: str):
        if not app.config.get("API_PROXY_ENABLED"):
            abort(404)
        headers = {k: v for k, v in request.headers.items()
                   if k.lower() in ("authorization", "content-type", "accept")}
        try:
            upstream = api.transport.request(
                request.method,
                api.url_for(path),
                params=list(request.args.items(multi=True)),
                data=request.get_data(),
                headers=headers,
                timeout=api.timeout,
                stream=True,
            )
        except requests.RequestException as exc:
            app.logger.warning("Proxy %s /api/%s failed: %s", request.method, path, exc)
            return jsonify({"message": "Could not reach the server"}), 502

        response_headers = [(k, v) for k, v in upstream.headers.items() if k.lower() not in HOP_BY_HOP_HEADERS]
        return Response(upstream.iter_content(chunk_size=8192), status=upstream.status_code,
                        headers=response_headers)

    return app


app = create_app()


if __name__ == "__main__":
    app.run(debug=True)
