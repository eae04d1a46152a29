import logging
from typing import Optional

from flask import Flask, Response, jsonify, request

from finance_toolkit.config import Settings, configure_logging, load_settings
from finance_toolkit.currency import RateService
from finance_toolkit.data_models import AmortizationResult, ExtraPayments, as_floats
from finance_toolkit.engine import amortize, compare_with_baseline, loan_summary, mortgage
from finance_toolkit.formatter import CURRENCY_OPTIONS, schedule_to_csv
from finance_toolkit.rate_store import create_store_from_env
from finance_toolkit.retirement import project
from finance_toolkit.tax import DEFAULT_BRACKETS, compute_tax, parse_brackets
from finance_toolkit.trading import crypto_pnl, stock_split
from finance_toolkit.utils import to_decimal, to_int

logger = logging.getLogger(__name__)

PREVIEW_ROWS = 12


def _payload() -> dict:
    """Merge JSON body and form fields; JSON wins."""
    data = dict(request.form.items())
    body = request.get_json(silent=True)
    if isinstance(body, dict):
        data.update(body)
    return data


def _extra_from(data: dict) -> ExtraPayments:
    return ExtraPayments(
        monthly=to_decimal(data.get("extra_monthly")),
        yearly=to_decimal(data.get("extra_yearly")),
        once_month=max(0, to_int(data.get("once_month"))),
        once_amount=to_decimal(data.get("once_amount")),
    )


def _normalized_currency(data: dict) -> str:
    code = str(data.get("currency", "USD")).upper()
    return code if code in CURRENCY_OPTIONS else "USD"


def _serialize_schedule(result: AmortizationResult, show_full_schedule: bool) -> list:
    rows = result.rows if show_full_schedule else result.rows[:PREVIEW_ROWS]
    return [
        {
            "month": r.month,
            "base_payment": float(r.base_payment),
            "extra": float(r.extra),
            "payment": float(r.total_payment),
            "interest": float(r.interest),
            "principal": float(r.principal_paid),
            "balance": float(r.ending_balance),
        }
        for r in rows
    ]


def _rates_payload(service: RateService) -> dict:
    table = service.table
    return {
        "status": service.status.value,
        "fetched_at": table.fetched_at,
        "rates": {code: float(rate) for code, rate in table.rates.items()},
    }


def create_app(settings: Optional[Settings] = None, rate_service: Optional[RateService] = None) -> Flask:
    """Build the JSON front end.

    ``rate_service`` defaults to one backed by the configured rate cache; the
    caller owns its startup fetch (see ``main`` below).
    """
    settings = settings or load_settings()
    if rate_service is None:
        rate_service = RateService(
            create_store_from_env(settings.rate_cache_url),
            url=settings.rates_url,
            timeout=settings.fetch_timeout,
        )

    app = Flask(__name__)
    app.secret_key = settings.secret_key
    app.config["RATE_SERVICE"] = rate_service

    def _loan(data: dict) -> AmortizationResult:
        return amortize(
            data.get("principal"),
            data.get("apr"),
            data.get("years"),
            _extra_from(data),
            max_extra_months=settings.max_extra_months,
        )

    @app.errorhandler(ValueError)
    def bad_input(exc):
        return jsonify({"error": str(exc)}), 400

    @app.post("/api/loan")
    def loan():
        data = _payload()
        result = _loan(data)
        extra = _extra_from(data)
        summary = loan_summary(result, data.get("principal"))
        if extra.active:
            summary["comparison"] = compare_with_baseline(
                data.get("principal"), data.get("apr"), data.get("years"), extra
            )
        show_full = str(data.get("show_full_schedule", "")) in {"1", "true", "True"}
        return jsonify(
            {
                "currency": _normalized_currency(data),
                "summary": summary,
                "schedule": _serialize_schedule(result, show_full),
                "truncated": 0 if show_full else max(0, result.months_to_payoff - PREVIEW_ROWS),
            }
        )

    @app.post("/api/loan.csv")
    def loan_csv():
        data = _payload()
        extended = str(data.get("extended", "")) in {"1", "true", "True"}
        body = schedule_to_csv(_loan(data).rows, extended)
        return Response(
            body,
            mimetype="text/csv",
            headers={"Content-Disposition": "attachment; filename=amortization.csv"},
        )

    @app.post("/api/mortgage")
    def mortgage_view():
        data = _payload()
        result = mortgage(
            data.get("home_price"),
            data.get("down_payment_percent"),
            data.get("apr"),
            data.get("years"),
            data.get("tax_monthly"),
            data.get("insurance_monthly"),
            data.get("hoa_monthly"),
            max_extra_months=settings.max_extra_months,
        )
        return jsonify(
            {
                "currency": _normalized_currency(data),
                "principal": float(result.principal),
                "base_monthly": float(result.base_monthly),
                "monthly_extras": float(result.monthly_extras),
                "total_monthly": float(result.total_monthly),
                "total_interest": float(result.total_interest),
                "total_paid": float(result.total_paid),
                "months_to_payoff": result.schedule.months_to_payoff,
                "schedule": _serialize_schedule(result.schedule, False),
            }
        )

    @app.get("/api/rates")
    def rates():
        return jsonify(_rates_payload(rate_service))

    @app.post("/api/rates/refresh")
    def refresh_rates():
        result = rate_service.refresh()
        payload = _rates_payload(rate_service)
        if not result.ok:
            payload["error"] = result.error
        return jsonify(payload)

    @app.post("/api/convert")
    def convert():
        data = _payload()
        from_code = str(data.get("from", "USD"))
        to_code = str(data.get("to", "USD"))
        result = rate_service.convert(data.get("amount"), from_code, to_code)
        return jsonify(
            {
                "amount": float(to_decimal(data.get("amount"))),
                "from": from_code.upper(),
                "to": to_code.upper(),
                "result": float(result),
                "status": rate_service.status.value,
            }
        )

    @app.post("/api/tax")
    def tax():
        data = _payload()
        raw = data.get("brackets")
        if not raw:
            brackets = list(DEFAULT_BRACKETS)
        elif isinstance(raw, list):
            brackets = parse_brackets([str(item) for item in raw])
        else:
            brackets = parse_brackets([str(raw)])
        result = compute_tax(data.get("income"), brackets)
        return jsonify(
            {
                "total_tax": float(result.total_tax),
                "effective_rate": float(result.effective_rate),
                "breakdown": [as_floats(s.__dict__) for s in result.breakdown],
            }
        )

    @app.post("/api/retirement")
    def retirement():
        data = _payload()
        result = project(
            data.get("current_age"),
            data.get("retire_age"),
            data.get("current_savings"),
            data.get("monthly_contribution"),
            data.get("annual_return_percent"),
            data.get("annual_inflation_percent"),
        )
        return jsonify(
            {
                "nominal_future_value": float(result.nominal_future_value),
                "real_future_value": float(result.real_future_value),
                "yearly_series": [p.__dict__ for p in result.yearly_series],
            }
        )

    @app.post("/api/crypto")
    def crypto():
        data = _payload()
        result = crypto_pnl(data.get("buy_price"), data.get("sell_price"), data.get("quantity"), data.get("fee_percent"))
        return jsonify(as_floats(result.__dict__))

    @app.post("/api/split")
    def split():
        data = _payload()
        result = stock_split(data.get("shares"), data.get("price"), data.get("ratio_a"), data.get("ratio_b"))
        return jsonify(as_floats(result.__dict__))

    @app.get("/health")
    def health():
        return jsonify({"status": "healthy", "rates": rate_service.status.value})

    return app


def main() -> None:
    settings = load_settings()
    configure_logging(settings)
    app = create_app(settings)
    # Startup fetch runs in the background; requests see the status meanwhile.
    app.config["RATE_SERVICE"].load_cached()
    app.config["RATE_SERVICE"].refresh_async()
    logger.info("Starting Finance Toolkit web app...")
    app.run(host="0.0.0.0", port=8710, debug=False)


if __name__ == "__main__":
    main()
