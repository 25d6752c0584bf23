#!/usr/bin/env python3
"""
Revenue forecast scenario using the real service stack.

Loads a YAML config set, builds a small contract snapshot and invoice
ledger in memory, and runs RevenueForecastService over them.

Scenario coverage:
  - monthly, quarterly and annual contracts billed through the ledger
  - a new contract with no invoice yet (contract fallback)
  - an invoice-only client with no contract (cadence inferred)
  - a cancelled contract and a set-up fee (both ignored for MRR)
  - a malformed ledger amount (reported as a data-quality issue)

Usage:
    python3 scripts/demo_forecast.py
    python3 scripts/demo_forecast.py --as-of 2024-09-30 --config dashboard
    python3 scripts/demo_forecast.py --json
"""

import argparse
import logging
import sys
from datetime import date
from pathlib import Path

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from forecast_kernel.domain.records import Contract, Invoice  # noqa: E402
from forecast_kernel.logging_config import configure_logging  # noqa: E402
from forecast_services import RevenueForecastService, to_json, to_payload  # noqa: E402

DEFAULT_AS_OF = date(2024, 6, 15)


def build_contracts() -> list[Contract]:
    rows = [
        ("ACME", "Acme Retail", "C-001", "active", "Platform", "monthly", "1200", "2022-03-01"),
        ("IND", "Industrias del Norte", "C-002", "active", "Analytics", "quarterly", "2500", "2023-01-15"),
        ("GLOB", "Globex", "C-003", "active", "Platform", "annual", "900", "2021-07-01"),
        ("NOVA", "Nova Health", "C-004", "active", "Platform", "monthly", "750", "2024-06-01"),
        ("OLD", "Old Mutual Co", "C-005", "cancelled", "Legacy", "monthly", "400", "2019-01-01"),
    ]
    return [
        Contract(
            client_id=client_id,
            client_name=name,
            contract_id=contract_id,
            status=status,
            product=product,
            billing_frequency=frequency,
            current_mrr=mrr,
            start_date=start,
        )
        for client_id, name, contract_id, status, product, frequency, mrr, start in rows
    ]


def build_invoices() -> list[Invoice]:
    rows = [
        ("F-100", "ACME", "2024-04-01", "1180", "recurring"),
        ("F-101", "ACME", "2024-05-01", "1200", "recurring"),
        ("F-102", "ACME", "2024-06-01", "1200", "recurring"),
        ("F-103", "INDXA", "2024-01-10", "7200", "recurring"),
        ("F-104", "INDXA", "2024-04-10", "7500", "recurring"),
        ("F-105", "GLOB", "2024-02-01", "10800", "recurring"),
        ("F-106", "NOVA", "2024-06-03", "3000", "non_recurring"),
        ("F-107", "Stark", "2024-01-20", "600", "recurring"),
        ("F-108", "Stark", "2024-04-20", "600", "recurring"),
        ("F-109", "Stark", "2024-05-02", "not-a-number", "other"),
    ]
    return [
        Invoice(
            invoice_id=invoice_id,
            customer_name=customer,
            invoice_date=invoice_date,
            amount_net=amount,
            revenue_category=category,
            status="paid",
        )
        for invoice_id, customer, invoice_date, amount, category in rows
    ]


def _print_table(payload: dict) -> None:
    print(f"Forecast as of {payload['calculatedAt']} (FY{payload['fiscalYear']})")
    print(f"  Total MRR            {payload['totalMRR']:>14}")
    for horizon in payload["horizons"]:
        print(f"  {horizon['label']:<20} {horizon['value']:>14}")
    print(f"  Invoiced YTD         {payload['facturadoYTD']:>14}")
    print(f"  Remaining FY ({payload['mesesRestantesFY']:>2} m)  {payload['forecastRestanteFY']:>14}")
    print(f"  Estimated FY total   {payload['totalEstimadoFY']:>14}")
    print()
    print(f"  {'Client':<24}{'Source':<10}{'Cadence':<11}{'MRR':>12}{'Share %':>9}{'FY fcst':>14}")
    for row in payload["clients"]:
        print(
            f"  {row['clientName']:<24}{row['source']:<10}{row['billingFrequency']:<11}"
            f"{row['mrrEstimado']:>12}{row['percentOfTotal']:>9}{row['forecastFY']:>14}"
        )
    if payload["dataQualityIssues"]:
        print()
        for issue in payload["dataQualityIssues"]:
            print(f"  ! {issue['code']} {issue['recordRef']}: {issue['detail']}")


def main() -> int:
    parser = argparse.ArgumentParser(description="Revenue forecast scenario demo")
    parser.add_argument("--as-of", type=date.fromisoformat, default=DEFAULT_AS_OF,
                        help="Reference date (YYYY-MM-DD)")
    parser.add_argument("--config", default="default",
                        help="Configuration set name in forecast_config/sets/")
    parser.add_argument("--json", action="store_true",
                        help="Print the dashboard payload as JSON")
    parser.add_argument("--verbose", action="store_true",
                        help="Emit structured logs to stderr")
    args = parser.parse_args()

    configure_logging(level=logging.INFO if args.verbose else logging.WARNING)

    service = RevenueForecastService.from_config_name(args.config)
    forecast = service.forecast(build_contracts(), build_invoices(), as_of=args.as_of)

    if args.json:
        print(to_json(forecast, indent=2))
    else:
        _print_table(to_payload(forecast))
    return 0


if __name__ == "__main__":
    sys.exit(main())
