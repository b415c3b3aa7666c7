# accounting/services/financial_summary.py

"""
FINANCIAL SUMMARY (READ-ONLY)

Period figures for the back office dashboard:
- revenue      = total of paid sales in range
- expenses     = total of expenses in range
- net_profit   = revenue - expenses
- cash_in/out  = positive / negative cash ledger entries in range
- profit_margin = net_profit / revenue * 100 (0 with no revenue)
"""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

from django.db.models import Count, Q, Sum

from accounting.models import CashLedgerEntry, Expense
from sales.models import Sale
from store.services.periods import filter_period, parse_period

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _percent(part, whole) -> Decimal:
    whole = _money(whole)
    if whole == ZERO:
        return ZERO
    return _money(_money(part) / whole * 100)


def get_financial_summary(*, start=None, end=None) -> dict:
    start_day, end_day = parse_period(start, end)

    sales = filter_period(
        Sale.objects.filter(payment_status=Sale.PAYMENT_STATUS_PAID),
        "sale_date",
        start_day,
        end_day,
    )
    revenue = _money(sales.aggregate(total=Sum("total_amount"))["total"])

    expenses = filter_period(Expense.objects.all(), "expense_date", start_day, end_day)
    expense_total = _money(expenses.aggregate(total=Sum("amount"))["total"])

    entries = filter_period(CashLedgerEntry.objects.all(), "created_at", start_day, end_day)
    cash = entries.aggregate(
        cash_in=Sum("amount", filter=Q(amount__gt=0)),
        cash_out=Sum("amount", filter=Q(amount__lt=0)),
    )
    cash_in = _money(cash["cash_in"])
    cash_out = abs(_money(cash["cash_out"]))

    net_profit = revenue - expense_total

    return {
        "start_date": start_day,
        "end_date": end_day,
        "revenue": revenue,
        "expenses": expense_total,
        "net_profit": net_profit,
        "cash_in": cash_in,
        "cash_out": cash_out,
        "cash_balance": cash_in - cash_out,
        "profit_margin": _percent(net_profit, revenue),
    }


def expense_breakdown(*, start=None, end=None) -> list[dict]:
    qs = filter_period(Expense.objects.all(), "expense_date", start, end)
    rows = list(
        qs.values("category")
        .annotate(amount=Sum("amount"), count=Count("id"))
        .order_by("-amount", "category")
    )
    grand_total = sum((_money(r["amount"]) for r in rows), ZERO)

    return [
        {
            "category": r["category"],
            "amount": _money(r["amount"]),
            "count": r["count"],
            "percentage": _percent(r["amount"], grand_total),
        }
        for r in rows
    ]


def cash_flow_summary(*, start=None, end=None) -> list[dict]:
    qs = filter_period(CashLedgerEntry.objects.all(), "created_at", start, end)
    rows = (
        qs.values("entry_type")
        .annotate(
            inflow=Sum("amount", filter=Q(amount__gt=0)),
            outflow=Sum("amount", filter=Q(amount__lt=0)),
            count=Count("id"),
        )
        .order_by("entry_type")
    )

    out = []
    for r in rows:
        inflow = _money(r["inflow"])
        outflow = abs(_money(r["outflow"]))
        out.append(
            {
                "entry_type": r["entry_type"],
                "inflow": inflow,
                "outflow": outflow,
                "net": inflow - outflow,
                "count": r["count"],
            }
        )
    return out
