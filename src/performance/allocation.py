"""Labor, promotion and operating costs for a week, with month-boundary proration.

Fixed categories (payroll and the like) are booked once per month, so the
week receives each overlapped month's total weighted by the share of that
month's days the week covers. Variable categories are summed as booked
inside the week.

Ledger labels are matched by containment: a row belongs to the first
configured category whose normalized label appears in the row's normalized
label, so "SALARIO FUNCIONARIOS - BAR" still counts as payroll.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from performance.periods import month_segments
from performance.utils import ZERO, money, normalize_label, venue_window

COST_GROUPS = ("cogs_ledger", "freelance", "meals", "hr_other", "materials", "maintenance", "utensils")


@dataclass
class LaborFigures:
    labor_cost: Decimal = ZERO
    fixed_cost: Decimal = ZERO
    variable_cost: Decimal = ZERO
    promotion_cost: Decimal = ZERO
    breakdown: dict = field(default_factory=dict)

    def as_fields(self) -> dict:
        return {
            "labor_cost": self.labor_cost,
            "promotion_cost": self.promotion_cost,
            "labor_cost_breakdown": self.breakdown,
        }


@dataclass
class OperatingCostFigures:
    cogs_ledger: Decimal = ZERO
    freelance: Decimal = ZERO
    meals: Decimal = ZERO
    hr_other: Decimal = ZERO
    materials: Decimal = ZERO
    maintenance: Decimal = ZERO
    utensils: Decimal = ZERO

    def as_fields(self) -> dict:
        return {
            "cogs_ledger_amount": self.cogs_ledger,
            "freelance_cost": self.freelance,
            "meal_cost": self.meals,
            "hr_other_cost": self.hr_other,
            "materials_cost": self.materials,
            "maintenance_cost": self.maintenance,
            "utensils_cost": self.utensils,
        }


def prorate(month_total, segment) -> Decimal:
    """Share of ``month_total`` falling inside the week for one month segment."""
    return Decimal(month_total) * segment.days_in_window / segment.days_in_month


def match_category(label, categories):
    """First entry of ``categories`` contained in ``label``, or ``None``."""
    text = normalize_label(label)
    if not text:
        return None
    for category in categories:
        needle = normalize_label(category)
        if needle and needle in text:
            return category
    return None


def _totals_by_category(rows, categories) -> dict:
    """Sum absolute amounts per configured category (keyed by its display label)."""
    totals = {label: Decimal("0") for label in categories}
    for row in rows:
        label = match_category(row["category_label"], categories)
        if label is not None:
            totals[label] += abs(row["amount"])
    return totals


def _week_expenses(reader, venue_id, period):
    return reader.fetch_all(
        "expenses",
        ["category_label", "amount"],
        venue_window(venue_id, "accrual_date", period.start, period.end),
    )


def compute_labor(reader, venue_id, period, rules) -> LaborFigures:
    labor = rules.labor

    fixed_allocated = {label: Decimal("0") for label in labor.fixed_categories}
    for segment in month_segments(period.start, period.end):
        month_rows = reader.fetch_all(
            "expenses",
            ["category_label", "amount"],
            venue_window(venue_id, "accrual_date", segment.month_start, segment.month_end),
        )
        for label, month_total in _totals_by_category(month_rows, labor.fixed_categories).items():
            fixed_allocated[label] += prorate(month_total, segment)

    week_rows = _week_expenses(reader, venue_id, period)
    variable_totals = _totals_by_category(week_rows, labor.variable_categories)
    promotion = sum(
        (
            abs(row["amount"])
            for row in week_rows
            if match_category(row["category_label"], labor.promotion_categories) is not None
        ),
        Decimal("0"),
    )

    fixed_total = sum(fixed_allocated.values(), Decimal("0"))
    variable_total = sum(variable_totals.values(), Decimal("0"))
    breakdown = {label: str(money(amount)) for label, amount in {**fixed_allocated, **variable_totals}.items()}

    return LaborFigures(
        labor_cost=money(fixed_total + variable_total),
        fixed_cost=money(fixed_total),
        variable_cost=money(variable_total),
        promotion_cost=money(promotion),
        breakdown=breakdown,
    )


def compute_operating_costs(reader, venue_id, period, rules) -> OperatingCostFigures:
    """Week totals of the ledger cost groups in ``rules.costs.groups``.

    A row counts at most once per group; groups may overlap each other.
    """
    groups = dict(rules.costs.groups)
    rows = _week_expenses(reader, venue_id, period)
    totals = {}
    for name in COST_GROUPS:
        categories = groups.get(name, ())
        totals[name] = money(
            sum(
                (abs(row["amount"]) for row in rows if match_category(row["category_label"], categories) is not None),
                Decimal("0"),
            )
        )
    return OperatingCostFigures(**totals)
