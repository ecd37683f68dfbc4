from datetime import date
from decimal import Decimal

import pytest

from performance.allocation import compute_labor, compute_operating_costs, match_category, prorate
from performance.config import build_rules
from performance.periods import month_segments, week_bounds
from sources.models import ExpenseEntry
from sources.reader import SourceReader


def _expense(venue, day, category, amount):
    return ExpenseEntry.objects.create(
        venue=venue, accrual_date=day, category_label=category, amount=Decimal(amount),
    )


def test_prorate_uses_days_of_month_inside_window():
    january, february = month_segments(date(2024, 1, 29), date(2024, 2, 4))
    assert prorate(Decimal("3100"), january) == Decimal("300")
    assert prorate(Decimal("2900"), february) == Decimal("400")


@pytest.mark.django_db
def test_fixed_costs_are_prorated_across_month_boundary(venue, week):
    # Booked outside the week but inside the overlapped months.
    _expense(venue, date(2024, 1, 5), "SALARIO FUNCIONARIOS", "-3100.00")
    _expense(venue, date(2024, 2, 20), "Salario Funcionarios ", "-2900.00")
    # Another month entirely.
    _expense(venue, date(2024, 3, 5), "SALARIO FUNCIONARIOS", "-5000.00")

    figures = compute_labor(SourceReader(), venue.pk, week, build_rules(venue))

    assert figures.fixed_cost == Decimal("700.00")
    assert figures.breakdown["SALARIO FUNCIONARIOS"] == "700.00"


@pytest.mark.django_db
def test_fixed_cost_in_single_month_week(venue):
    _expense(venue, date(2024, 1, 5), "PRO LABORE", "3100.00")

    figures = compute_labor(SourceReader(), venue.pk, week_bounds(2024, 2), build_rules(venue))

    assert figures.fixed_cost == Decimal("700.00")


@pytest.mark.django_db
def test_variable_costs_only_count_inside_week(venue, week):
    _expense(venue, date(2024, 1, 30), "FREELA BAR", "-200.00")
    _expense(venue, date(2024, 2, 1), "Alimentacao", "50.00")
    _expense(venue, date(2024, 2, 10), "FREELA BAR", "-999.00")
    _expense(venue, date(2024, 2, 1), "MANUTENÇÃO", "-400.00")

    figures = compute_labor(SourceReader(), venue.pk, week, build_rules(venue))

    assert figures.variable_cost == Decimal("250.00")
    assert figures.breakdown["FREELA BAR"] == "200.00"
    assert figures.breakdown["ALIMENTAÇÃO"] == "50.00"


@pytest.mark.django_db
def test_labor_total_is_fixed_plus_variable(venue, week):
    _expense(venue, date(2024, 1, 5), "SALARIO FUNCIONARIOS", "-3100.00")
    _expense(venue, date(2024, 2, 20), "SALARIO FUNCIONARIOS", "-2900.00")
    _expense(venue, date(2024, 2, 1), "VALE TRANSPORTE", "-290.00")
    _expense(venue, date(2024, 1, 30), "FREELA COZINHA", "-150.00")

    figures = compute_labor(SourceReader(), venue.pk, week, build_rules(venue))

    # 700 salary + 290 * 4 / 29 transport + 150 freelance
    assert figures.fixed_cost == Decimal("740.00")
    assert figures.variable_cost == Decimal("150.00")
    assert figures.labor_cost == figures.fixed_cost + figures.variable_cost


@pytest.mark.django_db
def test_promotion_cost_matches_category_keywords(venue, week):
    _expense(venue, date(2024, 2, 2), "Atrações Programação", "-1000.00")
    _expense(venue, date(2024, 2, 3), "PRODUÇÃO EVENTOS - SOM", "-250.00")
    _expense(venue, date(2024, 2, 3), "FREELA BAR", "-10.00")

    figures = compute_labor(SourceReader(), venue.pk, week, build_rules(venue))

    assert figures.promotion_cost == Decimal("1250.00")
    assert figures.labor_cost == Decimal("10.00")


@pytest.mark.django_db
def test_suffixed_ledger_labels_still_count_as_labor(venue):
    march_week = week_bounds(2024, 10)
    _expense(venue, date(2024, 3, 1), "SALARIO FUNCIONARIOS - BAR", "-3100.00")
    _expense(venue, date(2024, 3, 8), "FREELA BAR (SEXTA)", "-500.00")

    figures = compute_labor(SourceReader(), venue.pk, march_week, build_rules(venue))

    # 3100 * 7 / 31 for the salary, the freelance shift as booked.
    assert figures.fixed_cost == Decimal("700.00")
    assert figures.variable_cost == Decimal("500.00")
    assert figures.labor_cost == Decimal("1200.00")
    assert figures.breakdown["SALARIO FUNCIONARIOS"] == "700.00"
    assert figures.breakdown["FREELA BAR"] == "500.00"


def test_match_category_returns_first_contained_label():
    categories = ("MATERIAIS DE LIMPEZA", "MATERIAIS")
    assert match_category("Materiais de Limpeza - Deck", categories) == "MATERIAIS DE LIMPEZA"
    assert match_category("MATERIAIS ESCRITORIO", categories) == "MATERIAIS"
    assert match_category("UTENSÍLIOS", categories) is None
    assert match_category("", categories) is None


@pytest.mark.django_db
def test_operating_costs_group_the_week_ledger(venue, week):
    _expense(venue, date(2024, 1, 30), "CUSTO COMIDA", "-1200.00")
    _expense(venue, date(2024, 2, 1), "Custo Bebidas - Chopp", "-800.00")
    _expense(venue, date(2024, 2, 1), "FREELA SEGURANÇA (SABADO)", "-300.00")
    _expense(venue, date(2024, 2, 2), "ALIMENTAÇÃO", "-90.00")
    _expense(venue, date(2024, 2, 2), "ESTORNO", "-40.00")
    _expense(venue, date(2024, 2, 3), "OUTROS OPERAÇÃO", "-60.00")
    _expense(venue, date(2024, 2, 3), "MATERIAIS DE LIMPEZA", "-70.00")
    _expense(venue, date(2024, 2, 3), "Materiais Descartaveis", "-30.00")
    _expense(venue, date(2024, 2, 4), "MANUTENÇÃO", "-400.00")
    _expense(venue, date(2024, 2, 4), "UTENSÍLIOS", "-25.00")
    # Outside the week.
    _expense(venue, date(2024, 2, 5), "CUSTO COMIDA", "-999.00")

    figures = compute_operating_costs(SourceReader(), venue.pk, week, build_rules(venue))

    assert figures.cogs_ledger == Decimal("2000.00")
    assert figures.freelance == Decimal("300.00")
    assert figures.meals == Decimal("90.00")
    assert figures.hr_other == Decimal("100.00")
    assert figures.materials == Decimal("100.00")
    assert figures.maintenance == Decimal("400.00")
    assert figures.utensils == Decimal("25.00")
    assert figures.as_fields()["cogs_ledger_amount"] == Decimal("2000.00")


@pytest.mark.django_db
def test_operating_cost_groups_follow_venue_overrides(venue, week):
    venue.performance_overrides = {"costs": {"groups": {"maintenance": ["REPAROS"], "shipping": ["FRETE"]}}}
    _expense(venue, date(2024, 2, 1), "REPAROS ELETRICA", "-150.00")
    _expense(venue, date(2024, 2, 1), "MANUTENÇÃO", "-400.00")
    _expense(venue, date(2024, 2, 1), "FRETE", "-20.00")

    figures = compute_operating_costs(SourceReader(), venue.pk, week, build_rules(venue))

    assert figures.maintenance == Decimal("150.00")
    # Groups missing from the override are empty.
    assert figures.cogs_ledger == Decimal("0.00")
