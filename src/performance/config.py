"""Rule sets used by the weekly performance aggregators.

Each aggregator receives its own frozen rule object. Defaults below are the
house conventions; ``settings.PERFORMANCE_RULES`` and a venue's
``performance_overrides`` may replace any of them, section by section::

    {
        "delays": {"kitchen": {"minor_minutes": 12}},
        "stockout": {"ignored_locations": ["Pegue e Pague"]},
    }
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields, is_dataclass, replace
from decimal import Decimal

from django.conf import settings

logger = logging.getLogger("venueops")


@dataclass(frozen=True)
class RevenueRules:
    # Payment methods that are bookkeeping conventions, not cash.
    house_account_methods: tuple = ("Conta Assinada",)
    # Share of net revenue reserved for sales tax.
    tax_rate: Decimal = Decimal("0.07")
    # Sale types or table labels marking counter (walk-up) sales.
    counter_sale_keywords: tuple = ("balc",)


@dataclass(frozen=True)
class LaborRules:
    fixed_categories: tuple = (
        "SALARIO FUNCIONARIOS",
        "VALE TRANSPORTE",
        "ADICIONAIS",
        "PRO LABORE",
        "PROVISÃO TRABALHISTA",
    )
    variable_categories: tuple = (
        "ALIMENTAÇÃO",
        "FREELA ATENDIMENTO",
        "FREELA BAR",
        "FREELA COZINHA",
        "FREELA LIMPEZA",
        "FREELA SEGURANÇA",
    )
    promotion_categories: tuple = (
        "ATRAÇÕES PROGRAMAÇÃO",
        "PRODUÇÃO EVENTOS",
    )


@dataclass(frozen=True)
class CostRules:
    # Ledger categories summed into the operating cost groups of the week.
    groups: tuple = (
        ("cogs_ledger", ("CUSTO COMIDA", "CUSTO BEBIDAS", "CUSTO DRINKS", "CUSTO OUTROS")),
        ("freelance", ("FREELA ATENDIMENTO", "FREELA BAR", "FREELA COZINHA", "FREELA LIMPEZA", "FREELA SEGURANÇA")),
        ("meals", ("ALIMENTAÇÃO",)),
        ("hr_other", ("RECURSOS HUMANOS", "OUTROS OPERAÇÃO", "ESTORNO")),
        ("materials", ("MATERIAIS DE LIMPEZA", "MATERIAIS DESCARTÁVEIS", "MATERIAIS")),
        ("maintenance", ("MANUTENÇÃO",)),
        ("utensils", ("UTENSÍLIOS",)),
    )


@dataclass(frozen=True)
class DelayChannelRules:
    name: str
    elapsed_column: str
    category: str
    locations: tuple
    minor_minutes: int
    major_minutes: int


@dataclass(frozen=True)
class DelayRules:
    drink: DelayChannelRules = DelayChannelRules(
        name="drink",
        elapsed_column="launch_to_ready_seconds",
        category="drink",
        locations=(
            "Bar",
            "Batidos",
            "Montados",
            "Mexido",
            "Preshh",
            "Drinks",
            "Drinks Autorais",
            "Shot e Dose",
        ),
        minor_minutes=4,
        major_minutes=8,
    )
    kitchen: DelayChannelRules = DelayChannelRules(
        name="kitchen",
        elapsed_column="start_to_ready_seconds",
        category="food",
        locations=("Cozinha", "Cozinha 1", "Cozinha 2"),
        minor_minutes=15,
        major_minutes=20,
    )


@dataclass(frozen=True)
class StockoutRules:
    ignored_locations: tuple = ("Pegue e Pague", "Venda Volante")
    ignored_groups: tuple = (
        "Happy Hour",
        "Chegadeira",
        "Dose dupla",
        "Dose dupla!",
        "Dose dupla sem álcool",
        "Grupo adicional",
        "Insumos",
        "Promo chivas",
        "Uso interno",
    )
    # Regular expressions, matched case-insensitively against product names.
    ignored_name_patterns: tuple = (
        r"\[(HH|PP|DD|IN)\]",
        r"happy[\s-]?hour",
        r"(^|\s)HH(\s|$)",
        r"dose\s+du(pl|lp)a",
        r"\bbalde",
        r"\bgarrafa",
        r"open\s*bar",
    )
    location_groups: tuple = (
        ("bar", ("Bar", "Baldes", "Chopp")),
        ("drinks", ("Montados", "Batidos", "Shot e Dose", "Mexido", "Preshh", "Pressh", "Drinks", "Drinks Autorais")),
        ("kitchen", ("Cozinha", "Cozinha 1", "Cozinha 2")),
    )


@dataclass(frozen=True)
class RetentionRules:
    short_lag_days: int = 30
    long_lag_days: int = 60
    tolerance_days: int = 7
    min_phone_digits: int = 10
    new_customer_history_days: int = 365
    active_window_days: int = 90
    active_min_visits: int = 2


@dataclass(frozen=True)
class MixRules:
    category_locations: tuple = (
        ("beverages", ("Chopp", "Baldes", "Pegue e Pague", "PP", "Venda Volante", "Bar")),
        ("kitchen", ("Cozinha", "Cozinha 1", "Cozinha 2")),
        ("drinks", ("Preshh", "Drinks", "Drinks Autorais", "Mexido", "Shot e Dose", "Batidos", "Montados")),
    )
    bar_groups: tuple = (
        "Baldes",
        "Cervejas",
        "Bebidas",
        "Doses",
        "Dose Dupla",
        "Drinks Autorais",
        "Drinks Classicos",
        "Happy Hour",
        "Pegue e Pague",
        "Garrafas",
        "Vinhos",
        "Espressos",
        "Chopp",
    )
    kitchen_groups: tuple = (
        "Pratos Individuais",
        "Pratos Para Compartilhar",
        "Sanduíches",
        "Sobremesas",
        "Combos",
    )
    supply_group_keyword: str = "Insumo"
    happy_hour_group: str = "Happy Hour"


@dataclass(frozen=True)
class GuestRules:
    seated_statuses: tuple = ("seated",)
    confirmed_statuses: tuple = ("confirmed",)
    five_star_rating: int = 5


@dataclass(frozen=True)
class TimingRules:
    early_cutoff_hour: int = 19
    late_start_hour: int = 22
    # Hours before this belong to the previous night.
    day_start_hour: int = 6
    # Monday is 0.
    weekend_weekdays: tuple = (3, 4, 5, 6)


@dataclass(frozen=True)
class PerformanceRules:
    revenue: RevenueRules = field(default_factory=RevenueRules)
    labor: LaborRules = field(default_factory=LaborRules)
    costs: CostRules = field(default_factory=CostRules)
    delays: DelayRules = field(default_factory=DelayRules)
    stockout: StockoutRules = field(default_factory=StockoutRules)
    retention: RetentionRules = field(default_factory=RetentionRules)
    mix: MixRules = field(default_factory=MixRules)
    guest: GuestRules = field(default_factory=GuestRules)
    timing: TimingRules = field(default_factory=TimingRules)


def _coerce(current, value, path: str):
    if is_dataclass(current):
        if not isinstance(value, dict):
            raise ValueError(f"{path} expects a mapping.")
        return merge_rules(current, value, path)
    if isinstance(current, tuple):
        if current and isinstance(current[0], tuple):
            if isinstance(value, dict):
                value = value.items()
            return tuple((str(key), tuple(items)) for key, items in value)
        if isinstance(value, str):
            return (value,)
        return tuple(value)
    if isinstance(current, Decimal):
        return Decimal(str(value))
    if isinstance(current, bool):
        return bool(value)
    if isinstance(current, int):
        return int(value)
    if isinstance(current, str):
        return str(value)
    return value


def merge_rules(base, overrides: dict, path: str = "rules"):
    """Return ``base`` with matching keys of ``overrides`` applied."""
    if not overrides:
        return base
    known = {f.name for f in fields(base)}
    changes = {}
    for key, value in overrides.items():
        if key not in known:
            logger.warning("Ignoring unknown performance rule %s.%s.", path, key)
            continue
        try:
            changes[key] = _coerce(getattr(base, key), value, f"{path}.{key}")
        except (TypeError, ValueError, ArithmeticError) as exc:
            logger.warning("Ignoring invalid performance rule %s.%s: %s", path, key, exc)
    return replace(base, **changes)


def build_rules(venue=None) -> PerformanceRules:
    rules = merge_rules(PerformanceRules(), getattr(settings, "PERFORMANCE_RULES", None) or {})
    overrides = getattr(venue, "performance_overrides", None) or {}
    return merge_rules(rules, overrides, path=f"venue[{getattr(venue, 'pk', '?')}]")
