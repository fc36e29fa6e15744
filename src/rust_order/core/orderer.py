from collections.abc import Sequence

from rust_order.models import CANONICAL_ORDER, Category, ItemUnit

_SECTION_RANK = {category: rank for rank, category in enumerate(CANONICAL_ORDER)}


def section_rank(category: Category) -> int:
    return _SECTION_RANK[category]


def order_units(units: Sequence[ItemUnit]) -> list[ItemUnit]:
    """Group units into canonical sections while OTHER units keep their slots.

    Movable units are sorted by (section, original index) and threaded through
    the slots the OTHER units leave free, so the sort is stable per category.
    """
    movable = sorted(
        (unit for unit in units if unit.category is not Category.OTHER),
        key=lambda unit: (section_rank(unit.category), unit.index),
    )
    queue = iter(movable)
    return [unit if unit.category is Category.OTHER else next(queue) for unit in units]
