import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Union

from pydantic import ValidationError

from errors import InvalidConditionError
from models import Condition, DiscountApplied

logger = logging.getLogger(__name__)

Listener = Callable[[DiscountApplied], None]


class ConditionManager:
    """Named discount rules, evaluated against the items of a cart."""

    def __init__(self, fire_events: bool = False):
        self.fire_events = fire_events
        self._conditions: Dict[str, Condition] = {}
        self._listeners: List[Listener] = []

    def add(self, conditions: Iterable[Union[Mapping[str, Any], Condition]]) -> "ConditionManager":
        """Register several rules at once. Nothing is stored if any entry is invalid."""
        parsed = [self._parse(entry) for entry in conditions]
        for condition in parsed:
            self._conditions[condition.slug] = condition
        return self

    def define(
        self,
        slug: str,
        condition: Callable[[List[Any]], bool],
        discount: float,
        skip: bool = False,
    ) -> "ConditionManager":
        if not callable(condition):
            raise InvalidConditionError(f"Condition {slug!r} must be callable; use define_if for static values")
        return self.add([{"slug": slug, "condition": condition, "discount": discount, "skip": skip}])

    def define_if(self, slug: str, condition: bool, discount: float) -> "ConditionManager":
        if not isinstance(condition, bool):
            raise InvalidConditionError(f"Condition {slug!r} must be a boolean")
        return self.add([{"slug": slug, "condition": condition, "discount": discount}])

    def remove(self, slug: str) -> "ConditionManager":
        self._conditions.pop(slug, None)
        return self

    def get_conditions(self) -> Dict[str, Condition]:
        return dict(self._conditions)

    def subscribe(self, listener: Listener) -> "ConditionManager":
        self._listeners.append(listener)
        return self

    def evaluate(self, items: List[Any]) -> float:
        """Sum the discount percentages of every matched, non-skipped rule."""
        total = 0.0
        for condition in self._conditions.values():
            if condition.skip:
                continue
            if not condition.resolve(items):
                continue
            logger.debug("Condition %s matched (+%s%%)", condition.slug, condition.discount)
            total += condition.discount
            if self.fire_events:
                self._notify(DiscountApplied(
                    slug=condition.slug,
                    discount_percent=condition.discount,
                    condition_value=True,
                ))
        return total

    def _notify(self, event: DiscountApplied) -> None:
        for listener in self._listeners:
            listener(event)

    @staticmethod
    def _parse(entry: Union[Mapping[str, Any], Condition]) -> Condition:
        if isinstance(entry, Condition):
            return entry
        if not isinstance(entry, Mapping):
            raise InvalidConditionError(f"Condition must be a mapping, got {type(entry).__name__}")
        for key in ("slug", "condition"):
            if key not in entry:
                raise InvalidConditionError(f"Condition is missing required key {key!r}")
        data = dict(entry)
        if data.get("discount") is None:
            data["discount"] = 0.0
        try:
            return Condition.model_validate(data)
        except ValidationError as e:
            raise InvalidConditionError(f"Invalid condition {data.get('slug')!r}: {e}") from e
