"""Condition Evaluator - Safe evaluation of transition conditions"""
from typing import Any, Callable, Iterable, Mapping, Optional

from ..domain.models import Condition
from ..domain.enums import ConditionOperator, parse_operator
from ..utils.logger import get_logger

logger = get_logger(__name__)

_MISSING = object()


def _kind(value: Any) -> Optional[str]:
    """Classify a value; bool is never a number"""
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "text"
    if isinstance(value, (list, tuple)):
        return "list"
    return None


def is_known_operator(raw: str) -> bool:
    """True if the evaluator understands the operator string"""
    try:
        parse_operator(raw)
        return True
    except (ValueError, AttributeError):
        return False


class ConditionEvaluator:
    """
    Evaluate transition conditions safely

    Uses a simple DSL - no eval() or exec(). Evaluation is total:
    type mismatches and unknown operators resolve to False.
    """

    def evaluate(self, condition: Condition, data: Mapping[str, Any]) -> bool:
        """
        Evaluate a single condition

        Args:
            condition: Condition to check
            data: Read-only application data

        Returns:
            True if the condition holds
        """
        try:
            operator = parse_operator(condition.operator)
        except (ValueError, AttributeError):
            logger.warning(
                f"Unknown condition operator '{condition.operator}' on field "
                f"'{condition.field}', evaluating to false"
            )
            return False

        field_value = self._get_field_value(condition.field, data)
        return self._compare(field_value, operator, condition.value)

    def evaluate_all(
        self,
        conditions: Iterable[Condition],
        data: Mapping[str, Any]
    ) -> bool:
        """AND-reduce a condition list; an empty list is unconditional"""
        return all(self.evaluate(condition, data) for condition in conditions)

    def _get_field_value(self, field_path: str, data: Mapping[str, Any]) -> Any:
        """
        Get field value from data

        Exact key first, then dot notation:
        "documents.transcript" -> data["documents"]["transcript"]
        """
        if field_path in data:
            return data[field_path]

        if "." not in field_path:
            return None

        value: Any = data
        for part in field_path.split("."):
            if isinstance(value, Mapping):
                value = value.get(part, _MISSING)
                if value is _MISSING:
                    return None
            else:
                return None

        return value

    def _compare(
        self,
        field_value: Any,
        operator: ConditionOperator,
        compare_value: Any
    ) -> bool:
        """Compare values using operator"""

        if operator == ConditionOperator.EQUALS:
            return self._equals(field_value, compare_value) is True

        elif operator == ConditionOperator.NOT_EQUALS:
            return self._equals(field_value, compare_value) is False

        elif operator == ConditionOperator.GREATER_THAN:
            return self._compare_ordered(field_value, compare_value, lambda a, b: a > b)

        elif operator == ConditionOperator.LESS_THAN:
            return self._compare_ordered(field_value, compare_value, lambda a, b: a < b)

        elif operator == ConditionOperator.GREATER_THAN_OR_EQUALS:
            return self._compare_ordered(field_value, compare_value, lambda a, b: a >= b)

        elif operator == ConditionOperator.LESS_THAN_OR_EQUALS:
            return self._compare_ordered(field_value, compare_value, lambda a, b: a <= b)

        elif operator == ConditionOperator.CONTAINS:
            return self._contains(field_value, compare_value) is True

        elif operator == ConditionOperator.NOT_CONTAINS:
            return self._contains(field_value, compare_value) is False

        elif operator == ConditionOperator.IN:
            return self._member_of(field_value, compare_value) is True

        elif operator == ConditionOperator.NOT_IN:
            return self._member_of(field_value, compare_value) is False

        elif operator == ConditionOperator.EMPTY:
            return self._is_empty(field_value)

        elif operator == ConditionOperator.NOT_EMPTY:
            return not self._is_empty(field_value)

        return False

    # The helpers below return None when the operands are incomparable, so
    # both the positive and the negated operator fail closed.

    def _equals(self, left: Any, right: Any) -> Optional[bool]:
        left_kind, right_kind = _kind(left), _kind(right)
        if left_kind is None or left_kind != right_kind:
            return None
        if left_kind == "list":
            return list(left) == list(right)
        return left == right

    def _compare_ordered(
        self,
        left: Any,
        right: Any,
        comparator: Callable[[Any, Any], bool]
    ) -> bool:
        left_kind = _kind(left)
        if left_kind not in ("number", "text") or left_kind != _kind(right):
            return False
        return comparator(left, right)

    def _contains(self, haystack: Any, needle: Any) -> Optional[bool]:
        haystack_kind = _kind(haystack)
        if haystack_kind == "list":
            needle_kind = _kind(needle)
            return any(
                item is None and needle is None
                or (_kind(item) == needle_kind and item == needle)
                for item in haystack
            )
        if haystack_kind == "text" and _kind(needle) == "text":
            return needle in haystack
        return None

    def _member_of(self, value: Any, options: Any) -> Optional[bool]:
        if value is None or _kind(options) != "list":
            return None
        value_kind = _kind(value)
        if value_kind in (None, "list"):
            return None
        return any(
            _kind(option) == value_kind and option == value
            for option in options
        )

    def _is_empty(self, value: Any) -> bool:
        if value is None:
            return True
        if isinstance(value, (str, list, tuple, dict)):
            return len(value) == 0
        return False
