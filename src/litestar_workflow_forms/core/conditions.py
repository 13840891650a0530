"""Condition evaluators.

A condition in a workflow definition names an evaluator class and its
parameters. Evaluators are pure predicates over the workflow context, they
never modify it.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from typing import Any, TypeAlias

from litestar_workflow_forms.exceptions import DefinitionError

__all__ = ["CONDITION_EVALUATORS", "ConditionEvaluator", "evaluate_test_expression"]

ConditionEvaluator: TypeAlias = Callable[[Mapping[str, Any], Mapping[str, Any]], bool]
"""Signature of an evaluator: ``(params, context) -> bool``."""

_TEST_RE = re.compile(
    r"""^\s*(?P<neg>!)?\s*\(?\s*
        (?:\$|context\.)(?P<key>\w+)
        \s*\)?\s*
        (?:(?P<op>==|!=)\s*(?P<value>.+?))?
        \s*$""",
    re.VERBOSE,
)


def _literal(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
        return value[1:-1]
    return value


def evaluate_test_expression(expression: str, context: Mapping[str, Any]) -> bool:
    """Evaluate a ``test`` expression against the context.

    Supported forms are ``$key`` (truthiness), ``!$key``, ``$key == value`` and
    ``$key != value``; ``context.key`` may be used instead of ``$key``.

    Args:
        expression: The expression from the condition definition.
        context: The workflow context.

    Returns:
        The boolean outcome.

    Raises:
        DefinitionError: If the expression cannot be parsed.
    """
    match = _TEST_RE.match(expression)
    if not match:
        raise DefinitionError(f"Unsupported condition expression '{expression}'")

    current = context.get(match.group("key"))
    op = match.group("op")
    if op is None:
        result = bool(current)
    else:
        expected = _literal(match.group("value"))
        result = (str(current) == expected) if op == "==" else (str(current) != expected)

    return not result if match.group("neg") else result


def _evaluate(params: Mapping[str, Any], context: Mapping[str, Any]) -> bool:
    return evaluate_test_expression(str(params.get("test", "")), context)


def _exists(params: Mapping[str, Any], context: Mapping[str, Any]) -> bool:
    return context.get(params["key"]) not in (None, "")


def _is_true(params: Mapping[str, Any], context: Mapping[str, Any]) -> bool:
    return str(context.get(params["key"], "")).lower() in ("1", "true", "yes", "on")


CONDITION_EVALUATORS: dict[str, ConditionEvaluator] = {
    "Evaluate": _evaluate,
    "Exists": _exists,
    "IsTrue": _is_true,
}
"""Evaluators known to the definition model, keyed by class name."""
