# primecee/domain/formula_templates.py

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from simpleeval import InvalidExpression, SimpleEval

logger = logging.getLogger(__name__)

STANDARD_TEMPLATE_ID = "standard"
LIGHTING_LED_TEMPLATE_ID = "lighting-led"
CUSTOM_TEMPLATE_ID = "custom"

# Єдині імена, доступні у виразі формули.
FORMULA_VARIABLES = (
    "KWH_CUMAC",
    "BONUS_DOM",
    "LED_WATT",
    "MWH_DIVISOR",
    "BONIFICATION",
    "COEFFICIENT",
)


@dataclass(frozen=True)
class FormulaTemplate:
    id: str
    expression: Optional[str] = None
    is_custom: bool = False


_TEMPLATES: Dict[str, FormulaTemplate] = {
    STANDARD_TEMPLATE_ID: FormulaTemplate(id=STANDARD_TEMPLATE_ID),
    LIGHTING_LED_TEMPLATE_ID: FormulaTemplate(
        id=LIGHTING_LED_TEMPLATE_ID,
        expression="KWH_CUMAC * BONUS_DOM * LED_WATT / MWH_DIVISOR",
    ),
    CUSTOM_TEMPLATE_ID: FormulaTemplate(id=CUSTOM_TEMPLATE_ID, is_custom=True),
}


def get_formula_template(template_id: Optional[str]) -> Optional[FormulaTemplate]:
    if not isinstance(template_id, str):
        return None
    return _TEMPLATES.get(template_id.strip())


def evaluate_formula_expression(expression: Optional[str], variables: Mapping[str, float]) -> Optional[float]:
    """
    Рахує вираз формули валоризації через simpleeval.

    Доступні тільки імена з FORMULA_VARIABLES, що є у variables,
    і арифметика; функцій немає. Синтаксична помилка, невідоме ім'я,
    ділення на нуль, не-число, нескінченність або значення <= 0 → None
    (калькулятор тоді залишає стандартну формулу).
    """
    if not expression or not expression.strip():
        return None

    names = {name: float(variables[name]) for name in FORMULA_VARIABLES if variables.get(name) is not None}
    evaluator = SimpleEval(names=names, functions={})

    try:
        value = evaluator.eval(expression.strip())
    except (InvalidExpression, SyntaxError, ZeroDivisionError, TypeError, ValueError, OverflowError) as exc:
        logger.warning("[CEE] Не вдалося порахувати формулу %r: %s", expression, exc)
        return None

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        logger.warning("[CEE] Формула %r дала не число: %r", expression, value)
        return None

    value = float(value)
    if not math.isfinite(value) or value <= 0:
        return None
    return value
