"""
Condition Evaluator

Numeric comparisons used by condition rules (minNum, maxNum, betweenNum).
Regex patterns cannot compare magnitudes ("9" sorts after "10"), so these
rules convert the value to a float and compare it against numeric bounds.
"""

import math
import operator as _op
import re
from enum import Enum
from typing import Optional

# Leading numeric prefix accepted by parseFloat-style conversion
_NUMBER_PREFIX = re.compile(
    r"^\s*([+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))"
)


class Operator(Enum):
    """Comparison operators supported by condition rules."""

    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="
    EQ = "=="
    NE = "!="

    @classmethod
    def parse(cls, symbol: str) -> "Operator":
        """
        Resolve an operator from its symbol.

        Accepts the legacy spellings "=" and "<>" as aliases of "==" and "!=".

        Raises:
            ValueError: If the symbol is not a known operator
        """
        symbol = _ALIASES.get(symbol, symbol)
        return cls(symbol)


_ALIASES = {"=": "==", "<>": "!="}

_FUNCS = {
    Operator.LT: _op.lt,
    Operator.LE: _op.le,
    Operator.GT: _op.gt,
    Operator.GE: _op.ge,
    Operator.EQ: _op.eq,
    Operator.NE: _op.ne,
}


def evaluate(operator: Operator, left: float, right: float) -> bool:
    """
    Test `left <operator> right`.

    NaN on either side fails every operator except "!=".
    """
    return bool(_FUNCS[operator](left, right))


def to_number(text: Optional[str]) -> float:
    """
    Convert text to a float the way a browser's parseFloat does.

    The longest leading numeric prefix is used ("12px" -> 12.0). Input with
    no numeric prefix, or None, becomes NaN.
    """
    if text is None:
        return math.nan
    if isinstance(text, (int, float)) and not isinstance(text, bool):
        return float(text)

    match = _NUMBER_PREFIX.match(str(text))
    if not match:
        return math.nan

    literal = match.group(1)
    if literal.endswith("Infinity"):
        return -math.inf if literal.startswith("-") else math.inf
    return float(literal)
