# Arithmetic question generator.
# Every question is "<a> <op> <b>" with an exact, non-negative integer answer.

from __future__ import annotations

import logging
import os
import random
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from sympy import Integer
from sympy.parsing.sympy_parser import parse_expr, standard_transformations

from errors import GenerationExhausted

logger = logging.getLogger("math-quiz.generator")

ADD, SUB, MUL, DIV = "+", "-", "x", "÷"

# Upper bound for rejection sampling before falling back to a direct construction
MAX_RETRIES = 1000


@dataclass(frozen=True)
class Tier:
    name: str
    weights: Tuple[Tuple[str, int], ...]
    add_range: Tuple[int, int]
    mul_range: Tuple[int, int]
    mul_second_range: Tuple[int, int]
    div_range: Tuple[int, int]
    max_dividend: int


TIERS: Dict[str, Tier] = {
    "small": Tier(
        name="small",
        weights=((ADD, 1), (SUB, 1), (MUL, 1), (DIV, 1)),
        add_range=(2, 100),
        mul_range=(2, 100),
        mul_second_range=(3, 30),
        div_range=(3, 30),
        max_dividend=100,
    ),
    # fewer divisions, bigger numbers
    "large": Tier(
        name="large",
        weights=((ADD, 2), (SUB, 2), (MUL, 2), (DIV, 1)),
        add_range=(2, 1000),
        mul_range=(2, 100),
        mul_second_range=(2, 100),
        div_range=(9, 50),
        max_dividend=2500,
    ),
}

DEFAULT_TIER = os.getenv("QUIZ_DIFFICULTY", "large")


def get_tier(name: Optional[str] = None) -> Tier:
    key = (name or DEFAULT_TIER).strip().lower()
    try:
        return TIERS[key]
    except KeyError:
        raise ValueError(f"unknown difficulty tier {key!r}; choose one of {sorted(TIERS)}") from None


def evaluate_expression(expression: str) -> int:
    """Exact integer value of a rendered question such as ``"84 ÷ 12"``."""
    src = expression.replace(MUL, "*").replace(DIV, "/")
    try:
        value = parse_expr(src, transformations=standard_transformations, evaluate=True)
    except Exception as e:
        raise ValueError(f"cannot parse {expression!r}") from e
    if not isinstance(value, Integer):
        raise ValueError(f"{expression!r} does not evaluate to an integer")
    return int(value)


def _addition(rng: random.Random, tier: Tier) -> Tuple[int, int, int]:
    a, b = rng.randint(*tier.add_range), rng.randint(*tier.add_range)
    return a, b, a + b


def _subtraction(rng: random.Random, tier: Tier) -> Tuple[int, int, int]:
    for _ in range(MAX_RETRIES):
        a, b = rng.randint(*tier.add_range), rng.randint(*tier.add_range)
        if a >= b:
            return a, b, a - b
    a, b = sorted((rng.randint(*tier.add_range), rng.randint(*tier.add_range)), reverse=True)
    return a, b, a - b


def _multiplication(rng: random.Random, tier: Tier) -> Tuple[int, int, int]:
    a, b = rng.randint(*tier.mul_range), rng.randint(*tier.mul_second_range)
    return a, b, a * b


def _division(rng: random.Random, tier: Tier) -> Tuple[int, int, int]:
    lo, hi = tier.div_range
    for _ in range(MAX_RETRIES):
        divisor, quotient = rng.randint(lo, hi), rng.randint(lo, hi)
        if divisor * quotient <= tier.max_dividend:
            return divisor * quotient, divisor, quotient

    # pick the quotient straight from the range the bound still allows
    divisor = rng.randint(lo, hi)
    top = min(hi, tier.max_dividend // divisor)
    if top < lo:
        divisor = lo
        top = min(hi, tier.max_dividend // divisor)
    if top < lo:
        raise GenerationExhausted(
            f"tier {tier.name!r} cannot produce a division with dividend <= {tier.max_dividend}"
        )
    quotient = rng.randint(lo, top)
    return divisor * quotient, divisor, quotient


_BUILDERS = {
    ADD: _addition,
    SUB: _subtraction,
    MUL: _multiplication,
    DIV: _division,
}


def generate(rng: Optional[random.Random] = None, tier: Optional[Tier] = None) -> Tuple[str, int]:
    """Return ``(expression, answer)`` for one random question."""
    rng = rng or random.Random()
    tier = tier or get_tier()
    ops = [op for op, _ in tier.weights]
    weights = [w for _, w in tier.weights]

    op = rng.choices(ops, weights=weights, k=1)[0]
    a, b, answer = _BUILDERS[op](rng, tier)
    expression = f"{a} {op} {b}"

    if evaluate_expression(expression) != answer:
        raise GenerationExhausted(f"generated {expression!r} does not equal {answer}")
    logger.debug("Generated question: %s = %s", expression, answer)
    return expression, answer
