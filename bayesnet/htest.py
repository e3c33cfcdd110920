"""Result of a hypothesis test."""

from __future__ import annotations

import math
from dataclasses import dataclass

_TWO_SIDED = frozenset(
    {"cor", "mc-cor", "smc-cor", "zf", "mc-zf", "smc-zf", "jt", "mc-jt", "smc-jt"}
)


@dataclass(frozen=True)
class HTest:
    """A hypothesis test: statistic, p-value and parameters."""

    statistic: float
    test: str
    p_value: float
    method: str = ""
    null_value: float = 0.0
    alternative: str = "greater"
    data_name: str = ""
    parameter: dict | None = None


def create_htest(stat, test, pvalue, df=None, b=None):
    """Build an :class:`HTest`.

    ``df`` may be ``None`` or NaN when the test has no degrees of freedom;
    ``b`` is the number of Monte Carlo samples, if any.
    """
    alternative = "two.sided" if test in _TWO_SIDED else "greater"
    no_df = df is None or math.isnan(df)
    if no_df:
        parameter = None if b is None else {"Monte Carlo samples": float(b)}
    elif b is None:
        parameter = {"df": float(df)}
    else:
        parameter = {"df": float(df), "Monte Carlo samples": float(b)}
    return HTest(
        statistic=float(stat),
        test=test,
        p_value=float(pvalue),
        alternative=alternative,
        parameter=parameter,
    )