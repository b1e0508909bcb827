"""Case-when bucketing."""

from __future__ import annotations

from collections.abc import Callable, Sequence

import numpy as np
import pandas as pd

__all__ = ["case_when", "bucket_mpg", "bucket_invoice_total"]

Condition = Callable[[pd.DataFrame], pd.Series] | pd.Series | np.ndarray


def case_when(
    df: pd.DataFrame,
    cases: Sequence[tuple[Condition, object]],
    default: object = None,
) -> pd.Series:
    """Return the value of the first matching case for every row.

    ``cases`` is an ordered sequence of ``(condition, value)`` pairs. A
    condition is a boolean mask or a callable taking ``df`` and returning
    one. Rows matching no case get ``default``.
    """

    if not cases:
        raise ValueError("case_when needs at least one case")
    masks = []
    choices = []
    for condition, value in cases:
        mask = condition(df) if callable(condition) else condition
        mask = np.asarray(mask, dtype=bool)
        if mask.shape != (len(df),):
            raise ValueError("Each condition must produce one boolean per row")
        masks.append(mask)
        choices.append(np.full(len(df), value, dtype=object))
    fallback = np.full(len(df), default, dtype=object)
    picked = np.select(masks, choices, default=fallback)
    return pd.Series(picked, index=df.index)


def bucket_mpg(cars: pd.DataFrame, column: str = "mpg") -> pd.Series:
    """Label fuel economy as ``low`` (< 15), ``medium`` (< 25) or ``high``."""

    return case_when(
        cars,
        [
            (lambda d: d[column] < 15, "low"),
            (lambda d: d[column] < 25, "medium"),
        ],
        default="high",
    )


def bucket_invoice_total(invoices: pd.DataFrame, column: str = "Total") -> pd.Series:
    """Label invoices ``small`` (< 2), ``medium`` (< 6) or ``large``."""

    return case_when(
        invoices,
        [
            (lambda d: d[column] < 2, "small"),
            (lambda d: d[column] < 6, "medium"),
        ],
        default="large",
    )
