"""Exploratory data-wrangling idioms."""

from .buckets import bucket_invoice_total, bucket_mpg, case_when
from .grouping import count_by, summarise_by, top_n_by
from .joins import albums_with_artists, anti_join, employees_with_managers, inner_join, left_join
from .temporal import (
    add_employee_ages,
    days_between,
    to_datetime_columns,
    with_change,
    with_lag_lead,
    with_month,
    years_between,
)

__all__ = [
    "inner_join",
    "left_join",
    "anti_join",
    "albums_with_artists",
    "employees_with_managers",
    "summarise_by",
    "count_by",
    "top_n_by",
    "with_lag_lead",
    "with_change",
    "to_datetime_columns",
    "years_between",
    "days_between",
    "add_employee_ages",
    "with_month",
    "case_when",
    "bucket_mpg",
    "bucket_invoice_total",
]
