"""
Aggregation Engine

Grouped sums, counts, distinct counts and averages over the fact table and
its dimensions. Every magnitude and KPI report is expressed through
``aggregate``.

Null handling follows SQL: null group keys form their own group and null
measure values are ignored by every reducer.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Union

import polars as pl
import structlog

logger = structlog.get_logger(__name__)


class Reducer(str, Enum):
    """Reduction applied to a measure column"""
    SUM = "sum"
    COUNT = "count"
    COUNT_DISTINCT = "count_distinct"
    AVG = "avg"

    def expr(self, column: str) -> pl.Expr:
        col = pl.col(column)
        if self is Reducer.SUM:
            return col.sum()
        if self is Reducer.COUNT:
            return col.count()
        if self is Reducer.COUNT_DISTINCT:
            return col.drop_nulls().n_unique()
        return col.mean()


@dataclass(frozen=True)
class Measure:
    """A (column, reducer) pair with its output name"""
    column: str
    reducer: Reducer
    alias: Optional[str] = None

    @property
    def name(self) -> str:
        return self.alias or f"{self.reducer.value}_{self.column}"

    def expr(self) -> pl.Expr:
        return self.reducer.expr(self.column).alias(self.name)


def aggregate(
    df: pl.DataFrame,
    by: Union[str, Sequence[str]],
    measures: Sequence[Measure],
    sort_by: Optional[Union[str, Sequence[str]]] = None,
    descending: bool = True,
) -> pl.DataFrame:
    """
    Group ``df`` by ``by`` and reduce each measure within every group.

    Args:
        df: Fact or dimension frame
        by: Grouping column(s)
        measures: Measures to compute per group
        sort_by: Column(s) to order by (default: the first measure)
        descending: Direction for ``sort_by``; group keys break ties ascending

    Returns:
        One row per distinct key combination, nulls sorted last
    """
    if not measures:
        raise ValueError("At least one measure is required")

    keys = [by] if isinstance(by, str) else list(by)
    result = df.group_by(keys).agg([m.expr() for m in measures])

    sort_columns = [sort_by] if isinstance(sort_by, str) else list(sort_by or [measures[0].name])
    tie_breakers = [k for k in keys if k not in sort_columns]

    result = result.sort(
        sort_columns + tie_breakers,
        descending=[descending] * len(sort_columns) + [False] * len(tie_breakers),
        nulls_last=True,
    )

    logger.debug("Aggregated", keys=keys, measures=[m.name for m in measures], groups=len(result))
    return result


def join_dimension(
    facts: pl.DataFrame,
    dimension: pl.DataFrame,
    on: str,
    columns: Optional[List[str]] = None,
) -> pl.DataFrame:
    """
    Left join facts to a dimension.

    Facts whose key does not resolve keep null dimension attributes and so
    land in an "unknown" group when aggregated.
    """
    if columns is not None:
        dimension = dimension.select([on] + [c for c in columns if c != on])
    return facts.join(dimension, on=on, how="left")
