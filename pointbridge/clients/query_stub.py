"""Chainable query stub returned by the local backend for every table.

Reads find no rows and every mutation resolves to an explicit error naming the
table, so local development can never lose writes silently.
"""

from __future__ import annotations

from typing import Any, Dict, List, Union

from pointbridge.models.results import QueryResult

Row = Dict[str, Any]


class LocalQueryStub:
    def __init__(self, table: str) -> None:
        self.table = table

    def select(self, columns: str = "*") -> "LocalQueryStub":
        return self

    def eq(self, column: str, value: Any) -> "LocalQueryStub":
        return self

    def order(self, column: str, *, ascending: bool = True) -> "LocalQueryStub":
        return self

    def limit(self, count: int) -> "LocalQueryStub":
        return self

    async def insert(self, values: Union[Row, List[Row]]) -> QueryResult:
        return self._not_supported()

    async def update(self, values: Row) -> QueryResult:
        return self._not_supported()

    async def delete(self) -> QueryResult:
        return self._not_supported()

    async def single(self) -> QueryResult:
        return self._not_supported()

    async def maybe_single(self) -> QueryResult:
        return QueryResult(data=None)

    async def execute(self) -> QueryResult:
        return QueryResult(data=[])

    def _not_supported(self) -> QueryResult:
        return QueryResult.failure(
            "Local Supabase data operations are not supported in browser "
            f"for table: {self.table}",
            code="local_unsupported",
        )


__all__ = ["LocalQueryStub", "Row"]
