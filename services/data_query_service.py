"""
Data Query Service
Read-only row fetches over the sales, customers and insights tables (plus the
derived monthly_sales view), backed by an in-memory DuckDB database.
"""

import logging
import re
from typing import Optional

import duckdb
import pandas as pd

from .error_handling_service import DataAccessError

logger = logging.getLogger(__name__)

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class DataQueryService:
    """Service for fetching ordered records from the analytics tables."""

    BASE_TABLES: tuple[str, ...] = ("sales", "customers", "insights")
    MONTHLY_VIEW: str = "monthly_sales"

    def __init__(self, con: Optional[duckdb.DuckDBPyConnection] = None):
        self.con = con or duckdb.connect()

    @property
    def tables(self) -> tuple[str, ...]:
        return self.BASE_TABLES + (self.MONTHLY_VIEW,)

    def load_frames(
        self,
        sales: pd.DataFrame,
        customers: pd.DataFrame,
        insights: pd.DataFrame,
    ) -> None:
        """
        Materialize DataFrames as tables and (re)create the monthly view.

        Args:
            sales: transaction_date, amount, product_name, category, customer_id
            customers: name, email, created_at, last_active
            insights: title, description, category, priority, created_at
        """
        for name, frame in zip(self.BASE_TABLES, (sales, customers, insights)):
            staging = f"{name}_df"
            self.con.register(staging, frame)
            try:
                self.con.execute(f"CREATE OR REPLACE TABLE {name} AS SELECT * FROM {staging}")
            finally:
                self.con.unregister(staging)

        self.con.execute(f"""
            CREATE OR REPLACE VIEW {self.MONTHLY_VIEW} AS
            SELECT
                strftime(CAST(transaction_date AS TIMESTAMP), '%Y-%m') AS period,
                SUM(CAST(amount AS DOUBLE)) AS value
            FROM sales
            WHERE transaction_date IS NOT NULL
            GROUP BY period
        """)
        logger.info(
            "[DataQueryService] Loaded sales=%d customers=%d insights=%d",
            len(sales), len(customers), len(insights),
        )

    def fetch_table(
        self,
        name: str,
        order_by: Optional[str] = None,
        ascending: bool = True,
        limit: Optional[int] = None,
    ) -> list[dict]:
        """
        Fetch rows from a table.

        Args:
            name: One of sales, customers, insights, monthly_sales
            order_by: Column to order by (nulls last)
            ascending: Sort direction
            limit: Maximum number of rows

        Returns:
            Ordered list of row dicts

        Raises:
            DataAccessError: Unknown table/column or any database failure
        """
        if name not in self.tables:
            raise DataAccessError(f"Unknown table: {name}", table=name)

        sql = f"SELECT * FROM {name}"
        if order_by:
            if not _IDENTIFIER_RE.match(order_by):
                raise DataAccessError(f"Invalid order column: {order_by}", table=name)
            direction = "ASC" if ascending else "DESC"
            sql += f' ORDER BY "{order_by}" {direction} NULLS LAST'
        if limit is not None:
            if limit < 0:
                raise DataAccessError(f"Invalid limit: {limit}", table=name)
            sql += f" LIMIT {int(limit)}"

        cursor = None
        try:
            cursor = self.con.cursor()
            result = cursor.execute(sql).fetchdf()
        except duckdb.Error as e:
            raise DataAccessError(f"Fetch from {name} failed: {e}", table=name) from e
        finally:
            if cursor is not None:
                cursor.close()

        logger.debug("[DataQueryService] %s -> %d rows", sql, len(result))
        return result.to_dict('records')
