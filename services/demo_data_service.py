"""
Demo Data Service
Seeded, deterministic sample data so the dashboard runs without an upload step.
"""

from datetime import datetime
from typing import Optional

import numpy as np
import pandas as pd
from dateutil.relativedelta import relativedelta

from .config_service import ConfigService


class DemoDataService:
    """Service for generating sample sales, customers and insights frames."""

    PRODUCTS: dict[str, tuple[str, float]] = {
        'Laptop Pro 14': ('Electronics', 1299.0),
        'Smartphone X': ('Electronics', 899.0),
        '4K Monitor': ('Electronics', 349.0),
        'Wireless Headphones': ('Accessories', 199.0),
        'Mechanical Keyboard': ('Accessories', 129.0),
        'Laser Printer': ('Office Equipment', 279.0),
        'Ergonomic Desk Chair': ('Office Equipment', 459.0),
    }

    FIRST_NAMES = ['Ava', 'Liam', 'Noah', 'Mia', 'Omar', 'Sara', 'Yusuf', 'Lina', 'Ethan', 'Zoe']
    LAST_NAMES = ['Hassan', 'Miller', 'Khan', 'Garcia', 'Nguyen', 'Smith', 'Rossi', 'Ali']

    def __init__(self, seed: Optional[int] = None, anchor: Optional[datetime] = None):
        self.rng = np.random.default_rng(ConfigService.DEMO_SEED if seed is None else seed)
        self.anchor = (anchor or datetime.now()).replace(microsecond=0)

    def generate(self) -> tuple[pd.DataFrame, pd.DataFrame, pd.DataFrame]:
        """Return (sales, customers, insights) frames."""
        customers = self.generate_customers()
        sales = self.generate_sales(customers)
        insights = self.generate_insights(sales)
        return sales, customers, insights

    def generate_customers(self, rows: int = ConfigService.DEMO_CUSTOMER_ROWS) -> pd.DataFrame:
        start = self.anchor - relativedelta(months=ConfigService.DEMO_MONTHS)
        span_seconds = int((self.anchor - start).total_seconds())

        records = []
        for i in range(rows):
            first = self.rng.choice(self.FIRST_NAMES)
            last = self.rng.choice(self.LAST_NAMES)
            created = start + relativedelta(seconds=int(self.rng.integers(0, span_seconds)))
            # Roughly a third of accounts have never been active.
            if self.rng.random() < 0.33:
                last_active = None
            else:
                idle_days = int(self.rng.integers(0, 30))
                last_active = max(created, self.anchor - relativedelta(days=idle_days))
            records.append({
                'customer_id': f"C{i + 1:04d}",
                'name': f"{first} {last}",
                'email': f"{first.lower()}.{last.lower()}{i + 1}@example.com",
                'created_at': pd.Timestamp(created),
                'last_active': pd.Timestamp(last_active) if last_active else pd.NaT,
            })
        return pd.DataFrame(records)

    def generate_sales(
        self,
        customers: pd.DataFrame,
        rows: int = ConfigService.DEMO_SALES_ROWS,
    ) -> pd.DataFrame:
        start = self.anchor - relativedelta(months=ConfigService.DEMO_MONTHS)
        span_seconds = int((self.anchor - start).total_seconds())
        product_names = list(self.PRODUCTS)
        customer_ids = customers['customer_id'].tolist() if not customers.empty else [None]

        records = []
        for _ in range(rows):
            product = product_names[int(self.rng.integers(0, len(product_names)))]
            category, list_price = self.PRODUCTS[product]
            # Later months sell slightly more, to give the trend a direction.
            offset = float(self.rng.power(1.3)) * span_seconds
            quantity = int(self.rng.integers(1, 4))
            discount = float(self.rng.uniform(0.85, 1.0))
            records.append({
                'transaction_date': pd.Timestamp(start + relativedelta(seconds=int(offset))),
                'amount': round(list_price * quantity * discount, 2),
                'product_name': product,
                'category': category,
                'customer_id': customer_ids[int(self.rng.integers(0, len(customer_ids)))],
            })
        return pd.DataFrame(records).sort_values('transaction_date').reset_index(drop=True)

    def generate_insights(self, sales: pd.DataFrame) -> pd.DataFrame:
        """
        Derive a handful of insights from sales.

        Top category (Success), 30-day growth vs the prior 30 days (Growth or
        Risk, High priority past 10%), best product restock (Opportunity) and
        the weakest category (Risk).
        """
        created = pd.Timestamp(self.anchor)
        if sales.empty:
            return pd.DataFrame(columns=['title', 'description', 'category', 'priority', 'created_at'])

        by_category = sales.groupby('category')['amount'].sum().sort_values(ascending=False)
        by_product = sales.groupby('product_name')['amount'].sum().sort_values(ascending=False)

        recent_start = created - pd.Timedelta(days=30)
        previous_start = created - pd.Timedelta(days=60)
        dates = pd.to_datetime(sales['transaction_date'])
        recent_total = sales.loc[dates >= recent_start, 'amount'].sum()
        previous_total = sales.loc[(dates >= previous_start) & (dates < recent_start), 'amount'].sum()
        growth = (recent_total - previous_total) / previous_total * 100 if previous_total else 0.0

        top_category, top_amount = by_category.index[0], by_category.iloc[0]
        weak_category, weak_amount = by_category.index[-1], by_category.iloc[-1]
        top_product = by_product.index[0]

        insights = [
            {
                'title': f"{top_category} is the top performing category",
                'description': f"{top_category} generated ${top_amount:.2f} in sales, making it your best performer.",
                'category': 'Success',
                'priority': 'Medium',
            },
            {
                'title': "Positive Growth Trend" if growth >= 0 else "Declining Sales Trend",
                'description': (
                    f"Sales have {'increased' if growth >= 0 else 'decreased'} by "
                    f"{abs(growth):.1f}% in the last 30 days."
                ),
                'category': 'Growth' if growth >= 0 else 'Risk',
                'priority': 'High' if abs(growth) > 10 else 'Medium',
            },
            {
                'title': f"Restock {top_product}",
                'description': f"{top_product} is your best seller; keep inventory ahead of demand.",
                'category': 'Opportunity',
                'priority': 'High',
            },
            {
                'title': f"{weak_category} is underperforming",
                'description': f"{weak_category} brought in only ${weak_amount:.2f}; review pricing or promotion.",
                'category': 'Risk',
                'priority': 'Low',
            },
        ]
        for i, insight in enumerate(insights):
            insight['created_at'] = created - pd.Timedelta(minutes=i)
        return pd.DataFrame(insights)
