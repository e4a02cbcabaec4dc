"""Payment reporting layer.

Read-only queries and aggregations over payment snapshots: date ordering,
month and recent-day filters, totals, discounts and per-user line items.
"""
