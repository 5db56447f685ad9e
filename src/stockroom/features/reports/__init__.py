"""Stockroom reports

Read-only reports over the inventory, sales and purchasing records: the
inventory listing, the top ten customers and suppliers, sales with profit
figures, and outstanding purchase invoices.

The HTTP endpoints and the CLI commands both delegate to ReportQueryEngine,
which holds the query and aggregation logic."""
