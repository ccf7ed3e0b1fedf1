"""
Financial Analysis Package

Period-based analytics over the transaction, remittance and rewards datasets.

Key Components:
- spending: Totals, categories, merchants, search, daily and unusual spend
- remittance: Transfer totals, recipients, trends and FX rates
- rewards: Points, cashback and load summaries
"""
