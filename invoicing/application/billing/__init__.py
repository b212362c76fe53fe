"""
Billing use cases: invoice creation, lookup and listing, product catalog.
"""
