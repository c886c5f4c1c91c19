"""Business logic. Services own the transaction and never build HTTP responses."""
