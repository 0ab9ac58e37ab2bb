"""Upstream API limits."""

# Vault aggregator: requests per window (seconds)
VAULT_API_RATE_LIMIT = 10
VAULT_API_RATE_WINDOW = 1

# Pool yields API
POOL_API_RATE_LIMIT = 5
POOL_API_RATE_WINDOW = 1
