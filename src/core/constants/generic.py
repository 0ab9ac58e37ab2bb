"""Generic constants for DeFi position calculations.

These constants are protocol-agnostic and can be used across different protocols.
"""

from decimal import Decimal

# Time constants
DAYS_PER_YEAR = 365
MONTHS_PER_YEAR = 12

# Precision constants
WAD = 10**18  # Standard 18 decimal precision (health factor on Aave)
RAY = 10**27  # Interest rate precision on Aave
BASE_CURRENCY_UNIT = 10**8  # Aave v3 base currency (USD, 8 decimals)
BPS = 10**4  # Basis points in 100%

# Aave reports uint256.max / 2 or above for accounts without debt
MAX_UINT256 = 2**256 - 1
HEALTH_FACTOR_NO_DEBT_THRESHOLD = MAX_UINT256 // 2

# Health factor sentinel for accounts without debt
INFINITE_HEALTH_FACTOR = Decimal("Infinity")

ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")
