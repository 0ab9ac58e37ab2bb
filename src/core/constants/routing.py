"""Scoring, allocation and blending policy constants.

Policy values are product decisions, not market data. Changing any of them
changes the numbers users see.
"""

from decimal import Decimal

# Scoring
APY_SCORE_WEIGHT = Decimal("40")  # Max points from APY
APY_SCORE_CAP = Decimal("100")  # APY (%) that earns full points
TVL_SCORE_WEIGHT = Decimal("30")  # Max points from TVL depth
TVL_SCORE_LOG_CAP = Decimal("7")  # log10(TVL) that earns full points ($10M)
SOCIAL_COPY_BOOST = Decimal("1.1")
NASCENT_TVL_THRESHOLD = Decimal("10000")
NASCENT_TVL_PENALTY = Decimal("0.8")

# Allocation
FIRST_POSITION_SHARE = Decimal("0.35")
POSITION_DECAY = Decimal("0.75")
MAX_CHAIN_SHARE = Decimal("0.5")
MAX_HIGH_RISK_SHARE = Decimal("0.3")
DIVERSIFICATION_TARGET_CHAINS = 3
DEFAULT_MAX_POSITIONS = 5
NEUTRAL_RISK_SCORE = Decimal("2")

# Recommendation thresholds
QUICK_START_MIN_TVL = Decimal("100000")
SAFE_YIELD_MIN_TVL = Decimal("500000")
HIGH_YIELD_MIN_APY = Decimal("20")
BALANCED_MIN_TVL = Decimal("100000")
RECOMMENDATION_LIMIT = 10

# Blended APY
LENDING_WEIGHT = Decimal("0.6")
POOL_WEIGHT = Decimal("0.4")
PLATFORM_FEE = Decimal("0.10")

# Health factor
SAFE_HEALTH_FACTOR = Decimal("1.5")
MIN_HEALTH_FACTOR = Decimal("1.0")

# Borrow simulation
HIGH_BORROW_SHARE = Decimal("0.4")  # Borrow above this share of position value
SHORT_TERM_BORROW_SHARE = Decimal("0.3")
DANGER_HEALTH_FACTOR = Decimal("1.2")
