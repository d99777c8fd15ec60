"""
System-Wide Constants for the Bucket Ring

All magic numbers and configuration defaults centralized here.
"""

from typing import Final

# =============================================================================
# RING
# =============================================================================
# 700 virtual nodes per bucket gives close-to-fair member distribution
VIRTUAL_NODES: Final[int] = 700
MIN_VIRTUAL_NODES: Final[int] = 1
FIRST_VIRTUAL_NODE_ID: Final[int] = 1
DEFAULT_HASH: Final[str] = "sha1"

# =============================================================================
# LOCKING
# =============================================================================
CANCEL_POLL_INTERVAL_S: Final[float] = 0.05

# =============================================================================
# DISTRIBUTION ANALYZER
# =============================================================================
ANALYZER_START: Final[int] = 1
ANALYZER_END: Final[int] = 800
ANALYZER_STEP: Final[int] = 1
DEMO_BUCKETS: Final[int] = 10
DEMO_MEMBERS: Final[int] = 10000
