"""
Constants for the always-on baseline calculator.

Central location for default values used by the filters and the pipeline.
"""

from datetime import time

# ============================================================
# SLEEP WINDOW
# ============================================================

# Local overnight window assumed to carry only background load.
# Both boundaries are excluded from the window.
DEFAULT_SLEEP_START = time(22, 0)
DEFAULT_SLEEP_END = time(6, 0)

# ============================================================
# CONSISTENCY
# ============================================================

# Highest value of a stable run may be at most 30% above its lowest value.
DEFAULT_CONSISTENCY_RATIO = 1.3

# ============================================================
# USAGE DATA
# ============================================================

# Interval granularity requested from the usage API
DEFAULT_PERIOD = "15min"

# Length of the analysed window, in calendar months before the base day
DEFAULT_LOOKBACK_MONTHS = 1

# ============================================================
# USAGE API
# ============================================================

DEFAULT_API_BASE_URL = "http://localhost:8080/1.2/me"
DEFAULT_REQUEST_TIMEOUT = 30.0
DEFAULT_MAX_RETRIES = 3
DEFAULT_RATE_LIMIT_RPM = 120
