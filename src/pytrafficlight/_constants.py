"""Internal constants shared across the library.

Wire names below are the navigation broadcast contract and must match
exactly.
"""

# Broadcast action the navigation app publishes status events on.
DEFAULT_CHANNEL = "AUTONAVI_STANDARD_BROADCAST_SEND"

# KEY_TYPE value identifying a traffic-light payload on the shared channel.
TRAFFIC_LIGHT_TYPE_TAG = 60073

# ------------------------------------------------------------------
# Payload field names
# ------------------------------------------------------------------

KEY_TYPE = "KEY_TYPE"
KEY_TRAFFIC_LIGHT_STATUS = "trafficLightStatus"
KEY_RED_LIGHT_COUNTDOWN = "redLightCountDownSeconds"
KEY_GREEN_LIGHT_LAST = "greenLightLastSecond"
KEY_DIRECTION = "dir"
KEY_WAIT_ROUND = "waitRound"

# ------------------------------------------------------------------
# Freshness timing defaults (seconds)
# ------------------------------------------------------------------

HEARTBEAT_INTERVAL_S = 1.0
EXPIRE_WINDOW_S = 10.0
AUTO_CLEAR_GRACE_S = 5.0
AUTO_CLEAR_FALLBACK_S = 15.0

SOURCE_NAVIGATION = "navigation"
SOURCE_TEST = "test"
