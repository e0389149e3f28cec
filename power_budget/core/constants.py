# power_budget/core/constants.py

DEFAULT_MAX_CAPACITY = 100.0      # total physical supply
DEFAULT_SAFETY_LIMIT = 92.0       # aggregate ceiling, below capacity
DEFAULT_DEVICE_MAX_POWER = 40.0   # per-consumer ceiling

ENV_PREFIX = "POWER_BUDGET_"

# Event names published on the allocator's bus
EVENT_CONNECTED = "consumer_connected"
EVENT_DISCONNECTED = "consumer_disconnected"
EVENT_AMENDED = "consumer_amended"
EVENT_REDISTRIBUTED = "power_redistributed"
EVENT_STATUS = "power_status"
