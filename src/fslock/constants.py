"""Constants for fslock."""

# Lock names must match this pattern; "." prefixed names are reserved
# for staging and eviction directories.
NAME_PATTERN = r"^[a-z]+[a-z0-9.-]*$"

HELD_FILENAME = "held"
ALIVE_PREFIX = "alive."

# Defaults (seconds)
DEFAULT_WAIT_DELAY = 1.0
DEFAULT_LIVIDITY_TIMEOUT = 30.0
DEFAULT_READ_RETRY_TIMEOUT = 0.01
DEFAULT_READ_RETRIES = 10

# Heartbeat refreshes the liveness marker every HEARTBEAT_FACTOR * wait_delay
HEARTBEAT_FACTOR = 5

# Rename attempts when evicting a lock directory
EVICT_RETRIES = 100

CONFIG_FILENAME = "fslock.toml"
