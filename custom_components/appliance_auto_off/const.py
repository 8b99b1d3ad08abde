"""Constants for the Appliance Auto-Off integration."""

DOMAIN = "appliance_auto_off"

# Config entry keys
CONF_APPLIANCE_NAME = "appliance_name"
CONF_SWITCH_ENTITY = "switch_entity"
CONF_POWER_ENTITY = "power_entity"
CONF_SIMULATION_MODE = "simulation_mode"
CONF_KEEP_ALIVE = "keep_alive"
CONF_INITIAL_DELAY = "initial_delay"
CONF_CHECK_DURATION = "check_duration"
CONF_INITIAL_CHECK_DURATION = "initial_check_duration"
CONF_CHECK_INTERVAL = "check_interval"
CONF_KEEP_ALIVE_INTERVAL = "keep_alive_interval"
CONF_POWER_ON_THRESHOLD = "power_on_threshold"
CONF_POWER_ACTIVE_THRESHOLD = "power_active_threshold"
CONF_CLOUD_BASE_URL = "cloud_base_url"
CONF_CLOUD_AUTH_KEY = "cloud_auth_key"

# Default values (production timings of the plug script)
DEFAULT_INITIAL_DELAY = 30           # minutes
DEFAULT_CHECK_DURATION = 20          # minutes
DEFAULT_INITIAL_CHECK_DURATION = 15  # minutes
DEFAULT_CHECK_INTERVAL = 60          # seconds
DEFAULT_KEEP_ALIVE_INTERVAL = 60     # seconds
DEFAULT_POWER_ON_THRESHOLD = 0.7     # Watts
DEFAULT_POWER_ACTIVE_THRESHOLD = 0.7 # Watts

# Placeholder left in the config when the user never filled in a cloud key
PLACEHOLDER_AUTH_KEY = "YOUR_CLOUD_AUTHORIZATION_KEY_HERE"

# Notification events
EVENT_MACHINE_ON = "MACHINE_ON"
EVENT_MONITORING_ACTIVE = "MONITORING_ACTIVE"
EVENT_STANDBY_OFF_DETECTED = "STANDBY_OFF_DETECTED"
EVENT_MACHINE_AUTO_OFF = "MACHINE_AUTO_OFF"

# Scene enabled on activation/standby and disabled on false start/emergency
TOGGLE_SCENE = "TOGGLE_SCENE"

SCENE_NAMES = (
    EVENT_MACHINE_ON,
    EVENT_MONITORING_ACTIVE,
    EVENT_STANDBY_OFF_DETECTED,
    EVENT_MACHINE_AUTO_OFF,
    TOGGLE_SCENE,
)

# Config keys holding the scene id of each named scene
SCENE_CONF_KEYS = {name: f"scene_{name.lower()}" for name in SCENE_NAMES}

# Phases
PHASE_IDLE = "idle"
PHASE_DELAY = "delay"
PHASE_MONITORING = "monitoring"

# Switch-off reasons
REASON_STANDBY = "standby"
REASON_EMERGENCY = "emergency"

# Home Assistant bus events
EVENT_SWITCHED_OFF = "appliance_auto_off_switched_off"

REQUEST_TIMEOUT = 10  # seconds

# Platform keys
PLATFORMS = ["sensor", "binary_sensor"]
