"""Constants for fritzlog."""

DOMAIN = "fritzlog"

LOCATION_LOGIN = "/login_sid.lua"
LOCATION_AHA = "/webservices/homeautoswitch.lua"

NO_SESSION = "0000000000000000"

DEFAULT_URL = "http://fritz.box"
DEFAULT_INTERVAL = 60
DEFAULT_TIMEOUT = 15
DEFAULT_BACKENDS = ["Console"]

SECTION_BASE = "Base"

CONF_URL = "url"
CONF_USERNAME = "username"
CONF_PASSWORD = "password"
CONF_INTERVAL = "interval"
CONF_BACKENDS = "backends"
CONF_TIMEOUT = "timeout"
CONF_OUT_DIR = "out_dir"
