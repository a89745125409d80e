from __future__ import annotations

FIELD_SEPARATOR = "|"
BODY_SEPARATOR = ","
WIRE_FIELD_COUNT = 4
BODY_FIELD_COUNT = 8

# single-byte so any datagram decodes to text
WIRE_ENCODING = "latin-1"
MAX_DATAGRAM = 65535

DEFAULT_HOST = "127.0.0.1"
DEFAULT_LISTEN_HOST = "0.0.0.0"
DEFAULT_PORT = 5000
DEFAULT_TAIL_NUMBER = "C-FGAX"
DEFAULT_SEND_INTERVAL_S = 1.0
DEFAULT_POLL_INTERVAL_S = 0.25

MIN_SLEEP_S = 0.001
