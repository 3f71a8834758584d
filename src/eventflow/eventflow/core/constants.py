"""Constants and defaults.

Note: Keep constants here to avoid magic values spread across code.
"""

SCAN_NAMESPACE_TAG = "EVENTFLOW"
SCAN_PAYLOAD_DELIMITER = ":"

DEFAULT_FEED_POLL_SECONDS = 1.0
DEFAULT_SELF_VIEW_POLL_SECONDS = 5.0
DEFAULT_WRITER_FLUSH_SECONDS = 10.0
DEFAULT_VIEW_IDLE_SECONDS = 900.0
DEFAULT_VIEW_SWEEP_SECONDS = 60.0

# Log entry labels as they appear in the audit trail.
LABEL_TIME_IN = "Time In"
LABEL_TIME_IN_AUTO = "Time In (Auto)"
LABEL_LATE_TIME_IN_AUTO = "Late Time In (Auto)"
LABEL_BREAK_START = "Break Start"
LABEL_BREAK_RETURN = "Break Return"
LABEL_TIME_OUT = "Time Out"
LABEL_SELF_CHECKOUT = "Self Checkout"
