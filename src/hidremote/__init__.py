"""hidremote -- Bluetooth HID remote emulation and inspection toolkit.

This package implements the HID report codec used to emulate keyboards,
remotes and consumer-control units, and to inspect the reports real
devices exchange: a report descriptor parser, an inbound report decoder
and a stateful outbound report encoder, plus the CLI, HTTP API and
report monitor built around them.
"""

__version__ = "0.1.0"
