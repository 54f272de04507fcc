"""
Edge daemon package for the Geekworm X728 UPS board.

Reads battery voltage and state of charge from the X728 fuel gauge over I2C,
watches the external power loss GPIO line, and publishes both as Signal K
deltas for a Signal K server running on the same Raspberry Pi.

CHANGELOG:
- 2026-10-18: Initial creation (STORY-001)

TODO:
- None
"""
