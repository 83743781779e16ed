"""
Startup state machine module.

Tracks the boot phases INITIAL → PREPARING → CHECKING → VALIDATED → ACTIVE,
with IDLE and NO_CONNECTION as the fallbacks. ACTIVE and IDLE are terminal.
"""
