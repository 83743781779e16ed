"""
Startup Gate - launch-time destination decision engine

Consolidates attribution and deeplink signals, checks a remote kill switch,
resolves a remote destination and drives a startup state machine that tells
the presentation layer which screen to show.
"""

__version__ = "0.1.0"
__author__ = "Startup Gate Team"
