"""
Zentra App - Trader Behavioral Analytics Engine

Derives behavioral and psychological signals from a trader's logged trades
and declared trading plan: psychological state, session forecasts,
performance insights and a suite of composite behavior scores.
"""

__version__ = "0.1.0"
__author__ = "Zentra Team"
