"""
Dip-Shift Rebalancing Simulator (dip-shift)

A backtesting tool for a dollar-shifting strategy between a benchmark index
and a leveraged instrument that tracks it. The whole portfolio starts in the
benchmark; every time the benchmark closes lower, the dollar amount lost that
day (scaled by a multiplier) is moved into the leveraged instrument. Optional
monthly contributions are added to the benchmark side.

Paper simulation only. No transaction costs, taxes or live trading.
"""

__version__ = "0.1.0"
__author__ = "Dip-Shift Team"
