"""
StockTerm Indicator Engine

Deterministic technical indicator calculations over OHLCV candle series.
"""

__version__ = "0.1.0"
