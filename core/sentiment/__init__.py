"""
Market sentiment module.

Aggregates a scan's per-instrument results into one composite score and
category.
"""
from .aggregator import SentimentAggregator, MarketSentimentSnapshot, SentimentCategory

__all__ = [
    'SentimentAggregator',
    'MarketSentimentSnapshot',
    'SentimentCategory',
]
