"""
Trade simulation module.

Simulates the SMA trend strategy on one instrument under simplified
leveraged-futures mechanics and reports an AnalysisResult.
"""
from .types import (
    StrategyParams,
    TradeOutcome,
    Position,
    TradeRecord,
    AnalysisResult,
)
from .simulator import TradeSimulator, entry_signal, simulate

__all__ = [
    'StrategyParams',
    'TradeOutcome',
    'Position',
    'TradeRecord',
    'AnalysisResult',
    'TradeSimulator',
    'entry_signal',
    'simulate',
]
