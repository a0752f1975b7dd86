"""
YAML configuration loader for market scans.

Loads and saves ScanConfig as YAML so scan settings persist between runs
without code changes.
"""
import yaml
from pathlib import Path
from typing import Union

from .config import ScanConfig
from ..shared.defaults import *


def load_config_from_yaml(yaml_path: Union[str, Path]) -> ScanConfig:
    """
    Load scan configuration from YAML file.

    Args:
        yaml_path: Path to YAML configuration file

    Returns:
        ScanConfig object

    Raises:
        FileNotFoundError: If YAML file doesn't exist
        ValueError: If YAML is empty or holds invalid values
    """
    yaml_path = Path(yaml_path)

    if not yaml_path.exists():
        raise FileNotFoundError(f"Config file not found: {yaml_path}")

    with open(yaml_path, 'r') as f:
        config_dict = yaml.safe_load(f)

    if not config_dict:
        raise ValueError(f"Empty config file: {yaml_path}")
    if not isinstance(config_dict, dict):
        raise ValueError(f"Config file must hold a mapping: {yaml_path}")

    strategy = config_dict.get('strategy') or {}
    data_params = config_dict.get('data') or {}
    scan = config_dict.get('scan') or {}

    return ScanConfig(
        name=config_dict.get('name', yaml_path.stem),

        # Strategy
        capital=strategy.get('capital', INITIAL_CAPITAL),
        leverage=strategy.get('leverage', LEVERAGE),
        take_profit_pct=strategy.get('take_profit_pct', TAKE_PROFIT_PCT),
        pattern_mode=strategy.get('pattern_mode', PATTERN_MODE),

        # Data
        timeframe=str(data_params.get('timeframe', TIMEFRAME)),
        kline_limit=data_params.get('kline_limit', KLINE_LIMIT),
        top_pairs=data_params.get('top_pairs', TOP_PAIRS),
        quote_asset=data_params.get('quote_asset', QUOTE_ASSET),
        reference_symbol=data_params.get('reference_symbol', REFERENCE_SYMBOL),

        # Scan execution
        request_pause=scan.get('request_pause', REQUEST_PAUSE),
        max_workers=scan.get('max_workers', MAX_WORKERS),
    )


def save_config_to_yaml(config: ScanConfig, yaml_path: Union[str, Path]):
    """
    Save scan configuration to YAML file.

    Args:
        config: ScanConfig object to save
        yaml_path: Path where to save YAML file
    """
    yaml_path = Path(yaml_path)

    config_dict = {
        'name': config.name or yaml_path.stem,

        'strategy': {
            'capital': config.capital,
            'leverage': config.leverage,
            'take_profit_pct': config.take_profit_pct,
            'pattern_mode': config.pattern_mode.value,
        },

        'data': {
            'timeframe': config.timeframe,
            'kline_limit': config.kline_limit,
            'top_pairs': config.top_pairs,
            'quote_asset': config.quote_asset,
            'reference_symbol': config.reference_symbol,
        },

        'scan': {
            'request_pause': config.request_pause,
            'max_workers': config.max_workers,
        },
    }

    yaml_path.parent.mkdir(parents=True, exist_ok=True)

    with open(yaml_path, 'w') as f:
        yaml.safe_dump(config_dict, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
