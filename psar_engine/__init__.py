"""
PSAR Engine
-----------
Parabolic Stop-And-Reverse (SAR) computation over high/low price series.
Single-pass, deterministic scan with YAML configuration and a small CLI.
"""

from .errors import PsarError, InvalidConfig, InvalidInput
from .config import AccelerationConfig
from .engine import Signal, EngineState, sar, sar_states

__all__ = [
    "PsarError",
    "InvalidConfig",
    "InvalidInput",
    "AccelerationConfig",
    "Signal",
    "EngineState",
    "sar",
    "sar_states",
]
