"""Shared CLI helpers."""

from pathlib import Path
from typing import Optional

from rich.console import Console

from ..config import EngineConfig, load_config

console = Console()


def resolve_config(
    config: Optional[Path] = None,
    window: Optional[int] = None,
    similarity: Optional[float] = None,
    report_size: Optional[int] = None,
) -> EngineConfig:
    """Build an engine config from CLI options."""
    return load_config(
        config_file=config,
        window_size=window,
        similarity_threshold=similarity,
        report_size=report_size,
    )
