"""Configuration system for spikemap.

Hierarchical YAML configuration with deep-merge support:
  base.yaml → override file → command-line overrides

Sections map 1:1 to YAML top-level keys (data, scrubber, render, output).
Unknown keys are ignored so older config files keep loading.
"""

from __future__ import annotations

import dataclasses
import os
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml


# ═══════════════════════════════════════════════════════════════════════
# CONFIGURATION DATACLASSES
# ═══════════════════════════════════════════════════════════════════════

@dataclass
class DataSection:
    """Input files."""
    cases_csv: str = "data/us-counties.csv"
    geometry: str = "data/counties-10m.json"
    counties_layer: Optional[str] = "counties"
    states_layer: Optional[str] = "states"
    nation_layer: Optional[str] = "nation"
    name_column: str = "name"
    id_column: Optional[str] = None   # None = use the feature id / index


@dataclass
class ScrubberSection:
    """Play / pause / seek driver.

    delay_ms: None → advance once per canvas repaint; otherwise a fixed
    interval in milliseconds.
    """
    delay_ms: Optional[int] = 250
    initial: int = 0
    autoplay: bool = True
    loop: bool = True
    alternate: bool = False       # ping-pong instead of wraparound
    date_format: str = "%B %-d"   # "%-d" is expanded portably, see utils.format_date


@dataclass
class RenderSection:
    """Logical canvas layout and styling."""
    width: int = 1200
    height: int = 820
    map_width: int = 975
    map_height: int = 610
    device_pixel_ratio: float = 1.0
    dpi: int = 100
    max_spike_height: float = 400.0
    spike_half_width: float = 6.0
    gradient_steps: int = 8
    top_n: int = 10
    label_offset: float = 4.0
    theme_color: str = "#cc0000"
    background_color: str = "#f3f3f3"
    county_stroke: str = "#e6e6e6"
    state_stroke: str = "#bdbdbd"
    text_color: str = "#333333"
    halo_color: str = "#ffffff"
    crs: str = "ESRI:102003"   # USA Contiguous Albers Equal Area
    # lon/lat extent that is projected into the map box
    extent: list = field(default_factory=lambda: [-125.0, 24.0, -66.5, 49.5])
    insets: bool = True        # Alaska, Hawaii and Puerto Rico below the lower 48


@dataclass
class OutputSection:
    """Headless output."""
    directory: str = "output/"
    gif_name: str = "spikemap.gif"
    fps: int = 4


@dataclass
class SpikeMapConfig:
    """Complete configuration.

    Load from YAML via `load_config()`.
    """
    data: DataSection = field(default_factory=DataSection)
    scrubber: ScrubberSection = field(default_factory=ScrubberSection)
    render: RenderSection = field(default_factory=RenderSection)
    output: OutputSection = field(default_factory=OutputSection)


# ═══════════════════════════════════════════════════════════════════════
# YAML LOADING & MERGING
# ═══════════════════════════════════════════════════════════════════════

def deep_merge(base: Dict, override: Dict) -> Dict:
    """Recursively merge override into base. Modifies base in place.

    - Dict values are merged recursively
    - Non-dict values are replaced
    - Keys in override but not base are added

    Returns:
        The merged base dictionary.
    """
    for key, value in override.items():
        if (
            key in base
            and isinstance(base[key], dict)
            and isinstance(value, dict)
        ):
            deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def _dict_to_section(section_cls, data: Dict) -> Any:
    """Convert a dict to a dataclass, ignoring unknown keys."""
    valid_fields = {f.name for f in dataclasses.fields(section_cls)}
    filtered = {k: v for k, v in data.items() if k in valid_fields}
    return section_cls(**filtered)


def _yaml_to_config(data: Dict) -> SpikeMapConfig:
    """Convert a merged YAML dict to a SpikeMapConfig."""
    sections = {}
    section_map = {
        'data': DataSection,
        'scrubber': ScrubberSection,
        'render': RenderSection,
        'output': OutputSection,
    }
    for key, cls in section_map.items():
        if key in data and isinstance(data[key], dict):
            sections[key] = _dict_to_section(cls, data[key])
        else:
            sections[key] = cls()
    return SpikeMapConfig(**sections)


def validate_config(config: SpikeMapConfig) -> None:
    """Validate configuration constraints. Raises ValueError on failure.

    Missing input files only warn: they may be supplied later on the
    command line.
    """
    s = config.scrubber
    if s.delay_ms is not None and s.delay_ms <= 0:
        raise ValueError(
            f"scrubber.delay_ms must be positive or null, got {s.delay_ms}"
        )
    if s.initial < 0:
        raise ValueError(f"scrubber.initial must be >= 0, got {s.initial}")

    r = config.render
    if r.width <= 0 or r.height <= 0:
        raise ValueError(
            f"render size must be positive, got {r.width}x{r.height}"
        )
    if r.map_width > r.width or r.map_height > r.height:
        raise ValueError(
            f"map box ({r.map_width}x{r.map_height}) must fit inside the "
            f"canvas ({r.width}x{r.height})"
        )
    if r.device_pixel_ratio <= 0:
        raise ValueError("render.device_pixel_ratio must be positive")
    if r.max_spike_height <= 0:
        raise ValueError("render.max_spike_height must be positive")
    if r.gradient_steps < 1:
        raise ValueError(
            f"render.gradient_steps must be >= 1, got {r.gradient_steps}"
        )
    if r.top_n < 0:
        raise ValueError(f"render.top_n must be >= 0, got {r.top_n}")
    if len(r.extent) != 4 or r.extent[0] >= r.extent[2] or r.extent[1] >= r.extent[3]:
        raise ValueError(
            f"render.extent must be [lon_min, lat_min, lon_max, lat_max], "
            f"got {r.extent}"
        )

    if config.output.fps <= 0:
        raise ValueError(f"output.fps must be positive, got {config.output.fps}")

    for attr in ('cases_csv', 'geometry'):
        path = getattr(config.data, attr)
        if not os.path.exists(path):
            warnings.warn(
                f"data.{attr} '{path}' does not exist. "
                f"Loading will fail at runtime.",
                UserWarning,
                stacklevel=2,
            )


def load_config(
    base_path: Union[str, Path],
    override_path: Optional[Union[str, Path]] = None,
    overrides: Optional[Dict] = None,
) -> SpikeMapConfig:
    """Load and merge hierarchical YAML configuration.

    Merge order: base → override file → overrides dict.

    Raises:
        FileNotFoundError: If base_path doesn't exist.
        ValueError: If validation fails.
    """
    base_path = Path(base_path)
    if not base_path.exists():
        raise FileNotFoundError(f"Config file not found: {base_path}")

    with open(base_path) as f:
        config_dict = yaml.safe_load(f) or {}

    if override_path is not None:
        override_path = Path(override_path)
        if override_path.exists():
            with open(override_path) as f:
                override = yaml.safe_load(f) or {}
            deep_merge(config_dict, override)

    if overrides is not None:
        deep_merge(config_dict, overrides)

    return config_from_dict(config_dict)


def config_from_dict(data: Dict) -> SpikeMapConfig:
    """Build and validate a SpikeMapConfig from a plain (merged) dict."""
    config = _yaml_to_config(data)
    validate_config(config)
    return config


def default_config() -> SpikeMapConfig:
    """Return a SpikeMapConfig with all default values (not validated)."""
    return SpikeMapConfig()
