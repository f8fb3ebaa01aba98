"""Editor configuration loading."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path  # noqa: TC003 - used at runtime
from typing import Any, cast

from ruamel.yaml import YAML

from graphtext.models.graph import (
    DEFAULT_MAX_NODES,
    GRAPH_TYPES,
    INDEXING_MODES,
    GraphType,
    NodeIndexingMode,
)

# Default configuration values
DEFAULT_GRAPH_TYPE: GraphType = "undirected"
DEFAULT_INDEXING_MODE: NodeIndexingMode = "0-indexed"
DEFAULT_POSITION_THRESHOLD = 1.0

ENV_MAX_NODES = "GRAPHTEXT_MAX_NODES"
ENV_GRAPH_TYPE = "GRAPHTEXT_GRAPH_TYPE"
ENV_INDEXING_MODE = "GRAPHTEXT_INDEXING_MODE"


class ConfigError(Exception):
    """Raised when configuration cannot be loaded or is invalid."""

    def __init__(self, reason: str, path: Path | None = None) -> None:
        self.path = path
        self.reason = reason
        where = f" at {path}" if path is not None else ""
        super().__init__(f"Invalid graphtext config{where}: {reason}")


@dataclass
class EditorConfig:
    """Configuration for a graph store and its layout feedback.

    Attributes:
        max_nodes: Upper bound on node count.
        graph_type: "directed" or "undirected".
        node_indexing_mode: Scheme for auto-generated labels.
        position_threshold: Minimum movement (in layout units) for a reported
            position to count as a change.
    """

    max_nodes: int = DEFAULT_MAX_NODES
    graph_type: GraphType = DEFAULT_GRAPH_TYPE
    node_indexing_mode: NodeIndexingMode = DEFAULT_INDEXING_MODE
    position_threshold: float = DEFAULT_POSITION_THRESHOLD

    def __post_init__(self) -> None:
        if not isinstance(self.max_nodes, int) or self.max_nodes < 1:
            raise ConfigError(f"max_nodes must be a positive integer, got {self.max_nodes!r}")
        if self.graph_type not in GRAPH_TYPES:
            raise ConfigError(
                f"graph_type must be one of {', '.join(GRAPH_TYPES)}, got {self.graph_type!r}"
            )
        if self.node_indexing_mode not in INDEXING_MODES:
            raise ConfigError(
                f"node_indexing_mode must be one of {', '.join(INDEXING_MODES)}, "
                f"got {self.node_indexing_mode!r}"
            )
        if self.position_threshold < 0:
            raise ConfigError(
                f"position_threshold must not be negative, got {self.position_threshold!r}"
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EditorConfig:
        """Create config from dictionary, then apply environment overrides.

        Resolution order for each setting:
        1. Environment variable (e.g., GRAPHTEXT_MAX_NODES)
        2. Dictionary value
        3. Default

        Args:
            data: Dictionary with optional max_nodes, graph_type,
                node_indexing_mode and position_threshold keys.

        Returns:
            EditorConfig instance.

        Raises:
            ConfigError: If a value is out of range or of the wrong kind.
        """
        max_nodes: Any = data.get("max_nodes", DEFAULT_MAX_NODES)
        env_max = os.getenv(ENV_MAX_NODES)
        if env_max:
            try:
                max_nodes = int(env_max)
            except ValueError as e:
                raise ConfigError(f"{ENV_MAX_NODES} must be an integer, got {env_max!r}") from e

        graph_type = os.getenv(ENV_GRAPH_TYPE) or data.get("graph_type", DEFAULT_GRAPH_TYPE)
        indexing_mode = os.getenv(ENV_INDEXING_MODE) or data.get(
            "node_indexing_mode", DEFAULT_INDEXING_MODE
        )

        try:
            threshold = float(data.get("position_threshold", DEFAULT_POSITION_THRESHOLD))
        except (TypeError, ValueError) as e:
            raise ConfigError(f"position_threshold must be a number: {e}") from e

        return cls(
            max_nodes=max_nodes,
            graph_type=cast("GraphType", graph_type),
            node_indexing_mode=cast("NodeIndexingMode", indexing_mode),
            position_threshold=threshold,
        )


def load_config(config_path: Path) -> EditorConfig:
    """Load editor configuration from a YAML file.

    A missing file yields the defaults (plus environment overrides).

    Args:
        config_path: Path to a YAML file.

    Returns:
        EditorConfig instance.

    Raises:
        ConfigError: If the file cannot be parsed or holds invalid values.
    """
    if not config_path.exists():
        return EditorConfig.from_dict({})

    yaml = YAML(typ="safe")
    try:
        with config_path.open("r", encoding="utf-8") as f:
            data = yaml.load(f)
    except Exception as e:
        raise ConfigError(str(e), config_path) from e

    if data is None:
        return EditorConfig.from_dict({})
    if not isinstance(data, dict):
        raise ConfigError("top level must be a mapping", config_path)

    try:
        return EditorConfig.from_dict(dict(data))
    except ConfigError as e:
        raise ConfigError(e.reason, config_path) from e
