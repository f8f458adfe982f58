"""Configuration parsing for edge detection runs."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .methods import DEFAULT_HIGH_THRESHOLD, DEFAULT_LOW_THRESHOLD, DEFAULT_SIGMA, EdgeMethod

_TOP_LEVEL_KEYS = {"method", "canny", "execution"}

# Short names accepted by override_parameters (and --set on the command line)
_PARAMETER_FIELDS = {
    "method": "method",
    "low": "low_threshold",
    "high": "high_threshold",
    "sigma": "sigma",
    "workers": "workers",
}


@dataclass
class EdgeConfig:
    """Settings for a single edge detection run."""

    method: EdgeMethod = EdgeMethod.GRADIENT_MAGNITUDE
    low_threshold: float = DEFAULT_LOW_THRESHOLD
    high_threshold: float = DEFAULT_HIGH_THRESHOLD
    sigma: float = DEFAULT_SIGMA
    workers: int | None = None

    def __post_init__(self) -> None:
        self.method = EdgeMethod.parse(self.method)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EdgeConfig":
        """Create EdgeConfig from a YAML dict.

        Expected layout::

            method: canny
            canny:
              low: 50.0
              high: 100.0
              sigma: 1.4
            execution:
              workers: 4
        """
        unknown = set(data) - _TOP_LEVEL_KEYS
        if unknown:
            raise ValueError(f"Unknown config sections: {sorted(unknown)}")

        canny = data.get("canny") or {}
        execution = data.get("execution") or {}
        for name, section in (("canny", canny), ("execution", execution)):
            if not isinstance(section, dict):
                raise ValueError(f"Config section '{name}' must be a mapping, got {section!r}")

        config = cls(
            method=data.get("method", EdgeMethod.GRADIENT_MAGNITUDE),
            low_threshold=float(canny.get("low", DEFAULT_LOW_THRESHOLD)),
            high_threshold=float(canny.get("high", DEFAULT_HIGH_THRESHOLD)),
            sigma=float(canny.get("sigma", DEFAULT_SIGMA)),
            workers=execution.get("workers"),
        )
        config.validate()
        return config

    @classmethod
    def from_yaml(cls, path: Path) -> "EdgeConfig":
        """Load configuration from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Config file must contain a mapping: {path}")

        return cls.from_dict(data)

    def validate(self) -> None:
        """Validate configuration values."""
        if self.low_threshold < 0:
            raise ValueError("low threshold must be >= 0")
        if self.low_threshold >= self.high_threshold:
            raise ValueError(
                f"low threshold ({self.low_threshold}) must be below "
                f"high threshold ({self.high_threshold})"
            )
        if self.sigma < 0:
            raise ValueError("sigma must be >= 0")
        if self.workers is not None and (
            isinstance(self.workers, bool) or not isinstance(self.workers, int) or self.workers < 1
        ):
            raise ValueError("workers must be a positive integer")

    def override_parameters(self, overrides: dict[str, Any]) -> None:
        """Override settings by short name (method, low, high, sigma, workers)."""
        for key, value in overrides.items():
            if key not in _PARAMETER_FIELDS:
                raise ValueError(
                    f"Unknown parameter: {key}. Expected one of {sorted(_PARAMETER_FIELDS)}"
                )
            if key == "method":
                value = EdgeMethod.parse(value)
            elif key in ("low", "high", "sigma"):
                value = float(value)
            setattr(self, _PARAMETER_FIELDS[key], value)
        self.validate()

    def to_dict(self) -> dict[str, Any]:
        """Return a dict in the same layout accepted by from_dict."""
        return {
            "method": self.method.value,
            "canny": {
                "low": self.low_threshold,
                "high": self.high_threshold,
                "sigma": self.sigma,
            },
            "execution": {"workers": self.workers},
        }


def parse_key_value_args(args: list[str]) -> dict[str, Any]:
    """Parse key=value arguments into a dict.

    Args:
        args: List of "key=value" strings.

    Returns:
        Dict of parsed key-value pairs.
    """
    result: dict[str, Any] = {}
    for arg in args:
        if "=" not in arg:
            raise ValueError(f"Invalid format: {arg}. Expected key=value")
        key, value = arg.split("=", 1)

        # Try to parse as number or bool
        if value.lower() == "true":
            result[key] = True
        elif value.lower() == "false":
            result[key] = False
        else:
            try:
                result[key] = float(value) if "." in value else int(value)
            except ValueError:
                result[key] = value

    return result
