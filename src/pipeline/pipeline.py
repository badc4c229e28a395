"""Run journal processing steps from a YAML configuration.

The configuration file holds top-level string variables and a ``steps``
list. Every ``{{ name }}`` placeholder anywhere in the file is replaced by
the variable of that name before the steps are parsed:

    data_dir: exports/u1
    steps:
      - name: load_data
        params:
          input_paths:
            trips: "{{ data_dir }}/trips.csv"
"""

import inspect
import logging
import re
from collections.abc import Callable
from dataclasses import fields
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from journal_canon import JournalData

logger = logging.getLogger(__name__)

TEMPLATE_PATTERN = re.compile(r"\{\{\s*(\w+)\s*\}\}")

# JournalData attributes a step can receive by parameter name
DATA_FIELDS = frozenset(
    f.name for f in fields(JournalData) if not f.name.startswith("_")
)

# Keyword arguments supplied by the runner, never by the config
RUNNER_ARGS = frozenset({"journal_data", "validate_input", "validate_output"})


class StepConfig(BaseModel):
    """One entry of the ``steps`` list."""

    name: str
    params: dict[str, Any] = Field(default_factory=dict)
    validate_input: bool = True
    validate_output: bool = False

    @field_validator("params", mode="before")
    @classmethod
    def _empty_params(cls, value: Any) -> Any:  # noqa: ANN401
        # A bare "params:" key loads as None
        return value or {}


class PipelineConfig(BaseModel):
    """Parsed pipeline file. Top-level variables are kept as extras."""

    model_config = ConfigDict(extra="allow")

    steps: list[StepConfig]


def expand_templates(
    obj: Any,  # noqa: ANN401
    variables: dict[str, str],
) -> Any:  # noqa: ANN401
    """Substitute ``{{ name }}`` placeholders in nested strings.

    Unknown names are left as written.
    """
    if isinstance(obj, str):
        return TEMPLATE_PATTERN.sub(
            lambda m: variables.get(m.group(1), m.group(0)), obj
        )
    if isinstance(obj, dict):
        return {k: expand_templates(v, variables) for k, v in obj.items()}
    if isinstance(obj, list):
        return [expand_templates(item, variables) for item in obj]
    return obj


def load_config(config_path: str | Path) -> PipelineConfig:
    """Read and template a pipeline YAML file."""
    with Path(config_path).open() as f:
        raw = yaml.safe_load(f) or {}

    variables = {k: v for k, v in raw.items() if isinstance(v, str)}
    return PipelineConfig.model_validate(expand_templates(raw, variables))


class Pipeline:
    """Runs configured steps in order against one JournalData."""

    def __init__(
        self,
        config_path: str | Path,
        steps: list[Callable] | None = None,
    ) -> None:
        """Load the configuration and register the available steps.

        Args:
            config_path: Path to the YAML configuration.
            steps: Step functions, looked up by ``__name__``.
        """
        self.config = load_config(config_path)
        self.steps = {func.__name__: func for func in steps or []}
        self.data = JournalData()

    def step_kwargs(
        self, step_cfg: StepConfig, func: Callable
    ) -> dict[str, Any]:
        """Resolve a step's arguments by parameter name.

        Config params take precedence over JournalData attributes of the
        same name. Parameters found in neither must have a default.

        Raises:
            ValueError: If a required parameter cannot be resolved.
        """
        kwargs = {}
        missing = []

        for name, param in inspect.signature(func).parameters.items():
            if name in RUNNER_ARGS or param.kind is param.VAR_KEYWORD:
                continue
            if name in step_cfg.params:
                kwargs[name] = step_cfg.params[name]
            elif name in DATA_FIELDS:
                kwargs[name] = getattr(self.data, name)
            elif param.default is param.empty:
                missing.append(name)

        if missing:
            msg = (
                f"Step '{step_cfg.name}' is missing required parameters: "
                f"{', '.join(missing)}"
            )
            raise ValueError(msg)

        kwargs["journal_data"] = self.data
        kwargs["validate_input"] = step_cfg.validate_input
        kwargs["validate_output"] = step_cfg.validate_output
        return kwargs

    def run(self) -> JournalData:
        """Run every configured step in order.

        Returns:
            The JournalData holding loaded tables and the computed summary.

        Raises:
            ValueError: If a configured step was not registered. Checked
                before any step runs.
        """
        unknown = [
            s.name for s in self.config.steps if s.name not in self.steps
        ]
        if unknown:
            msg = f"Steps not registered: {', '.join(unknown)}"
            raise ValueError(msg)

        total = len(self.config.steps)
        for i, step_cfg in enumerate(self.config.steps, start=1):
            logger.info("Step %d/%d: %s", i, total, step_cfg.name)
            func = self.steps[step_cfg.name]
            func(**self.step_kwargs(step_cfg, func))

        logger.info("Pipeline finished %d steps", total)
        return self.data
