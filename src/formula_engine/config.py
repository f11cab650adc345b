"""
Configuration for the formula engine.

Supports both camelCase and snake_case property names, loaded from a
mapping or from a JSON or YAML file.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .limits import DEFAULT_FORMULA_LIMITS, MAX_AST_DEPTH_CEILING, FormulaLimits

logger = logging.getLogger("formula_engine.config")


class FormulaConfig(BaseModel):
    """Configuration for a Formula engine."""

    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    # Maximum formula string length in characters
    max_expression_length: int = Field(
        default=DEFAULT_FORMULA_LIMITS.max_expression_length, gt=0
    )

    # Maximum number of tokens
    max_tokens: int = Field(default=DEFAULT_FORMULA_LIMITS.max_tokens, gt=0)

    # Maximum nesting of parentheses and function calls
    max_nesting_depth: int = Field(
        default=DEFAULT_FORMULA_LIMITS.max_nesting_depth, gt=0
    )

    # Maximum AST depth, counting every operator and call level
    max_ast_depth: int = Field(
        default=DEFAULT_FORMULA_LIMITS.max_ast_depth, gt=0, le=MAX_AST_DEPTH_CEILING
    )

    # Maximum number of AST nodes
    max_ast_nodes: int = Field(default=DEFAULT_FORMULA_LIMITS.max_ast_nodes, gt=0)

    # Maximum function call arguments
    max_function_args: int = Field(
        default=DEFAULT_FORMULA_LIMITS.max_function_args, ge=0
    )

    # Tokens shown on each side of the offending token in error messages
    error_context_tokens: int = Field(
        default=DEFAULT_FORMULA_LIMITS.error_context_tokens, ge=0
    )

    def to_limits(self) -> FormulaLimits:
        return FormulaLimits(**self.model_dump())


def normalize_config(config: FormulaConfig | dict[str, Any] | None) -> FormulaConfig:
    """Builds a FormulaConfig from a config, a mapping, or None (defaults)."""
    if config is None:
        return FormulaConfig()
    if isinstance(config, FormulaConfig):
        return config
    if not isinstance(config, dict):
        raise ValueError("Formula configuration must be a mapping")
    return FormulaConfig.model_validate(config)


def load_config(path: str | Path) -> FormulaConfig:
    """
    Loads a FormulaConfig from a .json, .yaml or .yml file.

    Raises:
        OSError: If the file cannot be read
        yaml.YAMLError: If a YAML file is malformed
        ValueError: If the content is not a valid configuration
    """
    file_path = Path(path)
    content = file_path.read_text(encoding="utf-8")

    if file_path.suffix.lower() == ".json":
        data = json.loads(content)
    else:
        data = yaml.safe_load(content)

    config = normalize_config(data or {})
    logger.debug(
        "formula_config_loaded",
        extra={"path": str(file_path), "config": config.model_dump()},
    )
    return config
