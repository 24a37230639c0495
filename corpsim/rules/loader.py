"""
Economy rules loader - Load and validate economy_rules.yaml.

Fail-fast: a missing file, invalid YAML, a schema violation or a production
chain naming an undeclared resource/product stops startup.
"""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import ValidationError

from corpsim.rules.models import EconomyRules

DEFAULT_RULES_FILENAME = "economy_rules.yaml"


class RulesValidationError(ValueError):
    """Raised when the rules parse but reference items they never declare."""

    def __init__(self, problems: list[str]) -> None:
        self.problems = problems
        super().__init__(f"Rules validation failed: {'; '.join(problems)}")


def find_project_root() -> Path:
    """Find project root by looking for marker files."""
    current = Path.cwd()

    for parent in [current, *current.parents]:
        if (parent / "pyproject.toml").exists() or (parent / ".git").exists():
            return parent

    return current


def default_rules_path() -> Path:
    return find_project_root() / DEFAULT_RULES_FILENAME


def _strip_markdown_fences(content: str) -> str:
    # Accept a rules file pasted from docs with a ```yaml block in it
    yaml_lines = []
    in_block = False
    found_block = False

    for line in content.splitlines():
        s_line = line.strip()
        if s_line.startswith("```yaml"):
            in_block = True
            found_block = True
            continue
        if in_block and s_line.startswith("```"):
            break
        if in_block:
            yaml_lines.append(line)

    return "\n".join(yaml_lines) if found_block else content


def check_flow_references(rules: EconomyRules) -> list[str]:
    """Pure validation logic - no I/O. Returns one message per dangling reference."""
    problems: list[str] = []

    for sector, unit_flows in rules.sectors.items():
        for unit_type, flow in unit_flows.items():
            for leg_name, leg in (("inputs", flow.inputs), ("outputs", flow.outputs)):
                for resource in leg.resources:
                    if resource not in rules.resources:
                        problems.append(
                            f"{sector}.{unit_type}.{leg_name} names undeclared resource '{resource}'"
                        )
                for product in leg.products:
                    if product not in rules.products:
                        problems.append(
                            f"{sector}.{unit_type}.{leg_name} names undeclared product '{product}'"
                        )

    electricity = rules.demand_pricing.electricity_product
    if electricity and electricity not in rules.products:
        problems.append(f"demand_pricing.electricity_product '{electricity}' is not a declared product")

    for sector in rules.demand_pricing.cost_floor_sectors:
        if sector not in rules.sectors:
            problems.append(f"demand_pricing.cost_floor_sectors names unknown sector '{sector}'")

    return problems


def parse_rules(content: str) -> EconomyRules:
    try:
        data = yaml.safe_load(_strip_markdown_fences(content))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax in rules file: {e}") from e

    if data is None:
        raise ValueError("Rules file is empty")

    try:
        rules = EconomyRules.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Rules validation failed:\n{e}") from e

    problems = check_flow_references(rules)
    if problems:
        raise RulesValidationError(problems)

    return rules


def load_rules(path: Path) -> EconomyRules:
    """
    Load and validate the rules file.
    Raises FileNotFoundError if file missing.
    Raises ValueError if YAML or schema invalid (RulesValidationError for dangling names).
    """
    if not path.exists():
        raise FileNotFoundError(f"Rules file not found at: {path}")

    return parse_rules(path.read_text())
