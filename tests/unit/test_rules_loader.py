"""
Economy rules loader tests.

Fail-fast loading of economy_rules.yaml: missing file, bad YAML, schema
violations and dangling production-chain references.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from corpsim.rules.loader import (
    RulesValidationError,
    check_flow_references,
    load_rules,
    parse_rules,
)
from corpsim.rules.models import EconomyRules


class TestLoadRules:
    def test_load_shipped_rules(self, rules: EconomyRules) -> None:
        """The shipped rules file loads and has no dangling references."""
        assert rules.project.slug == "corpsim"
        assert check_flow_references(rules) == []
        assert "Defense" in rules.sectors
        assert rules.period.default_hours == 96

    def test_every_sector_uses_known_unit_types(self, rules: EconomyRules) -> None:
        for unit_flows in rules.sectors.values():
            assert set(unit_flows) <= {"retail", "production", "service", "extraction"}

    def test_load_minimal_file(self, rules_file: Path) -> None:
        rules = load_rules(rules_file)

        assert rules.project.slug == "test-economy"
        assert rules.sectors["Energy"]["extraction"].outputs.resources == {"Oil": 2.0}
        # Omitted sections fall back to defaults
        assert rules.demand_pricing.cost_floor_sectors == ["Defense"]
        assert rules.market.min_commodity_price == 10

    def test_load_nonexistent_file_raises(self) -> None:
        with pytest.raises(FileNotFoundError):
            load_rules(Path("/nonexistent/economy_rules.yaml"))

    def test_load_invalid_yaml_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("invalid: yaml: content: [")

        with pytest.raises(ValueError, match="Invalid YAML"):
            load_rules(path)

    def test_empty_file_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")

        with pytest.raises(ValueError, match="empty"):
            load_rules(path)

    def test_strips_markdown_code_fences(self, minimal_rules_text: str) -> None:
        content = f"## economy_rules.yaml\n\n```yaml\n{minimal_rules_text}\n```\n"

        rules = parse_rules(content)

        assert rules.project.slug == "test-economy"


class TestSchemaValidation:
    def test_missing_project_raises(self) -> None:
        with pytest.raises(ValueError, match="Rules validation failed"):
            parse_rules("resources: {}\nproducts: {}\nsectors: {}\n")

    def test_negative_rate_raises(self, minimal_rules_text: str) -> None:
        content = minimal_rules_text.replace("Oil: 2.0", "Oil: -2.0")

        with pytest.raises(ValueError, match="Rules validation failed"):
            parse_rules(content)

    def test_unknown_unit_type_raises(self, minimal_rules_text: str) -> None:
        content = minimal_rules_text.replace("    extraction:\n", "    mining:\n", 1)

        with pytest.raises(ValueError):
            parse_rules(content)

    def test_non_positive_period_raises(self, minimal_rules_text: str) -> None:
        content = minimal_rules_text + "period:\n  default_hours: 0\n"

        with pytest.raises(ValueError):
            parse_rules(content)


class TestFlowReferences:
    def test_undeclared_product_is_reported(self, minimal_rules_text: str) -> None:
        content = minimal_rules_text.replace(
            "Manufactured Goods: 1.0", "Widgets: 1.0"
        )

        with pytest.raises(RulesValidationError) as exc_info:
            parse_rules(content)

        assert exc_info.value.problems == [
            "Defense.retail.inputs names undeclared product 'Widgets'"
        ]

    def test_undeclared_resource_is_reported(self, minimal_rules_text: str) -> None:
        content = minimal_rules_text.replace(
            "outputs: { resources: { Oil: 2.0 } }", "outputs: { resources: { Gold: 2.0 } }"
        )

        with pytest.raises(RulesValidationError) as exc_info:
            parse_rules(content)

        assert "Energy.extraction.outputs names undeclared resource 'Gold'" in exc_info.value.problems

    def test_unknown_cost_floor_sector_is_reported(self, minimal_rules_text: str) -> None:
        content = minimal_rules_text + "demand_pricing:\n  cost_floor_sectors: [Navy]\n"

        with pytest.raises(RulesValidationError) as exc_info:
            parse_rules(content)

        assert exc_info.value.problems == [
            "demand_pricing.cost_floor_sectors names unknown sector 'Navy'"
        ]

    def test_validation_error_is_value_error(self) -> None:
        assert issubclass(RulesValidationError, ValueError)
