from pathlib import Path

import pytest

from corpsim.rules.loader import load_rules
from corpsim.rules.models import EconomyRules

PROJECT_ROOT = Path(__file__).parent.parent

MINIMAL_RULES = """
project:
  slug: test-economy
  rules_version: "1"
resources:
  Oil: { base_price: 75, reference_pool: 12000 }
products:
  Electricity: { reference_value: 200 }
  Manufactured Goods: { reference_value: 1500 }
sectors:
  Energy:
    extraction:
      outputs: { resources: { Oil: 2.0 } }
    production:
      inputs: { resources: { Oil: 1.0 } }
      outputs: { products: { Electricity: 2.0 } }
  Defense:
    retail:
      inputs: { products: { Manufactured Goods: 1.0 } }
"""


@pytest.fixture
def project_root() -> Path:
    return PROJECT_ROOT


@pytest.fixture
def rules() -> EconomyRules:
    """The shipped economy rules, loaded from the project root."""
    return load_rules(PROJECT_ROOT / "economy_rules.yaml")


@pytest.fixture
def minimal_rules_text() -> str:
    return MINIMAL_RULES


@pytest.fixture
def rules_file(tmp_path: Path) -> Path:
    path = tmp_path / "economy_rules.yaml"
    path.write_text(MINIMAL_RULES)
    return path
