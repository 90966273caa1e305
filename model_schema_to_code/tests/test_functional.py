"""
Functional tests driven by test_data/functional_tests.json.

Each case lists declarations, an optional config, and patterns that must
(or must not) appear in the generated artifact.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from model_schema_to_code.pipeline import Declaration, GeneratorConfig, Registry

TEST_DATA_DIR = Path(__file__).parent / "test_data"


def load_all_test_cases():
    """Load all test cases from the *_tests.json files in test_data."""
    test_cases = []
    for json_file in sorted(TEST_DATA_DIR.glob("*_tests.json")):
        with open(json_file) as f:
            data = json.load(f)

        for test_case in data:
            test_case["_source_file"] = json_file.name
            test_cases.append(test_case)

    return test_cases


def _generate(test_case):
    config = GeneratorConfig.from_dict(test_case.get("config", {}))
    declarations = [Declaration.from_dict(d) for d in test_case["declarations"]]
    return Registry(config).extend(declarations).generate()


@pytest.mark.parametrize("test_case", load_all_test_cases(), ids=lambda case: case["name"])
def test_functional_generation(test_case):
    """Unified test for all JSON test cases using a single pattern."""
    print(f"\nTesting: {test_case['name']} (from {test_case['_source_file']})")
    print(f"Description: {test_case['description']}")

    result = _generate(test_case)

    for pattern in test_case.get("expected_contains", []):
        assert pattern in result.artifact, f"Expected pattern '{pattern}' not found in output"

    for pattern in test_case.get("expected_not_contains", []):
        assert pattern not in result.artifact, f"Unexpected pattern '{pattern}' found in output"

    expected_errors = test_case.get("expected_errors", [])
    assert [failure.declared_name for failure in result.errors] == expected_errors

    if "expected_diagnostics" in test_case:
        assert [d.code for d in result.diagnostics] == test_case["expected_diagnostics"]


if __name__ == "__main__":
    pytest.main([__file__])
