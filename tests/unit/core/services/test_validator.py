from __future__ import annotations

"""
Unit tests for the Configuration Validator.

Verifies:
1. Type coercion (String to Bool/Int/List).
2. Default value injection.
3. Range normalization.
4. Strict mode validation.
"""

import pytest

from ncdudiff.core.services.validator import validate_config


def test_validate_none_returns_defaults() -> None:
    """Passing None should return the full default configuration."""
    cfg, warnings = validate_config(None)

    assert cfg["lazy"] is True
    assert cfg["max_depth"] == -1
    assert cfg["ignore_paths"] == []
    assert len(warnings) == 1


def test_validate_empty_dict_returns_defaults() -> None:
    cfg, warnings = validate_config({})

    assert cfg["show_sizes"] == "disk"
    assert cfg["expected_progver"] == "1.14.2"
    assert cfg["request_timeout"] == 10
    assert warnings == []


def test_validate_coerces_strings() -> None:
    raw = {
        "lazy": "no",
        "changed_only": "yes",
        "max_depth": " 3 ",
        "ignore_paths": "root/cache, root/tmp ,",
    }
    cfg, warnings = validate_config(raw)

    assert cfg["lazy"] is False
    assert cfg["changed_only"] is True
    assert cfg["max_depth"] == 3
    assert cfg["ignore_paths"] == ["root/cache", "root/tmp"]
    assert len(warnings) == 4


def test_validate_discards_invalid_list_items() -> None:
    cfg, warnings = validate_config({"ignore_paths": ["ok", 5, "  "]})

    assert cfg["ignore_paths"] == ["ok"]
    assert len(warnings) == 1


def test_validate_ranges() -> None:
    cfg, warnings = validate_config({"show_sizes": "blocks", "max_depth": -7, "request_timeout": 0})

    assert cfg["show_sizes"] == "disk"
    assert cfg["max_depth"] == -1
    assert cfg["request_timeout"] == 10
    assert len(warnings) == 3


def test_validate_bool_is_not_an_int() -> None:
    cfg, warnings = validate_config({"max_depth": True})

    assert cfg["max_depth"] == -1
    assert warnings


def test_validate_strict_raises() -> None:
    with pytest.raises(TypeError):
        validate_config({"lazy": "maybe"}, strict=True)
    with pytest.raises(ValueError):
        validate_config({"show_sizes": "blocks"}, strict=True)
    with pytest.raises(TypeError):
        validate_config([], strict=True)
