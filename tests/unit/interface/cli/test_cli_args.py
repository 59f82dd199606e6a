from __future__ import annotations

"""
Unit tests for CLI Argument Parsing.

Verifies:
1. Mapping of CLI flags to configuration keys.
2. CSV string parsing logic.
3. Handling of boolean and mutually exclusive flags.
"""

import pytest

from ncdudiff.interface.cli.args import args_to_overrides, build_parser


def parse_args(arg_list):
    """Helper to simulate CLI argument parsing."""
    parser = build_parser()
    return parser.parse_args(arg_list)


def test_reports_are_required():
    with pytest.raises(SystemExit):
        parse_args([])


def test_defaults_leave_base_config_untouched():
    args = parse_args(["a.json", "b.json"])
    overrides = args_to_overrides(args)

    assert args.reports == ["a.json", "b.json"]
    assert overrides["ignore_paths"] is None
    assert overrides["max_depth"] is None
    assert overrides["request_timeout"] is None
    assert "lazy" not in overrides
    assert "show_sizes" not in overrides


def test_cli_flags_mapping():
    args = parse_args([
        "a.json", "b.json",
        "--full",
        "--depth", "2",
        "--changed-only",
        "--apparent",
        "--log-file",
        "--debug",
        "--timeout", "30",
    ])
    overrides = args_to_overrides(args)

    assert overrides["lazy"] is False
    assert overrides["max_depth"] == 2
    assert overrides["changed_only"] is True
    assert overrides["show_sizes"] == "apparent"
    assert overrides["save_log"] is True
    assert overrides["log_level"] == "DEBUG"
    assert overrides["request_timeout"] == 30


def test_cli_csv_list_parsing():
    args = parse_args(["a.json", "b.json", "--ignore", "root/cache, root/tmp,,"])

    assert args_to_overrides(args)["ignore_paths"] == ["root/cache", "root/tmp"]


def test_lazy_and_full_are_exclusive():
    assert args_to_overrides(parse_args(["a", "b", "--lazy"]))["lazy"] is True
    with pytest.raises(SystemExit):
        parse_args(["a", "b", "--lazy", "--full"])


def test_output_and_expand_options():
    args = parse_args(["a", "b", "--json", "--expand", "/srv/data"])

    assert args.json_output is True
    assert args.expand_path == "/srv/data"
