from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: logging bootstrap, merging of configuration
sources (defaults, persistent storage and CLI overrides), report discovery,
the eager or lazy diff run and result rendering.
"""

import json
import sys
from typing import Any, Dict, List, Optional, Sequence

from ncdudiff.core.analysis.diff_renderer import diff_node_to_dict, render_diff_lines
from ncdudiff.core.diff.engine import calc_diff
from ncdudiff.core.diff.path_index import Forest, lookup
from ncdudiff.core.diff.session import DiffSession
from ncdudiff.core.parsing.ncdu_parser import ParserConfig
from ncdudiff.core.services.loader import SnapshotLoader
from ncdudiff.core.services.validator import validate_config
from ncdudiff.domain.config import get_default_config, load_config, save_config
from ncdudiff.domain.constants import PATH_SEPARATOR
from ncdudiff.domain.diff_models import DiffNode, Path
from ncdudiff.domain.errors import MalformedSnapshotError, NcduDiffError, PathNotFoundError
from ncdudiff.infra.fs import find_report_files
from ncdudiff.infra.logging import LoggingConfig, configure_logging, get_default_log_path, get_logger
from ncdudiff.interface.cli import args as cli_args

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_ENGINE_ERROR = 1
EXIT_INPUT_ERROR = 2
EXIT_INTERRUPTED = 130

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the main CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code (0 success, 1 engine failure, 2 bad input,
        130 interrupted).
    """
    if sys.platform == "win32":
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8")

    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 2. Resolve base configuration (Default vs Persistent state)
    base_conf = get_default_config() if args.use_defaults else load_config()

    # 3. Map and merge command-line overrides
    overrides = cli_args.args_to_overrides(args)
    raw_conf = _merge_config(base_conf, overrides)

    # 4. Schema validation and normalization
    clean_conf, warnings = validate_config(raw_conf, strict=False)

    # 5. Logging bootstrap (console on stderr, optional persistent file)
    logging_conf = LoggingConfig(
        level=clean_conf["log_level"],
        console=True,
        log_file=get_default_log_path() if clean_conf["save_log"] else None,
    )
    configure_logging(logging_conf)
    logger.debug("CLI execution initiated.")

    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    if args.dump_config:
        print(json.dumps(clean_conf, ensure_ascii=False, indent=2))
        return EXIT_OK

    if args.save_config:
        save_config(clean_conf)

    # 6. Pre-flight input verification
    try:
        reports = find_report_files(args.reports)
    except FileNotFoundError as e:
        logger.error(str(e))
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR

    if len(reports) < 2:
        msg = f"need at least two reports to compare, found {len(reports)}"
        logger.error(msg)
        print(f"ERROR: {msg}", file=sys.stderr)
        return EXIT_INPUT_ERROR

    if len(reports) > 2:
        logger.info(f"{len(reports)} reports found; comparing the first and the last")

    # 7. Diff execution and rendering
    try:
        output = _run_diff(reports[0], reports[-1], clean_conf, args)
    except KeyboardInterrupt:
        logger.warning("Interrupted by user.")
        print("Interrupted.", file=sys.stderr)
        return EXIT_INTERRUPTED
    except PathNotFoundError as e:
        logger.error(str(e))
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR
    except (MalformedSnapshotError, OSError) as e:
        logger.error(f"Cannot read report: {e}")
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR
    except NcduDiffError as e:
        logger.critical(f"Diff failed: {e}", exc_info=True)
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_ENGINE_ERROR

    print(output)
    return EXIT_OK

# -----------------------------------------------------------------------------
# DIFF EXECUTION
# -----------------------------------------------------------------------------

def _run_diff(source0: str, source1: str, conf: Dict[str, Any], args: Any) -> str:
    """Load both reports, diff them and return the rendered output."""
    parser_conf = ParserConfig(
        ignore_paths=tuple(conf["ignore_paths"]),
        expected_progver=conf["expected_progver"],
        expected_format=conf["expected_format"],
    )

    with SnapshotLoader(parser_conf, request_timeout=conf["request_timeout"]) as loader:
        if conf["lazy"]:
            with DiffSession.from_reports(loader, source0, source1) as session:
                nodes = session.roots()
                if args.expand_path:
                    path = _split_path(args.expand_path, [n.name for n in nodes])
                    nodes = [session.expand_path(path)]
                return _render(nodes, conf, args.json_output, session.resolve)

        snapshot0, snapshot1 = loader.get(source0), loader.get(source1)
        tree = calc_diff(snapshot0, snapshot1)
        nodes = tree.roots
        if args.expand_path:
            path = _split_path(args.expand_path, [n.name for n in nodes])
            nodes = [lookup(Forest.from_tree(tree), path)]
        return _render(nodes, conf, args.json_output, None)

def _render(nodes: Sequence[DiffNode], conf: Dict[str, Any], as_json: bool, resolve: Any) -> str:
    max_depth = conf["max_depth"]
    if as_json:
        data = [diff_node_to_dict(n, resolve, max_depth) for n in nodes]
        return json.dumps(data, ensure_ascii=False, indent=2)

    lines: List[str] = []
    render_diff_lines(
        nodes,
        lines,
        resolve=resolve,
        max_depth=max_depth,
        changed_only=conf["changed_only"],
        size_mode=conf["show_sizes"],
    )
    return "\n".join(lines)

def _split_path(raw: str, root_names: Sequence[str]) -> Path:
    """
    Split a user supplied path into name segments.

    Root names are scanned paths and may contain separators themselves, so
    the longest root name that prefixes `raw` is taken as the first segment.
    """
    for root in sorted(root_names, key=len, reverse=True):
        if raw == root:
            return (root,)
        prefix = root.rstrip(PATH_SEPARATOR) + PATH_SEPARATOR
        if raw.startswith(prefix):
            rest = [s for s in raw[len(prefix):].split(PATH_SEPARATOR) if s]
            return (root, *rest)
    return tuple(s for s in raw.split(PATH_SEPARATOR) if s)

# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Perform a shallow merge of override values into the base configuration.

    Only known keys are merged; None means "not given on the command line".
    """
    out = dict(base)
    keys_to_merge = [
        "ignore_paths", "request_timeout", "lazy", "max_depth",
        "changed_only", "show_sizes", "log_level", "save_log",
    ]
    for k in keys_to_merge:
        if k in overrides and overrides[k] is not None:
            out[k] = overrides[k]
    return out

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
