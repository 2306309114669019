"""
CLI entry point — argument parsing and one-shot edit operations.
"""

import argparse
import os
import sys

from .cli_display import print_result, setup_logger
from .config import Config
from .diff_display import make_gate
from .editing.hunks import diff_text
from .editing.text_editor import TextEditor, ToolResult


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="patchengine",
        description="Patch engine — preview, approve and apply file edits",
    )
    parser.add_argument("--config", default=None,
                        help="Path to .patchengine.yaml config file")
    parser.add_argument("--auto", action="store_true",
                        help="Non-interactive mode: approve every edit")
    parser.add_argument("--console", action="store_true",
                        help="Use the plain console prompt instead of the TUI")
    parser.add_argument("--no-color", action="store_true",
                        help="Disable ANSI colors in diff output")
    parser.add_argument("--context", type=int, default=None,
                        help="Context lines around each change (default: from config)")

    sub = parser.add_subparsers(dest="command", required=True)

    p_diff = sub.add_parser("diff", help="Show the diff between two files")
    p_diff.add_argument("old", help="Old version of the file")
    p_diff.add_argument("new", help="New version of the file")
    p_diff.add_argument("--path", default=None,
                        help="Path shown in the diff headers (default: NEW)")

    p_view = sub.add_parser("view", help="Show a file or list a directory")
    p_view.add_argument("path")
    p_view.add_argument("--range", nargs=2, type=int, metavar=("START", "END"),
                        default=None, help="1-indexed inclusive line range")

    p_create = sub.add_parser("create", help="Create or overwrite a file")
    p_create.add_argument("path")
    src = p_create.add_mutually_exclusive_group(required=True)
    src.add_argument("--content", help="File content")
    src.add_argument("--from-file", help="Read the content from this file")

    p_replace = sub.add_parser("str-replace", help="Replace a string in a file")
    p_replace.add_argument("path")
    p_replace.add_argument("old")
    p_replace.add_argument("new")
    p_replace.add_argument("--all", action="store_true",
                           help="Replace every occurrence, not just the first")

    p_lines = sub.add_parser("replace-lines", help="Replace a range of lines")
    p_lines.add_argument("path")
    p_lines.add_argument("start", type=int)
    p_lines.add_argument("end", type=int)
    p_lines.add_argument("content")

    p_insert = sub.add_parser("insert", help="Insert a line")
    p_insert.add_argument("path")
    p_insert.add_argument("line", type=int)
    p_insert.add_argument("content")

    return parser


def _run_diff(args, cfg: Config) -> ToolResult:
    try:
        with open(args.old, "r", encoding="utf-8", newline="") as f:
            old = f.read()
        with open(args.new, "r", encoding="utf-8", newline="") as f:
            new = f.read()
    except OSError as e:
        return ToolResult.fail(f"Error reading input: {e}", "IOFailure")

    path = args.path or args.new
    return ToolResult.ok(diff_text(old, new, path, cfg.CONTEXT_LINES).render())


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    # ── 0. Load config ──
    cfg = Config.load(args.config)

    # CLI overrides
    if args.auto:
        cfg.AUTO_APPROVE = True
    if args.console:
        cfg.CONFIRMATION_UI = "console"
    if args.context is not None:
        cfg.CONTEXT_LINES = args.context
    color = not args.no_color

    log = setup_logger(cfg.LOG_DIR)
    log.info("patchengine %s", args.command)

    if args.command == "diff":
        result = _run_diff(args, cfg)
    else:
        editor = TextEditor(
            gate=make_gate(cfg, color=color),
            config=cfg,
            journal_root=os.getcwd() if cfg.JOURNAL_ENABLED else None,
        )
        if args.command == "view":
            result = editor.view(args.path, tuple(args.range) if args.range else None)
        elif args.command == "create":
            if args.from_file:
                try:
                    with open(args.from_file, "r", encoding="utf-8", newline="") as f:
                        content = f.read()
                except OSError as e:
                    result = ToolResult.fail(f"Error reading input: {e}", "IOFailure")
                    print_result(result, color)
                    return 1
            else:
                content = args.content
            result = editor.create(args.path, content)
        elif args.command == "str-replace":
            result = editor.str_replace(args.path, args.old, args.new,
                                        replace_all=args.all)
        elif args.command == "replace-lines":
            result = editor.replace_lines(args.path, args.start, args.end,
                                          args.content)
        else:
            result = editor.insert(args.path, args.line, args.content)

    if args.command == "view" and result.success:
        print(result.output)
    else:
        print_result(result, color)
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
