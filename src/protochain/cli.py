"""Command-line interface for protochain.

Runs the sections of a tutorial file (the bundled prototypes tutorial by
default), lists them, or evaluates a snippet given on the command line.
"""

import argparse
import sys
from pathlib import Path

from loguru import logger

import protochain


def configure_logging(verbose=False):
    """Route protochain's log messages to stderr."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING",
               format="<level>{level}</level>: {message}")
    logger.enable("protochain")


def list_sections(lesson):
    for section in lesson.sections:
        mark = "x" if section.active else " "
        print(f"[{mark}] {section.number}. {section.title}")


def run_sections(lesson, sections, strict):
    for section in sections:
        print(f"=== {section.number}. {section.title} ===")
        lesson.run(section, strict=strict)


def evaluate(text, strict, show_lark):
    if show_lark:
        text = text.strip()
        print(protochain.parse_tree(text if text.endswith(";") else text + ";").pretty())
        return
    interp = protochain.Interpreter(strict=strict)
    result = interp.evaluate(text)
    if result is not protochain.UNDEFINED:
        print(protochain.inspect(result, interp.model, top=False))


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="protochain",
        description="Run annotated constructor and prototype snippets")
    parser.add_argument("source", nargs="?",
        help="Tutorial file to run (defaults to the bundled tutorial)")
    parser.add_argument("--list", action="store_true",
        help="List the sections and whether they are switched on")
    parser.add_argument("-s", "--section", type=int, action="append", metavar="N",
        help="Run section N whether or not it is switched on (repeatable)")
    parser.add_argument("--all", action="store_true",
        help="Run every section")
    parser.add_argument("-e", "--eval", metavar="TEXT",
        help="Evaluate a snippet and print the value of its last expression")
    parser.add_argument("--lark", action="store_true",
        help="Show the lark parse tree instead of running")
    parser.add_argument("--sloppy", action="store_true",
        help="Ignore \"use strict\" and run in sloppy mode")
    parser.add_argument("-v", "--verbose", action="store_true",
        help="Log model operations to stderr")
    args = parser.parse_args(argv)

    configure_logging(args.verbose)
    strict = False if args.sloppy else None

    if args.eval is not None:
        if args.source or args.list or args.section or args.all:
            parser.error("--eval cannot be combined with a source file or sections")
        try:
            evaluate(args.eval, strict, args.lark)
        except protochain.ModelError as e:
            print(f"{type(e).__name__}: {e}", file=sys.stderr)
            return 1
        return 0

    path = Path(args.source) if args.source else protochain.BUNDLED_TUTORIAL
    if not path.exists():
        print(f"Error: File not found: {path}", file=sys.stderr)
        return 1
    lesson = protochain.load_lesson(path)

    if args.list:
        list_sections(lesson)
        return 0

    try:
        sections = lesson.select(args.section, args.all)
    except KeyError as e:
        parser.error(e.args[0])

    if not sections:
        print("No sections are switched on; use --section N or --all", file=sys.stderr)
        return 1

    try:
        if args.lark:
            for section in sections:
                print(protochain.parse_tree(lesson.source(section)).pretty())
        else:
            run_sections(lesson, sections, strict)
    except protochain.ModelError as e:
        print(f"{type(e).__name__}: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
