#!/usr/bin/env python3
"""
NDA Clause Review Tool

Reads a plain-text NDA, checks every clause in the rulebook for presence,
classifies each found clause as preferred / fallback / unacceptable for the
chosen negotiating party, and prints a scored risk summary.

Usage:
    python main.py <document.txt|-> [--perspective receiving|disclosing|mutual]
                   [--rulebook <rulebook.json|.xlsx>] [--json [out.json]] [--workers N]

The rulebook defaults to the bundled M&A NDA playbook (override with
NDA_RULEBOOK_PATH).
"""

import json
import logging
import sys
from pathlib import Path

from nda_review.config import LOG_LEVEL, OUTPUT_PATH, PERSPECTIVES, RULEBOOK_PATH
from nda_review.output import format_result, print_rich_summary
from nda_review.pipeline import analyze_document
from nda_review.rulebook import CatalogFetchError, FileRulebook

USAGE = (
    "Usage: python main.py <document.txt|-> [--perspective receiving|disclosing|mutual] "
    "[--rulebook <path>] [--json [out.json]] [--workers N]"
)


def parse_args(args: list[str]) -> dict:
    opts = {
        "input": None,
        "perspective": "receiving",
        "rulebook": None,
        "json": None,
        "workers": None,
    }
    i = 0
    while i < len(args):
        if args[i] == "--perspective" and i + 1 < len(args):
            opts["perspective"] = args[i + 1].lower()
            if opts["perspective"] not in PERSPECTIVES:
                raise ValueError(
                    f"--perspective must be {', '.join(PERSPECTIVES)} (got '{opts['perspective']}')"
                )
            i += 2
        elif args[i] == "--rulebook" and i + 1 < len(args):
            opts["rulebook"] = Path(args[i + 1])
            i += 2
        elif args[i] == "--json":
            # bare --json writes to output/analysis.json
            if i + 1 < len(args) and not args[i + 1].startswith("-"):
                opts["json"] = Path(args[i + 1])
                i += 2
            else:
                opts["json"] = OUTPUT_PATH
                i += 1
        elif args[i] == "--workers" and i + 1 < len(args):
            if not args[i + 1].isdigit() or int(args[i + 1]) < 1:
                raise ValueError(f"--workers must be a positive integer (got '{args[i + 1]}')")
            opts["workers"] = int(args[i + 1])
            i += 2
        elif args[i].startswith("--"):
            raise ValueError(f"Unknown or incomplete option: {args[i]}")
        else:
            opts["input"] = args[i]
            i += 1
    if not opts["input"]:
        raise ValueError("No input document given")
    return opts


def read_document(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    path = Path(source)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    return path.read_text(encoding="utf-8")


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if not args or args[0] in ("-h", "--help"):
        print(USAGE)
        print("\nExamples:")
        print("  python main.py nda.txt                               # receiving party, bundled rulebook")
        print("  python main.py nda.txt --perspective disclosing --json output/analysis.json")
        print("  cat nda.txt | python main.py - --rulebook playbook.xlsx")
        return 0

    logging.basicConfig(level=LOG_LEVEL, format="%(levelname)s %(name)s: %(message)s")

    try:
        opts = parse_args(args)
        document = read_document(opts["input"])
    except (ValueError, FileNotFoundError) as e:
        print(f"Error: {e}")
        return 1

    rulebook_path = opts["rulebook"] or RULEBOOK_PATH
    print("NDA Clause Review Tool")
    print(f"Perspective: {opts['perspective']} party")
    print(f"Rulebook: {rulebook_path}")
    print()

    def progress(step, total, msg):
        print(f"[Step {step}/{total}] {msg}")

    try:
        result = analyze_document(
            document,
            opts["perspective"],
            rulebook=FileRulebook(rulebook_path),
            max_workers=opts["workers"],
            progress_callback=progress,
        )
    except CatalogFetchError as e:
        print(f"Error: {e}")
        return 1

    report = format_result(result)
    if opts["json"]:
        out_path = opts["json"]
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(json.dumps({"result": result.to_dict(), "report": report}, indent=2))
        print(f"  Analysis written to: {out_path}")

    print_rich_summary(result, report)
    return 0


if __name__ == "__main__":
    sys.exit(main())
