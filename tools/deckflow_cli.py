#!/usr/bin/env python3
"""
Deckflow CLI - run the pipeline over a local input directory

Usage:
    python tools/deckflow_cli.py INPUT_DIR [--output slides.md] [--report]

Writes the Marp markdown to --output (stdout when omitted). The final run
status, its warnings and errors, and the optional processing report go to
stderr, so stdout carries only the deck.
Exit code is 1 when the input is invalid or the run aborts.
"""

import asyncio
import json
import sys
from datetime import datetime
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from deckflow.core.errors import PipelineError
from deckflow.core.pipeline import PipelineOrchestrator
from deckflow.services.document_loader import DocumentLoader

# ANSI colors
COLORS = {
    'reset': '\033[0m',
    'red': '\033[91m',
    'green': '\033[92m',
    'yellow': '\033[93m',
    'cyan': '\033[96m',
    'gray': '\033[90m',
    'bold': '\033[1m',
}


def color(text, color_name):
    return f"{COLORS.get(color_name, '')}{text}{COLORS['reset']}"


def timestamp():
    return datetime.now().strftime("%H:%M:%S")


def print_status(orchestrator: PipelineOrchestrator):
    status = orchestrator.get_status()
    state = "completed" if status.completed else "aborted" if status.aborted else "running"
    print(f"{color(f'[{timestamp()}]', 'gray')} stage {status.current_stage.value} "
          f"({status.current_stage.name}) {status.progress}% {state}", file=sys.stderr)
    for warning in status.warnings:
        print(f"    {color('WARN', 'yellow')} [{warning.stage.name}] {warning.code}: {warning.message}", file=sys.stderr)
    for error in status.errors:
        print(f"    {color('ERROR', 'red')} [{error.stage.name}] {error.code.value}: {error.message}", file=sys.stderr)


async def main():
    import argparse
    parser = argparse.ArgumentParser(description="Deckflow: staged markdown to Marp slides")
    parser.add_argument("input_dir", help="Directory with the five staged markdown files")
    parser.add_argument("--output", "-o", default=None, help="Write Marp markdown here (default: stdout)")
    parser.add_argument("--report", action="store_true", help="Print the processing report as JSON to stderr")
    args = parser.parse_args()

    loader = DocumentLoader()
    validation = loader.validate_directory(args.input_dir)
    for issue in validation.errors:
        print(f"{color('INPUT', 'red')} {issue.code}: {issue.message}", file=sys.stderr)

    try:
        documents = await loader.load_directory(args.input_dir)
    except PipelineError as e:
        print(color(f"Cannot load input: {e}", 'red'), file=sys.stderr)
        return 1

    orchestrator = PipelineOrchestrator()
    try:
        result = await orchestrator.run(documents)
    except PipelineError as e:
        print_status(orchestrator)
        print(color(f"Run aborted: {e}", 'red'), file=sys.stderr)
        return 1

    print_status(orchestrator)

    if args.output:
        Path(args.output).write_text(result.output.content, encoding="utf-8")
        print(color(f"Wrote {result.output.slide_count} slides to {args.output}", 'green'), file=sys.stderr)
    else:
        print(result.output.content)

    if args.report:
        report = orchestrator.generate_report()
        print(json.dumps(report.model_dump(mode="json"), indent=2, ensure_ascii=False), file=sys.stderr)

    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
