#!/usr/bin/env python3
"""CLI interface for agentrace-timeline."""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click

from .html import generate_html
from .loader import load_events
from .options import TimelineOptions
from .timeline import compile_timeline


def get_default_output_path(input_path: Path, output_format: str) -> Path:
    """Output path next to the input, with the format's extension.

    An input that already carries that extension gets a ``.timeline`` infix
    so it is never overwritten.
    """
    suffix = f".{output_format}"
    if input_path.suffix == suffix:
        return input_path.with_name(f"{input_path.stem}.timeline{suffix}")
    return input_path.with_suffix(suffix)


@click.command()
@click.argument("input_path", type=click.Path(path_type=Path))
@click.option(
    "-o",
    "--output",
    type=click.Path(path_type=Path),
    help="Output file path (default: input file with the format extension, or <stem>.timeline.<format> when the input already has it)",
)
@click.option(
    "-f",
    "--format",
    "output_format",
    type=click.Choice(["html", "json"]),
    default="html",
    help="Output format (default: html). json writes the compiled blocks and navigation index.",
)
@click.option(
    "--project-path",
    type=str,
    default=None,
    help="Project root used to shorten file paths in tool labels (default: each event's cwd)",
)
@click.option(
    "--title",
    type=str,
    default=None,
    help="Page title for HTML output",
)
@click.option(
    "--open-browser",
    is_flag=True,
    help="Open the generated HTML file in the default browser",
)
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Show debug logging and full traceback on errors.",
)
def main(
    input_path: Path,
    output: Optional[Path],
    output_format: str,
    project_path: Optional[str],
    title: Optional[str],
    open_browser: bool,
    debug: bool,
) -> None:
    """Compile a recorded agent session into a navigable timeline.

    INPUT_PATH: Path to a session event log (JSON array, {"events": [...]} response, or JSONL).
    """
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    if output is None:
        output = get_default_output_path(input_path, output_format)
    if output.resolve() == input_path.resolve():
        click.echo(f"Error: Output path {output} is the input file", err=True)
        sys.exit(1)

    try:
        options = TimelineOptions.from_env(project_path=project_path)
        events = load_events(input_path)
        timeline = compile_timeline(events, options)

        if output_format == "json":
            content = json.dumps(timeline.to_dict(), indent=2, ensure_ascii=False)
        else:
            content = generate_html(
                timeline, title=title or f"Session Timeline: {input_path.stem}", options=options
            )

        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(content, encoding="utf-8")

        click.echo(
            f"Successfully compiled {len(events)} events from {input_path} to {output} "
            f"({len(timeline.blocks)} blocks, {len(timeline.message_blocks)} messages)"
        )

        if open_browser and output_format == "html":
            click.launch(str(output))

    except FileNotFoundError as e:
        click.echo(f"Error: {e}", err=True)
        if debug:
            import traceback

            traceback.print_exc()
        sys.exit(1)
    except Exception as e:
        click.echo(f"Error compiling timeline: {e}", err=True)
        if debug:
            import traceback

            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
