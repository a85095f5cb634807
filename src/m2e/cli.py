#!/usr/bin/env python3
"""Command line interface for m2e"""
import re
from pathlib import Path

import rich_click as click
from rich_click import RichGroup

from . import app_hooks

# Set up rich-click configuration globally
click.rich_click.USE_RICH_MARKUP = True
click.rich_click.USE_MARKDOWN = False
click.rich_click.MARKUP_MODE = "rich"
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.GROUP_ARGUMENTS_OPTIONS = True
click.rich_click.SHOW_METAVARS_COLUMN = False
click.rich_click.APPEND_METAVARS_HELP = True
click.rich_click.STYLE_ERRORS_SUGGESTION = "#ff5555"
click.rich_click.ERRORS_SUGGESTION = "Try running the '--help' flag for more information."
click.rich_click.MAX_WIDTH = 120
click.rich_click.WIDTH = 120
click.rich_click.COLOR_SYSTEM = "auto"
click.rich_click.ALIGN_OPTIONS_SWITCHES = True
click.rich_click.STYLE_OPTION = "#ff79c6"  # Dracula Pink - for option flags
click.rich_click.STYLE_SWITCH = "#50fa7b"  # Dracula Green - for switches
click.rich_click.STYLE_METAVAR = "#8BE9FD not bold"
click.rich_click.STYLE_HEADER_TEXT = "bold yellow"
click.rich_click.STYLE_EPILOGUE_TEXT = "#6272a4"
click.rich_click.STYLE_USAGE = "#BD93F9"
click.rich_click.STYLE_USAGE_COMMAND = "bold"
click.rich_click.STYLE_HELPTEXT_FIRST_LINE = "#f8f8f2"
click.rich_click.STYLE_HELPTEXT = "#B3B8C0"
click.rich_click.STYLE_OPTION_DEFAULT = "#ffb86c"
click.rich_click.STYLE_OPTIONS_PANEL_BORDER = "dim"
click.rich_click.STYLE_COMMANDS_PANEL_BORDER = "dim"
click.rich_click.STYLE_COMMAND = "#50fa7b"
click.rich_click.STYLE_COMMANDS_TABLE_COLUMN_WIDTH_RATIO = (1, 3)


def get_version():
    """Get version from pyproject.toml or __init__.py"""
    possible_paths = [
        Path(__file__).parent.parent / "pyproject.toml",  # For flat structure
        Path(__file__).parent.parent.parent / "pyproject.toml",  # For src/ structure
    ]
    for path in possible_paths:
        if path.exists():
            match = re.search(r'^version\s*=\s*["\']([^"\']+)["\']', path.read_text(encoding="utf-8"), re.MULTILINE)
            if match:
                return match.group(1)

    from . import __version__

    return __version__


def _run_hook(ctx, hook_name, **kwargs):
    """Dispatch a command to its app hook and exit with the hook's return code."""
    hook_func = getattr(app_hooks, hook_name, None)
    if hook_func is None:
        click.echo(f"Executing {ctx.command.name} command...")
        for key, value in kwargs.items():
            click.echo(f"  {key}: {value}")
        return

    kwargs["command_name"] = ctx.command.name
    result = hook_func(**kwargs)
    ctx.exit(result or 0)


@click.group(cls=RichGroup, context_settings={"help_option_names": ["-h", "--help"], "max_content_width": 120})
@click.version_option(version=get_version(), prog_name="m2e")
def main():
    """🇬🇧 [bold color(6)]m2e[/bold color(6)] - American to British English conversion


    \b
    [#B3B8C0]Spelling, contextual words, imperial units and smart quotes, with code-aware scoping.[/#B3B8C0]

    \b
    [bold yellow]💡 Quick Start:[/bold yellow]
       [green]echo "The color of the center" | m2e convert[/green]
       [green]m2e convert --code-aware main.py[/green]
       [green]m2e config init[/green]
    """
    pass


@main.command()
@click.pass_context
@click.argument("FILES", nargs=-1, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--code-aware/--prose", default=None, help="💻 Convert only comments and strings of source code")
@click.option("-t", "--file-type", type=str, help="📄 File type or extension (e.g. py, go, md)")
@click.option("--units/--no-units", default=None, help="📏 Convert imperial units to metric")
@click.option("--smart-quotes/--no-smart-quotes", default=None, help="❝ Normalise smart quotes and dashes")
@click.option("--min-confidence", type=click.FloatRange(0.0, 1.0), help="🎯 Minimum confidence for contextual words")
@click.option("-i", "--in-place", is_flag=True, help="✏️ Rewrite files instead of printing")
@click.option("--json", is_flag=True, help="📋 Output results and changes as JSON")
@click.option("--debug", is_flag=True, help="🐞 Enable detailed debug logging")
@click.option("--config", type=click.Path(dir_okay=False, path_type=Path), help="⚙️ Path to custom config file")
def convert(ctx, files, code_aware, file_type, units, smart_quotes, min_confidence, in_place, json, debug, config):
    """🔄 Convert text from files or standard input"""
    _run_hook(
        ctx,
        "on_convert",
        files=files,
        code_aware=code_aware,
        file_type=file_type,
        units=units,
        smart_quotes=smart_quotes,
        min_confidence=min_confidence,
        in_place=in_place,
        json=json,
        debug=debug,
        config=config,
    )


@main.command()
@click.pass_context
@click.option("--json", is_flag=True, help="📋 Output status results as JSON")
def status(ctx, json):
    """✅ Show loaded dictionaries, rules and configuration warnings"""
    _run_hook(ctx, "on_status", json=json)


@main.group()
def config():
    """⚙️ Manage user configuration files"""
    pass


@config.command()
@click.pass_context
@click.option("--json", is_flag=True, help="📋 Output configuration as JSON")
def show(ctx, json):
    """👁️ Display current configuration"""
    _run_hook(ctx, "on_config_show", json=json)


@config.command()
@click.pass_context
@click.option("-f", "--force", is_flag=True, help="🔄 Overwrite existing files")
def init(ctx, force):
    """📝 Write example user dictionary, unit and contextual configs"""
    _run_hook(ctx, "on_config_init", force=force)


@config.command()
@click.pass_context
def path(ctx):
    """📂 Show where configuration files are read from"""
    _run_hook(ctx, "on_config_path")


def cli_entry():
    """Entry point for the CLI when installed via pipx."""
    main()


if __name__ == "__main__":
    cli_entry()
