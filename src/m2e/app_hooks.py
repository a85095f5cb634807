#!/usr/bin/env python3
"""
App hooks for the m2e CLI - provides implementation for all commands
This file connects the CLI to the conversion engine and config files
"""

import sys
from pathlib import Path
from typing import Optional


def _load_settings(config: Optional[Path]):
    """Config loader for a command, or None when the default config is unreadable."""
    from m2e.core.config import ConfigurationError, get_config, load_config

    if config is not None:
        return load_config(config)
    try:
        return get_config()
    except ConfigurationError as e:
        print(f"Warning: {e}; using defaults", file=sys.stderr)
        return None


def _build_options(settings, code_aware, file_type, units, smart_quotes, min_confidence):
    from m2e.conversion.common import ConversionOptions

    defaults = ConversionOptions()
    if settings is not None:
        defaults = ConversionOptions(
            convert_units=settings.convert_units,
            normalise_smart_quotes=settings.normalise_smart_quotes,
            code_aware=settings.code_aware,
            file_type=settings.default_file_type,
            min_confidence=settings.min_confidence,
        )

    return ConversionOptions(
        convert_units=defaults.convert_units if units is None else units,
        normalise_smart_quotes=defaults.normalise_smart_quotes if smart_quotes is None else smart_quotes,
        code_aware=defaults.code_aware if code_aware is None else code_aware,
        file_type=file_type or defaults.file_type,
        min_confidence=defaults.min_confidence if min_confidence is None else min_confidence,
    )


def _describe_stats(stats: dict) -> str:
    """Summary such as "3 changes (spelling 2, unit 1)" for one file."""
    parts = [f"{kind} {count}" for kind, count in stats.items() if kind != "total" and count]
    summary = f"{stats['total']} changes"
    return f"{summary} ({', '.join(parts)})" if parts else summary


def on_convert(
    files: tuple,
    code_aware: Optional[bool],
    file_type: Optional[str],
    units: Optional[bool],
    smart_quotes: Optional[bool],
    min_confidence: Optional[float],
    in_place: bool,
    json: bool,
    debug: bool,
    config: Optional[Path],
    **kwargs,
) -> int:
    """Handle the convert command - convert stdin or each file"""
    import json as json_lib
    from dataclasses import replace

    from m2e.conversion.common import InvalidInput
    from m2e.conversion.constants import build_pattern_table, load_pattern_table
    from m2e.conversion.engine import ConversionEngine
    from m2e.core.config import ConfigurationError
    from m2e.core.logging import LogContext, set_level

    if debug:
        set_level("DEBUG")

    try:
        settings = _load_settings(config)
        options = _build_options(settings, code_aware, file_type, units, smart_quotes, min_confidence)
        table = build_pattern_table(settings) if config is not None else load_pattern_table(settings)
        engine = ConversionEngine(table)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not files:
        if in_place:
            print("Error: --in-place needs at least one file", file=sys.stderr)
            return 2
        try:
            with LogContext(file="<stdin>", file_type=options.file_type or "text"):
                result = engine.convert(sys.stdin.read(), options)
        except InvalidInput as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        if json:
            print(json_lib.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        else:
            sys.stdout.write(result.converted_text)
        return 0

    exit_code = 0
    reports = []
    for path in files:
        # Without an explicit type, code-aware files are scoped by their extension
        file_options = options
        if options.code_aware and not options.file_type:
            file_options = replace(options, file_type=path.name)

        try:
            with LogContext(file=str(path), file_type=file_options.file_type or "text"):
                result = engine.convert(path.read_bytes(), file_options)
        except (InvalidInput, OSError) as e:
            print(f"Error: {path}: {e}", file=sys.stderr)
            exit_code = 1
            continue

        if in_place:
            if result.changed:
                path.write_text(result.converted_text, encoding="utf-8")
            print(f"✅ {path}: {_describe_stats(result.stats())}", file=sys.stderr)
        if json:
            reports.append({"file": str(path), **result.to_dict()})
        elif not in_place:
            sys.stdout.write(result.converted_text)

    if json:
        print(json_lib.dumps(reports if len(files) > 1 else (reports[0] if reports else {}), indent=2, ensure_ascii=False))
    return exit_code


def on_status(json: bool = False, **kwargs) -> int:
    """Show pattern table statistics, sources and configuration warnings"""
    import json as json_lib

    from m2e import __version__
    from m2e.conversion.constants import load_pattern_table
    from m2e.conversion.pattern_cache import get_cache_stats

    table = load_pattern_table()
    status_data = {
        "version": __version__,
        "table": table.stats(),
        "pattern_cache": get_cache_stats(),
        "unit_config": {
            "enabled": table.unit_config.enabled,
            "enabled_unit_types": sorted(t.value for t in table.unit_config.enabled_unit_types),
            "min_confidence": table.unit_config.detection.min_confidence,
        },
    }
    status_data["status"] = "warning" if table.warnings else "healthy"

    if json:
        print(json_lib.dumps(status_data, indent=2, ensure_ascii=False))
    else:
        _print_status_formatted(status_data)
    return 0


def _print_status_formatted(status_data: dict) -> None:
    """Print status data in a formatted, human-readable way"""
    from rich.console import Console
    from rich.table import Table

    console = Console()
    status_emoji = {"healthy": "✅", "warning": "⚠️"}
    health_status = status_data["status"]
    console.print(
        f"\n🇬🇧 [bold]m2e {status_data['version']}[/bold] - "
        f"{status_emoji.get(health_status, '❓')} {health_status.upper()}"
    )

    table = status_data["table"]
    units = status_data["unit_config"]
    cache = status_data["pattern_cache"]

    summary = Table(show_header=True, header_style="bold magenta")
    summary.add_column("Component", style="cyan")
    summary.add_column("Details")
    summary.add_row(
        "📖 Dictionary",
        f"{table['dictionary_entries']} entries from {table['sources'].get('dictionary', 'built-in')}",
    )
    summary.add_row(
        "🧠 Contextual words",
        f"{', '.join(table['contextual_words']) or 'none'} ({table['contextual_patterns']} patterns)",
    )
    summary.add_row(
        f"📏 Units {'✅' if units['enabled'] else '⏸️'}",
        f"{table['unit_rules']} rules, {table['unit_aliases']} aliases, {table['unit_exclusions']} idiom guards\n"
        f"types: {', '.join(units['enabled_unit_types'])}",
    )
    summary.add_row("⚡ Pattern cache", f"{int(cache['size'])} patterns, hit ratio {cache['hit_ratio']:.0%}")
    console.print(summary)

    if table["warnings"]:
        console.print("\n[bold yellow]⚠️  Warnings[/bold yellow]")
        for warning in table["warnings"]:
            console.print(f"   • {warning}", markup=False)


def on_config_show(json: bool = False, **kwargs) -> int:
    """Show all configuration settings"""
    try:
        from m2e.core.config import get_config

        config = get_config()

        if json:
            import json as j

            print(j.dumps({"config_file": config.config_file, **config.as_dict()}, indent=2))
        else:
            print("🔧 Current Configuration")
            print("=" * 40)
            print(f"  config_file: {config.config_file}")
            for k, v in config.as_dict().items():
                print(f"  {k}: {v}")
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def on_config_path(**kwargs) -> int:
    """Show the configuration directory and the user file locations"""
    try:
        from m2e.core.config import get_config

        config = get_config()
        print(f"config_dir: {config.config_dir}")
        print(f"config_file: {config.config_file}")
        print(f"user_dictionary: {config.user_dictionary_path}")
        print(f"unit_config: {config.unit_config_path}")
        print(f"contextual_config: {config.contextual_config_path}")
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


EXAMPLE_USER_DICTIONARY = {
    "_comment": "American spelling to British replacement; entries here override the built-in dictionary",
    "customize": "customise",
}


def on_config_init(force: bool = False, **kwargs) -> int:
    """Write example user configuration files and reload the pattern table"""
    import json as json_lib

    from m2e.conversion.constants import reload_pattern_table
    from m2e.conversion.contextual_config import ContextualWordConfig
    from m2e.conversion.unit_config import UnitConfig
    from m2e.core.config import get_config

    try:
        config = get_config()
        targets = [
            (config.user_dictionary_path,
             lambda p: p.write_text(json_lib.dumps(EXAMPLE_USER_DICTIONARY, indent=2) + "\n", encoding="utf-8")),
            (config.unit_config_path, UnitConfig.default().save),
            (config.contextual_config_path, ContextualWordConfig.default().save),
        ]

        for path, write in targets:
            if path.exists() and not force:
                print(f"⏭️  {path} exists, skipped (use --force to overwrite)")
                continue
            path.parent.mkdir(parents=True, exist_ok=True)
            write(path)
            print(f"✅ Wrote {path}")

        reload_pattern_table(config)
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
