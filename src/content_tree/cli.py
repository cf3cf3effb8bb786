"""CLI for content trees (check, map, tree, MCP server)."""

import asyncio
import json
from pathlib import Path
from typing import Annotated, Any

import typer
from loguru import logger

from content_tree.config import ProjectConfig, load_project_config
from content_tree.core.check.checker import check_all
from content_tree.core.check.types import CheckOptions, CheckResult
from content_tree.core.tree.content_tree import ContentTree
from content_tree.core.tree.loader import build_content_tree
from content_tree.errors import ContentTreeError
from content_tree.logging_config import configure_logging

app = typer.Typer(help="Content tree: check and map multi-language markdown content.")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    configure_logging(verbose=verbose)


ProjectDirOption = Annotated[
    Path | None,
    typer.Option("--project-dir", "-p", help="Project directory holding the config file"),
]
LanguageOption = Annotated[
    str | None,
    typer.Option("--language", "-l", help="Language of the content to load"),
]
DefaultLanguageOption = Annotated[
    str | None,
    typer.Option("--default-language", help="Language of files without a language suffix"),
]


def _load_config(project_dir: Path | None, overrides: dict[str, Any]) -> ProjectConfig:
    try:
        return load_project_config(project_dir or Path.cwd(), overrides=overrides)
    except ContentTreeError as e:
        logger.error("{}", e)
        raise typer.Exit(1) from e


def _resolve_target(config: ProjectConfig, content: Path) -> Path:
    target = content if content.is_absolute() else config.project_dir / content
    target = target.resolve()
    if not target.exists():
        logger.error("Content path not found: {}", target)
        raise typer.Exit(1)
    return target


def _build_tree(config: ProjectConfig, content_dir: Path) -> ContentTree:
    try:
        return build_content_tree(
            content_dir,
            language=config.language,
            default_language=config.default_language,
        )
    except ContentTreeError as e:
        logger.error("{}", e)
        raise typer.Exit(1) from e


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def print_results(result: CheckResult) -> None:
    """Print issues grouped by file followed by a summary line."""
    for file in result.files:
        if not file.issues:
            continue
        typer.echo(file.file_path)
        for issue in file.issues:
            typer.echo(
                f"  {issue.line}:{issue.column}  {issue.severity}  {issue.rule}  "
                f"{issue.message}  ({issue.category})"
            )
        typer.echo("")

    summary = []
    if result.total_errors:
        summary.append(_plural(result.total_errors, "error"))
    if result.total_warnings:
        summary.append(_plural(result.total_warnings, "warning"))
    file_count = len(result.files)
    if summary:
        typer.echo(f"Results: {', '.join(summary)} in {_plural(file_count, 'file')}")
    else:
        typer.echo(f"All {_plural(file_count, 'file')} passed")


@app.command()
def check(
    content: Path = typer.Argument(..., help="Content directory or file to check"),
    project_dir: ProjectDirOption = None,
    language: LanguageOption = None,
    default_language: DefaultLanguageOption = None,
    skip_external: bool = typer.Option(False, "--skip-external", "-x", help="Skip remote links and images"),
    timeout: Annotated[
        int | None,
        typer.Option("--timeout", "-t", help="Remote request timeout in milliseconds"),
    ] = None,
    min_severity: Annotated[
        str | None,
        typer.Option("--min-severity", "-s", help="Only report issues at least this severe (error, warning)"),
    ] = None,
    categories: Annotated[
        list[str] | None,
        typer.Option("--category", "-c", help="Check category to run (lint, link, image); repeatable"),
    ] = None,
    ignore_patterns: Annotated[
        list[str] | None,
        typer.Option("--ignore-pattern", help="Regex of link targets to skip; repeatable"),
    ] = None,
    ignore_rules: Annotated[
        list[str] | None,
        typer.Option("--ignore-rule", help="Lint rule to disable; repeatable"),
    ] = None,
    static_prefix: Annotated[
        str | None,
        typer.Option("--static-prefix", help="URL prefix served from the static directory"),
    ] = None,
    static_dir: Annotated[
        Path | None,
        typer.Option("--static-dir", help="Directory holding static assets"),
    ] = None,
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Check content for lint issues, broken links and missing images."""
    config = _load_config(
        project_dir,
        {
            "language": language,
            "defaultLanguage": default_language,
            "skipExternal": skip_external or None,
            "timeout": timeout,
            "minSeverity": min_severity,
            "categories": categories,
            "ignorePatterns": ignore_patterns,
            "ignoreRules": ignore_rules,
            "staticPrefix": static_prefix,
            "staticDir": str(static_dir) if static_dir else None,
        },
    )
    target = _resolve_target(config, content)
    if target.is_dir():
        content_dir = target
    elif config.content_dir in target.parents:
        content_dir = config.content_dir
    else:
        content_dir = target.parent
    logger.info("Checking content in {}", content_dir)

    tree = _build_tree(config, content_dir)
    nodes = tree.get_flattened_tree()
    if target.is_file():
        nodes = [n for n in nodes if (content_dir / n.file_path).resolve() == target]

    options = CheckOptions.from_settings(
        config.check,
        content_dir=content_dir,
        root_content_dir=config.content_dir,
        content_tree=tree,
    )
    result = asyncio.run(check_all(nodes, options))

    if output_json:
        data = {
            "files": [
                {"file": f.file_path, "issues": [i.to_dict() for i in f.issues]} for f in result.files
            ],
            "total_errors": result.total_errors,
            "total_warnings": result.total_warnings,
        }
        typer.echo(json.dumps(data, indent=2, ensure_ascii=False))
    else:
        print_results(result)

    if result.has_errors:
        raise typer.Exit(1)


@app.command(name="map")
def map_cmd(
    content: Path = typer.Argument(..., help="Content directory to map"),
    project_dir: ProjectDirOption = None,
    language: LanguageOption = None,
    default_language: DefaultLanguageOption = None,
    images: bool = typer.Option(False, "--images", "-i", help="Include image paths in the map"),
) -> None:
    """Print the content tree map."""
    config = _load_config(project_dir, {"language": language, "defaultLanguage": default_language})
    target = _resolve_target(config, content)
    tree = _build_tree(config, target if target.is_dir() else target.parent)
    typer.echo(tree.get_tree_map(include_images=images), nl=False)


@app.command()
def tree(
    content: Path = typer.Argument(..., help="Content directory to dump"),
    project_dir: ProjectDirOption = None,
    language: LanguageOption = None,
    default_language: DefaultLanguageOption = None,
) -> None:
    """Print every node with its kind, language and weight."""
    config = _load_config(project_dir, {"language": language, "defaultLanguage": default_language})
    target = _resolve_target(config, content)
    content_tree = _build_tree(config, target if target.is_dir() else target.parent)
    for line in content_tree.format_tree():
        typer.echo(line)


@app.command()
def serve() -> None:
    """Start the MCP server (stdio transport)."""
    from content_tree.mcp.server import run_mcp_server

    run_mcp_server()
