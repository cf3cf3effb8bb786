"""MCP server exposing content checks and content summaries."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from loguru import logger
from mcp.server.fastmcp import Context, FastMCP

from content_tree.config import load_project_config
from content_tree.core.check.checker import check_files
from content_tree.core.check.types import CheckOptions
from content_tree.core.tree.loader import build_content_tree
from content_tree.core.tree.summary import build_content_summary
from content_tree.languages import get_language


def _validate_within(path: Path, root: Path) -> Path:
    """Resolve ``path`` and make sure it lies inside ``root``."""
    resolved = path.resolve()
    if resolved != root.resolve() and root.resolve() not in resolved.parents:
        msg = f"Path {path} is outside the allowed directory {root}"
        raise ValueError(msg)
    return resolved


# --- Core functions (testable without MCP context) ---


async def run_checks(
    project_directory: str,
    files: list[str],
    *,
    min_severity: str | None = None,
    categories: list[str] | None = None,
    allowed_root: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Run lint, link and image checks on documents of a project.

    Args:
        project_directory: Project root holding the optional config file.
        files: Document paths relative to the content directory.
        min_severity: "error" or "warning"; overrides the project config.
        categories: Subset of "lint", "link", "image"; overrides the project config.
        allowed_root: Directory the project must live in.
        overrides: Extra configuration overrides.

    Raises:
        NodeNotFoundError: If a file is not part of the content tree.
    """
    project_dir = Path(project_directory)
    if allowed_root is not None:
        project_dir = _validate_within(project_dir, allowed_root)

    config = load_project_config(
        project_dir,
        overrides={**(overrides or {}), "minSeverity": min_severity, "categories": categories},
    )
    tree = build_content_tree(
        config.content_dir,
        language=config.language,
        default_language=config.default_language,
    )
    options = CheckOptions.from_settings(
        config.check,
        content_dir=config.content_dir,
        root_content_dir=config.content_dir,
        content_tree=tree,
    )
    result = await check_files(tree, files, options)

    output_files = []
    for file in result.files:
        output_files.append(
            {
                "file": file.file_path,
                "passed": not file.issues,
                "issues": [issue.to_dict() for issue in file.issues],
            }
        )
    return {
        "files": output_files,
        "total_errors": result.total_errors,
        "total_warnings": result.total_warnings,
        "passed": not result.has_errors,
    }


def content_summary(
    project_directory: str,
    *,
    language: str | None = None,
    include_images: bool = False,
    allowed_root: Path | None = None,
) -> dict[str, Any]:
    """Summarize the markdown content of a project.

    Args:
        project_directory: Project root holding the optional config file.
        language: Language of the content map; the project language when omitted.
        include_images: List images beneath each document in the map.
        allowed_root: Directory the project must live in.
    """
    project_dir = Path(project_directory)
    if allowed_root is not None:
        project_dir = _validate_within(project_dir, allowed_root)

    config = load_project_config(project_dir, overrides={"language": language})
    tree = build_content_tree(
        config.content_dir,
        language=config.language,
        default_language=config.default_language,
    )
    target_language = get_language(config.language)
    default_language = get_language(config.default_language)
    if target_language is None or default_language is None:
        msg = f"Invalid language: {config.language}"
        raise ValueError(msg)

    return {
        "project_directory": str(config.project_dir),
        "content_directory": str(config.content_dir),
        "language": config.language,
        "default_language": config.default_language,
        "document_count": len(tree.get_content()),
        "summary": build_content_summary(
            tree,
            project_dir=config.project_dir,
            content_dir=config.content_dir,
            language=target_language,
            default_language=default_language,
            include_images=include_images,
        ),
    }


# --- MCP server wiring ---


@dataclass
class ServerContext:
    """State shared by tool invocations."""

    allowed_root: Path


@asynccontextmanager
async def server_lifespan(_server: FastMCP) -> AsyncIterator[ServerContext]:
    """Pin the allowed project root to the working directory at startup."""
    root = Path.cwd().resolve()
    logger.info("Serving content projects below {}", root)
    yield ServerContext(allowed_root=root)


mcp_server = FastMCP(
    "content-tree",
    instructions="""\
Tools for multi-language Markdown content projects.

Call content_summary first to learn where the content directory is, which
language is the default and how documents are ordered. Then use run_checks
with file paths relative to the content directory to find lint problems,
broken links and missing images.
""",
    lifespan=server_lifespan,
)


def _ctx(mcp_ctx: Context) -> ServerContext:
    return mcp_ctx.request_context.lifespan_context  # type: ignore[return-value]


@mcp_server.tool()
async def run_checks_tool(
    ctx: Context,
    project_directory: str,
    files: list[str],
    min_severity: str | None = None,
    categories: list[str] | None = None,
) -> dict[str, Any]:
    """Run lint, link and image checks on Markdown content files.

    Args:
        project_directory: Absolute path to the root directory of the project.
        files: File paths relative to the content directory to check.
        min_severity: Minimum severity to report ("error" or "warning").
        categories: Check categories to run ("lint", "link", "image").
    """
    return await run_checks(
        project_directory,
        files,
        min_severity=min_severity,
        categories=categories,
        allowed_root=_ctx(ctx).allowed_root,
    )


@mcp_server.tool()
async def content_summary_tool(
    ctx: Context,
    project_directory: str,
    language: str | None = None,
    include_images: bool = False,
) -> dict[str, Any]:
    """Summarize the Markdown content of a project with an ordered content map.

    Args:
        project_directory: Absolute path to the root directory of the project.
        language: Language of the content map; the project default when omitted.
        include_images: Include image paths referenced by each document.
    """
    return content_summary(
        project_directory,
        language=language,
        include_images=include_images,
        allowed_root=_ctx(ctx).allowed_root,
    )


def run_mcp_server() -> None:
    """Run the MCP server with stdio transport."""
    from content_tree.logging_config import configure_logging

    configure_logging(verbose=False)
    mcp_server.run(transport="stdio")
