"""Plain-text summary of a content project."""

from pathlib import Path

from content_tree.core.tree.content_tree import ContentTree
from content_tree.languages import Language


def build_content_summary(
    tree: ContentTree,
    *,
    project_dir: Path,
    content_dir: Path,
    language: Language,
    default_language: Language,
    include_images: bool = False,
) -> str:
    """Describe where content lives, its languages and its ordered content map."""
    lines = [f'The following is a summary of the Markdown content in the project in directory "{project_dir}".']
    if content_dir != project_dir:
        lines.append(f'Markdown content in this project is located in the content directory "{content_dir}".')
    else:
        lines.append("The project directory is considered the content directory for this project.")
    lines.append(f"The content map below lists documents in {language.name} ({language.code}).")
    lines.append(
        f"Files without a language in their name are assumed to be {default_language.name} "
        f'({default_language.code}), so "test.md" is treated as "test.{default_language.code}.md".'
    )
    lines.append("")
    lines.append("## Content map")
    lines.append("")
    lines.append(tree.get_tree_map(include_images=include_images).rstrip("\n"))
    return "\n".join(lines) + "\n"
