"""YAML frontmatter for rule files.

Rules carry client-specific frontmatter (Cursor `globs`/`alwaysApply`,
Copilot `applyTo`, Claude Code `paths`). Reading never raises: a rule
without usable frontmatter is still a rule, so problems are reported in
the result and the caller decides.
"""

from collections.abc import Mapping
from dataclasses import dataclass

import frontmatter
import yaml


@dataclass(frozen=True)
class FrontmatterParseResult:
    """Frontmatter split from a markdown document.

    Attributes:
        metadata: Frontmatter mapping, or None if absent or unusable
        body: Markdown after the frontmatter; the whole input when parsing failed
        error: Why metadata is None
    """

    metadata: dict[str, object] | None
    body: str
    error: str | None


def parse_markdown_frontmatter(content: str) -> FrontmatterParseResult:
    if not content.startswith("---"):
        return FrontmatterParseResult(metadata=None, body=content, error="No frontmatter found")
    try:
        post = frontmatter.loads(content)
    except yaml.YAMLError as e:
        return FrontmatterParseResult(metadata=None, body=content, error=f"Invalid YAML: {e}")
    if not post.metadata:
        return FrontmatterParseResult(
            metadata=None, body=post.content, error="Frontmatter is not a YAML mapping"
        )
    return FrontmatterParseResult(metadata=dict(post.metadata), body=post.content, error=None)


def render_markdown_frontmatter(metadata: Mapping[str, object], body: str) -> str:
    """Prefix `body` with a YAML frontmatter block; empty metadata adds nothing."""
    if not metadata:
        return body
    post = frontmatter.Post(body, **dict(metadata))
    return frontmatter.dumps(post, sort_keys=False) + "\n"
