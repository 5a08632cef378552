"""Rule capability descriptors.

Each client that supports rules describes where rule files live, what they
are called, and how their frontmatter is written and read back. The rule
type handler renders installed rules through the descriptor.
"""

from collections.abc import Callable
from dataclasses import dataclass

from sx.assets.metadata import Metadata
from sx.core.frontmatter import parse_markdown_frontmatter


@dataclass(frozen=True)
class RuleDefinition:
    """Client-neutral content of a rule."""

    name: str
    title: str | None
    description: str | None
    globs: tuple[str, ...]
    always_apply: bool | None
    content: str


@dataclass(frozen=True)
class ParsedRule:
    """A rule file read back from disk."""

    client_name: str
    description: str | None
    globs: tuple[str, ...]
    always_apply: bool | None
    content: str


@dataclass(frozen=True)
class RuleCapabilities:
    """How one client stores rules.

    Attributes:
        client_name: Client ID the descriptor belongs to
        rules_directory: Directory holding rule files, relative to the
            client's target base
        file_extension: Suffix of rule files (e.g. ".mdc")
        instruction_files: Always-loaded instruction files the client reads
            but sx does not manage
        generate_rule_file: Render a RuleDefinition into file content
        parse_rule_file: Read file content back into a ParsedRule
    """

    client_name: str
    rules_directory: str
    file_extension: str
    instruction_files: tuple[str, ...]
    generate_rule_file: Callable[[RuleDefinition], str]
    parse_rule_file: Callable[[str], ParsedRule]


def rule_definition(metadata: Metadata, content: str) -> RuleDefinition:
    """Combine a rule asset's metadata with its prompt file content."""
    rule = metadata.rule
    description = metadata.asset.description or None
    if rule is not None and rule.description is not None:
        description = rule.description
    return RuleDefinition(
        name=metadata.name,
        title=rule.title if rule is not None else None,
        description=description,
        globs=rule.globs if rule is not None else (),
        always_apply=rule.always_apply if rule is not None else None,
        content=content,
    )


def split_globs(value: object) -> tuple[str, ...]:
    """Accept globs as a YAML list or a comma-separated string."""
    if isinstance(value, list):
        return tuple(str(item).strip() for item in value if str(item).strip())
    if isinstance(value, str):
        return tuple(part.strip() for part in value.split(",") if part.strip())
    return ()


def parse_rule_with_keys(client_name: str, content: str, globs_key: str) -> ParsedRule:
    """Parse frontmatter using the client's globs key; no frontmatter is fine."""
    result = parse_markdown_frontmatter(content)
    if result.metadata is None:
        return ParsedRule(
            client_name=client_name,
            description=None,
            globs=(),
            always_apply=None,
            content=content,
        )
    description = result.metadata.get("description")
    always_apply = result.metadata.get("alwaysApply")
    return ParsedRule(
        client_name=client_name,
        description=description if isinstance(description, str) else None,
        globs=split_globs(result.metadata.get(globs_key)),
        always_apply=always_apply if isinstance(always_apply, bool) else None,
        content=result.body,
    )


def with_title(rule: RuleDefinition) -> str:
    """Rule body, prefixed with a markdown heading when a title is set."""
    if rule.title and not rule.content.lstrip().startswith("#"):
        return f"# {rule.title}\n\n{rule.content}"
    return rule.content
