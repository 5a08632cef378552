"""Asset types known to the installation engine."""

from dataclasses import dataclass


@dataclass(frozen=True)
class AssetType:
    """A kind of installable asset.

    Attributes:
        key: Identifier used in metadata.toml (e.g., "skill")
        label: Human-readable name for listings
        description: One-line description for help text
    """

    key: str
    label: str
    description: str

    def __str__(self) -> str:
        return self.key


SKILL = AssetType("skill", "Skill", "Directory of instructions and supporting files")
COMMAND = AssetType("command", "Command", "Slash command backed by a single prompt file")
AGENT = AssetType("agent", "Agent", "Sub-agent definition backed by a single prompt file")
RULE = AssetType("rule", "Rule", "Always-on or path-scoped instructions")
HOOK = AssetType("hook", "Hook", "Script or command run on a client lifecycle event")
MCP = AssetType("mcp", "MCP Server", "Model Context Protocol server registration")
CLAUDE_CODE_PLUGIN = AssetType(
    "claude-code-plugin", "Claude Code Plugin", "Claude Code plugin with bundled assets"
)

ALL_ASSET_TYPES: tuple[AssetType, ...] = (
    SKILL,
    COMMAND,
    AGENT,
    RULE,
    HOOK,
    MCP,
    CLAUDE_CODE_PLUGIN,
)


def asset_type_from_key(key: str) -> AssetType | None:
    """Look up an asset type by its metadata key.

    Returns:
        The matching AssetType, or None if the key is unknown
    """
    for asset_type in ALL_ASSET_TYPES:
        if asset_type.key == key:
            return asset_type
    return None


@dataclass(frozen=True)
class Asset:
    """Identity of a resolved asset: (name, version, type)."""

    name: str
    version: str
    asset_type: AssetType
