"""Bootstrap options: infrastructure sx installs into a client for itself."""

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass

from sx.native_config.mcp import MCPServerEntry

SESSION_HOOK_KEY = "session_hook"
ANALYTICS_HOOK_KEY = "analytics_hook"
CURSOR_SESSION_HOOK_KEY = "cursor_session_hook"
SX_QUERY_MCP_KEY = "sx_query_mcp"


@dataclass(frozen=True)
class BootstrapOption:
    """One opt-in piece of bootstrap infrastructure.

    Attributes:
        key: Stable identifier stored in ~/.sx/config.toml
        description: What the option installs
        prompt: Question shown when asking the user
        default_enabled: Suggested answer when the user has not chosen
        decline_note: Shown when the user declines
        mcp_config: Server to register, for MCP options
    """

    key: str
    description: str
    prompt: str
    default_enabled: bool
    decline_note: str = ""
    mcp_config: MCPServerEntry | None = None


def session_hook_option(client_label: str, event: str) -> BootstrapOption:
    return BootstrapOption(
        key=SESSION_HOOK_KEY,
        description=f"{client_label} {event} hook - Auto-update assets when sessions start",
        prompt="Install hook? (recommended)",
        default_enabled=True,
        decline_note="Without this hook, you'll need to run 'sx install' manually.",
    )


def analytics_hook_option(client_label: str, event: str) -> BootstrapOption:
    return BootstrapOption(
        key=ANALYTICS_HOOK_KEY,
        description=f"{client_label} {event} hook - Track asset usage for analytics",
        prompt="Install hook?",
        default_enabled=True,
        decline_note="Asset usage analytics will not be tracked.",
    )


CURSOR_SESSION_HOOK = BootstrapOption(
    key=CURSOR_SESSION_HOOK_KEY,
    description="Cursor beforeSubmitPrompt hook - Auto-update assets once per conversation",
    prompt="Install hook? (recommended)",
    default_enabled=True,
    decline_note="Without this hook, you'll need to run 'sx install' manually.",
)


def sx_query_mcp_option() -> BootstrapOption:
    return BootstrapOption(
        key=SX_QUERY_MCP_KEY,
        description="sx query MCP server - Exposes installed assets to the assistant",
        prompt="Install the sx MCP server?",
        default_enabled=False,
        mcp_config=MCPServerEntry(name="sx", command="sx", args=("serve",)),
    )


def contains_key(options: Sequence[BootstrapOption], key: str) -> bool:
    return any(option.key == key for option in options)


def filter_options(
    options: Sequence[BootstrapOption], is_enabled: Callable[[str], bool]
) -> list[BootstrapOption]:
    return [option for option in options if is_enabled(option.key)]


def resolve_enabled(
    options: Sequence[BootstrapOption], choices: Mapping[str, bool]
) -> list[BootstrapOption]:
    """Options the user enabled, falling back to each option's default."""
    return filter_options(options, lambda key: choices.get(key, _default_for(options, key)))


def _default_for(options: Sequence[BootstrapOption], key: str) -> bool:
    for option in options:
        if option.key == key:
            return option.default_enabled
    return False
