"""Write and remove bootstrap hooks, notify commands and MCP registrations.

Bootstrap entries carry no ownership tag. A hook is ours when its command
string is exactly one sx writes; a notify array is ours when it equals the
current command or one previously shipped. Anything else is left alone.
"""

import logging
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path

from sx.bootstrap.options import BootstrapOption
from sx.clients.types import AssetResult
from sx.core.errors import SxError
from sx.native_config.engine import add_or_update, read_config, remove_entry
from sx.native_config.formats import ConfigFormat
from sx.native_config.mcp import McpRegistration
from sx.native_config.sections import CommandArray, HookEntryList, ManagedEntry, by_command
from sx.native_config.values import ConfigValue

logger = logging.getLogger(__name__)

BOOTSTRAP_HOOK_FIELDS = frozenset({"matcher", "hooks", "command", "type"})

NOTIFY = CommandArray("notify", label="notify command")


def _hook_section(event: str, nested: bool) -> HookEntryList:
    return HookEntryList(
        root=("hooks",),
        event=event,
        identity=by_command(nested),
        owned_fields=BOOTSTRAP_HOOK_FIELDS,
        label="bootstrap hook",
    )


def install_command_hook(
    key: str,
    config_path: Path,
    fmt: ConfigFormat,
    event: str,
    command: str,
    nested: bool,
    matcher: str | None = None,
    defaults: Mapping[str, ConfigValue] | None = None,
) -> AssetResult:
    """Add a hook running `command` on `event`, or refresh it in place."""
    fields: dict[str, ConfigValue]
    if nested:
        fields = {"hooks": [{"type": "command", "command": command}]}
        if matcher is not None:
            fields = {"matcher": matcher, **fields}
    else:
        fields = {"command": command}
    add_or_update(
        config_path,
        fmt,
        _hook_section(event, nested),
        ManagedEntry(key=command, fields=fields),
        defaults=defaults,
    )
    return AssetResult.success(key, f"{event} hook installed in {config_path}")


def uninstall_command_hook(
    key: str, config_path: Path, fmt: ConfigFormat, command: str, nested: bool
) -> AssetResult:
    removed = remove_entry(config_path, fmt, _hook_section("", nested), command)
    return AssetResult.success(key, "hook removed" if removed else "hook not installed")


def install_notify(
    key: str,
    config_path: Path,
    fmt: ConfigFormat,
    command: tuple[str, ...],
    previous_commands: Sequence[tuple[str, ...]],
) -> AssetResult:
    """Set the notify command unless the user already set their own."""
    current = NOTIFY.current(read_config(config_path, fmt, NOTIFY).raw)
    if current == command:
        return AssetResult.skipped(key, "notify command already installed")
    if current is not None and current not in previous_commands:
        logger.warning("Leaving existing notify command in %s untouched: %s", config_path, current)
        return AssetResult.skipped(
            key, f"notify is already set to {list(current)} (not managed by sx)"
        )
    add_or_update(config_path, fmt, NOTIFY, ManagedEntry(key=command))
    return AssetResult.success(key, f"notify command installed in {config_path}")


def uninstall_notify(
    key: str,
    config_path: Path,
    fmt: ConfigFormat,
    command: tuple[str, ...],
    previous_commands: Sequence[tuple[str, ...]],
) -> AssetResult:
    for candidate in (command, *previous_commands):
        if remove_entry(config_path, fmt, NOTIFY, candidate):
            return AssetResult.success(key, "notify command removed")
    return AssetResult.success(key, "notify command not installed")


def install_query_mcp(option: BootstrapOption, registration: McpRegistration) -> AssetResult:
    assert option.mcp_config is not None
    registration.register(option.mcp_config)
    return AssetResult.success(
        option.key, f"MCP server {option.mcp_config.name} registered in {registration.config_path}"
    )


def uninstall_query_mcp(option: BootstrapOption, registration: McpRegistration) -> AssetResult:
    assert option.mcp_config is not None
    removed = registration.unregister(option.mcp_config.name)
    message = "MCP server removed" if removed else "MCP server not registered"
    return AssetResult.success(option.key, message)


BootstrapAction = Callable[[BootstrapOption], AssetResult]


def run_bootstrap(
    client_id: str,
    options: Sequence[BootstrapOption],
    actions: Mapping[str, BootstrapAction],
) -> list[AssetResult]:
    """Run the action for each requested option, one result per option.

    Options the client has no action for are skipped. A failing option does
    not stop the others.
    """
    results: list[AssetResult] = []
    for option in options:
        action = actions.get(option.key)
        if action is None:
            results.append(AssetResult.skipped(option.key, f"not supported by {client_id}"))
            continue
        try:
            results.append(action(option))
        except (SxError, OSError) as e:
            logger.debug("Bootstrap %s for %s failed: %s", option.key, client_id, e)
            results.append(AssetResult.failed(option.key, e))
    return results
