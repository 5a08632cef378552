"""MCP server handler.

Config-only archives (nothing but metadata.toml) only register a server
entry. Packaged archives are also extracted to
`{target_base}/mcp-servers/{name}/`, and launch arguments naming archived
files are rewritten to their installed paths.
"""

import logging
import os
from collections.abc import Sequence
from pathlib import Path

from sx.assets.bundle import AssetBundle
from sx.assets.installed import InstalledAssetInfo
from sx.assets.metadata import McpSection, Metadata
from sx.assets.types import MCP, Asset
from sx.core.cancellation import CancelToken
from sx.core.errors import AssetValidationError
from sx.handlers.dirasset import DirectoryAssetOps
from sx.native_config.mcp import McpRegistration, MCPServerEntry

logger = logging.getLogger(__name__)

MCP_SERVERS_DIR = "mcp-servers"


def _installed_path(value: str, server_dir: Path, archive_files: Sequence[str]) -> str:
    if value in archive_files:
        return os.path.join(server_dir, value)
    return value


def packaged_entry(
    name: str, mcp: McpSection, server_dir: Path, archive_files: Sequence[str]
) -> MCPServerEntry:
    """Server entry for an extracted server.

    Only values that are exact archive members are rewritten; anything else
    (e.g. `node`, `npx`, `--port`) names something resolved by the system.
    """
    command = mcp.command
    if command is not None:
        command = _installed_path(command, server_dir, archive_files)
    return MCPServerEntry(
        name=name,
        transport="stdio",
        command=command,
        args=tuple(_installed_path(arg, server_dir, archive_files) for arg in mcp.args),
        env=dict(mcp.env),
    )


def config_only_entry(name: str, mcp: McpSection) -> MCPServerEntry:
    if mcp.is_remote:
        return MCPServerEntry(name=name, transport=mcp.transport, url=mcp.url, env=dict(mcp.env))
    return MCPServerEntry(
        name=name, transport="stdio", command=mcp.command, args=mcp.args, env=dict(mcp.env)
    )


def mcp_server_ops() -> DirectoryAssetOps:
    return DirectoryAssetOps(MCP_SERVERS_DIR, MCP)


class McpHandler:
    def __init__(self, registration: McpRegistration, supports_remote: bool) -> None:
        self._registration = registration
        self._supports_remote = supports_remote
        self._server_ops = mcp_server_ops()

    def skip_reason(self, metadata: Metadata) -> str | None:
        if metadata.mcp is not None and metadata.mcp.is_remote and not self._supports_remote:
            return f"unsupported transport: {metadata.mcp.transport}"
        return None

    def install(self, bundle: AssetBundle, target_base: Path, cancel: CancelToken) -> None:
        mcp = bundle.metadata.mcp
        if mcp is None:
            raise AssetValidationError("[mcp] section is required for mcp assets")

        if bundle.archive.has_content_files() and not mcp.is_remote:
            server_dir = self._server_ops.install(bundle.archive, bundle.name, target_base, cancel)
            entry = packaged_entry(bundle.name, mcp, server_dir, bundle.archive.files)
        else:
            # A previous packaged version may have left server files behind
            self._server_ops.remove(bundle.name, target_base)
            entry = config_only_entry(bundle.name, mcp)

        self._registration.register(entry)
        logger.debug("Registered MCP server %s in %s", bundle.name, self._registration.config_path)

    def remove(self, asset: Asset, target_base: Path) -> bool:
        unregistered = self._registration.unregister(asset.name)
        removed_dir = self._server_ops.remove(asset.name, target_base)
        return unregistered or removed_dir

    def verify(self, asset: Asset, target_base: Path) -> tuple[bool, str]:
        if self._server_ops.install_dir(target_base, asset.name).is_dir():
            installed, message = self._server_ops.verify_installed(
                target_base, asset.name, asset.version
            )
            if not installed:
                return installed, message
        return self._registration.verify(asset.name)

    def scan(self, target_base: Path) -> list[InstalledAssetInfo]:
        """Packaged servers only; config-only entries leave no version record."""
        return self._server_ops.scan_installed(target_base)

    def asset_path(self, name: str, target_base: Path) -> Path:
        return self._server_ops.install_dir(target_base, name)
