"""Structural interface every supported AI coding tool implements.

Clients are independent classes that satisfy this Protocol; they share
helpers by composition (handlers, batch loops, scope layouts), never by
inheritance. The registry selects one by its client ID.
"""

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Protocol

from sx.assets.installed import InstalledAssetInfo, SkillContent
from sx.assets.types import Asset, AssetType
from sx.bootstrap.options import BootstrapOption
from sx.clients.types import AssetResult, InstallRequest, UninstallRequest, VerifyResult
from sx.core.cancellation import CancelToken
from sx.core.scope import InstallScope
from sx.handlers.rules import RuleCapabilities


class Client(Protocol):
    """Capability set of one target tool.

    Batch operations return exactly one result per requested asset, in
    request order. They raise ScopeResolutionError, before doing any work,
    when the scope cannot be mapped to a directory.
    """

    @property
    def client_id(self) -> str:
        """Stable identifier, e.g. "claude-code"."""
        ...

    @property
    def display_name(self) -> str: ...

    @property
    def supported_types(self) -> tuple[AssetType, ...]:
        """Closed set of asset types this client installs, fixed at construction."""
        ...

    def is_installed(self) -> bool:
        """Return True if the tool appears to be installed for this user."""
        ...

    def get_version(self, cancel: CancelToken) -> str | None: ...

    def supports_asset_type(self, asset_type: AssetType) -> bool: ...

    def install_assets(self, request: InstallRequest) -> list[AssetResult]: ...

    def uninstall_assets(self, request: UninstallRequest) -> list[AssetResult]: ...

    def list_assets(self, scope: InstallScope) -> list[InstalledAssetInfo]:
        """Installed skills in a scope."""
        ...

    def read_skill(self, name: str, scope: InstallScope) -> SkillContent | None: ...

    def ensure_asset_support(self, scope: InstallScope) -> None:
        """Prepare the tool to discover installed assets (may be a no-op)."""
        ...

    def get_asset_path(self, name: str, asset_type: AssetType, scope: InstallScope) -> Path: ...

    def verify_assets(self, assets: Sequence[Asset], scope: InstallScope) -> list[VerifyResult]: ...

    def scan_installed_assets(self, scope: InstallScope) -> list[InstalledAssetInfo]:
        """All managed assets of every supported type in a scope."""
        ...

    def bootstrap_options(self) -> list[BootstrapOption]: ...

    def install_bootstrap(self, options: Sequence[BootstrapOption]) -> list[AssetResult]: ...

    def uninstall_bootstrap(self, options: Sequence[BootstrapOption]) -> list[AssetResult]: ...

    def should_install(self, hook_input: Mapping[str, object] | None) -> bool:
        """Decide whether a hook-triggered install should run now."""
        ...

    def rule_capabilities(self) -> RuleCapabilities | None: ...
