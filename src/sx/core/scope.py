"""Install scopes and per-client scope layouts.

A scope says how widely an asset is installed: for the user (global), for a
repository, or for a sub-path of a repository. Each client describes where
those scopes live on disk with a ScopeLayout.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from sx.assets.types import AssetType
from sx.core.errors import ScopeResolutionError

ScopeType = Literal["global", "repo", "path"]


@dataclass(frozen=True)
class InstallScope:
    """Breadth of an install.

    Attributes:
        scope_type: "global", "repo" or "path"
        repo_root: Repository root, required for "repo" and "path" scopes
        repo_url: Remote URL of the repository, informational only
        path: Sub-path inside the repository, used by "path" scope
    """

    scope_type: ScopeType
    repo_root: Path | None = None
    repo_url: str | None = None
    path: str | None = None

    @staticmethod
    def global_scope() -> "InstallScope":
        return InstallScope(scope_type="global")

    @staticmethod
    def repository(repo_root: Path | None, repo_url: str | None = None) -> "InstallScope":
        return InstallScope(scope_type="repo", repo_root=repo_root, repo_url=repo_url)

    @staticmethod
    def sub_path(
        repo_root: Path | None, path: str, repo_url: str | None = None
    ) -> "InstallScope":
        return InstallScope(scope_type="path", repo_root=repo_root, repo_url=repo_url, path=path)

    def describe(self) -> str:
        if self.scope_type == "global":
            return "global"
        if self.scope_type == "repo":
            return f"repo {self.repo_root}"
        return f"path {self.path} in {self.repo_root}"


def require_repo_root(scope: InstallScope) -> Path:
    """Return the repository root for repo/path scopes.

    Raises:
        ScopeResolutionError: If the scope has no repository root, or a path
            scope has no path
    """
    if scope.repo_root is None or str(scope.repo_root) == "":
        raise ScopeResolutionError(
            f"{scope.scope_type}-scoped install requires a repository root "
            "but none was provided (not in a git repository?)"
        )
    if scope.scope_type == "path" and not scope.path:
        raise ScopeResolutionError("path-scoped install requires a path inside the repository")
    return scope.repo_root


@dataclass(frozen=True)
class ScopeLayout:
    """Where one client keeps its files for each scope.

    Attributes:
        global_base: Absolute directory used for global scope
        repo_dir: Directory name created under the repository root (or under
            the sub-path for path scope). Empty string means the root itself.
        type_overrides: Asset type key -> directory name replacing repo_dir for
            repo and path scopes
        path_scope_at_repo_root: Resolve path scope as if it were repo scope
    """

    global_base: Path
    repo_dir: str
    type_overrides: Mapping[str, str] = field(default_factory=dict)
    path_scope_at_repo_root: bool = False

    def resolve(self, scope: InstallScope, asset_type: AssetType | None) -> Path:
        """Resolve the target base directory for an asset type in a scope.

        Pure: performs no filesystem access.

        Raises:
            ScopeResolutionError: If a repo or path scope has no repository root
        """
        if scope.scope_type == "global":
            return self.global_base

        repo_root = require_repo_root(scope)
        dir_name = self.repo_dir
        if asset_type is not None and asset_type.key in self.type_overrides:
            dir_name = self.type_overrides[asset_type.key]

        if scope.scope_type == "path" and not self.path_scope_at_repo_root:
            assert scope.path is not None
            return repo_root / scope.path / dir_name
        return repo_root / dir_name
