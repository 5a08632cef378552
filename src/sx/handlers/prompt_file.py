"""Command, agent and rule handlers: single prompt file assets."""

from collections.abc import Callable
from pathlib import Path

from sx.assets.bundle import AssetBundle
from sx.assets.installed import InstalledAssetInfo
from sx.assets.metadata import Metadata
from sx.assets.types import Asset
from sx.core.cancellation import CancelToken
from sx.core.errors import AssetValidationError
from sx.handlers.fileasset import FileAssetOps
from sx.handlers.rules import RuleCapabilities, rule_definition

ContentRenderer = Callable[[Metadata, str], str]


class PromptFileHandler:
    """Installs the asset's prompt file, optionally rewritten by `render`."""

    def __init__(self, ops: FileAssetOps, render: ContentRenderer | None = None) -> None:
        self._ops = ops
        self._render = render

    def skip_reason(self, metadata: Metadata) -> str | None:
        return None

    def install(self, bundle: AssetBundle, target_base: Path, cancel: CancelToken) -> None:
        cancel.raise_if_cancelled()
        prompt_file = bundle.metadata.prompt_file
        if prompt_file is None:
            raise AssetValidationError(
                f"{bundle.metadata.asset_type.key} asset {bundle.name} declares no prompt file"
            )
        render = self._render
        self._ops.install(
            bundle.archive,
            bundle.metadata,
            target_base,
            prompt_file,
            render=(lambda content: render(bundle.metadata, content)) if render else None,
        )

    def remove(self, asset: Asset, target_base: Path) -> bool:
        return self._ops.remove(asset.name, target_base)

    def verify(self, asset: Asset, target_base: Path) -> tuple[bool, str]:
        return self._ops.verify_installed(target_base, asset.name, asset.version)

    def scan(self, target_base: Path) -> list[InstalledAssetInfo]:
        return self._ops.scan_installed(target_base)

    def asset_path(self, name: str, target_base: Path) -> Path:
        return self._ops.file_path(target_base, name)


def rule_renderer(capabilities: RuleCapabilities) -> ContentRenderer:
    """Render rule prompt files through a client's rule descriptor."""

    def render(metadata: Metadata, content: str) -> str:
        return capabilities.generate_rule_file(rule_definition(metadata, content))

    return render
