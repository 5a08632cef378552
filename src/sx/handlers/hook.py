"""Hook handler.

A hook archive is extracted to `{target_base}/hooks/{name}/` and a hook
entry tagged with the asset name is written into the client's native
config under the client's event name.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from sx.assets.bundle import AssetBundle
from sx.assets.installed import InstalledAssetInfo
from sx.assets.metadata import HookSection, Metadata
from sx.assets.types import HOOK, Asset
from sx.core.cancellation import CancelToken
from sx.handlers.dirasset import DirectoryAssetOps
from sx.handlers.hook_resolver import map_event, resolve_command, validate_hook_archive
from sx.native_config.engine import add_or_update, remove_entry, verify_present
from sx.native_config.formats import ConfigFormat
from sx.native_config.sections import HookEntryList, ManagedEntry, tagged_by
from sx.native_config.values import ConfigValue

HOOKS_DIR = "hooks"
ARTIFACT_TAG = "_artifact"
HOOK_OWNED_FIELDS = frozenset({ARTIFACT_TAG, "matcher", "hooks", "command", "timeout", "type"})

HookEntryBuilder = Callable[[str, HookSection, str, Mapping[str, object]], dict[str, ConfigValue]]


def _override_fields(overrides: Mapping[str, object], skip: set[str]) -> dict[str, ConfigValue]:
    fields: dict[str, ConfigValue] = {}
    for key, value in overrides.items():
        if key in skip:
            continue
        if isinstance(value, (str, int, float, bool, list)):
            fields[key] = value
    return fields


def nested_hook_entry(
    name: str, hook: HookSection, command: str, overrides: Mapping[str, object]
) -> dict[str, ConfigValue]:
    """Matcher group holding one command hook (Claude Code, Gemini)."""
    inner: dict[str, ConfigValue] = {"type": "command", "command": command}
    if hook.timeout is not None:
        inner["timeout"] = hook.timeout
    inner.update(_override_fields(overrides, skip={"event", "matcher"}))

    entry: dict[str, ConfigValue] = {ARTIFACT_TAG: name}
    matcher = overrides.get("matcher", hook.matcher)
    if isinstance(matcher, str) and matcher:
        entry["matcher"] = matcher
    entry["hooks"] = [inner]
    return entry


def flat_hook_entry(
    name: str, hook: HookSection, command: str, overrides: Mapping[str, object]
) -> dict[str, ConfigValue]:
    """Single command object (Cursor hooks.json)."""
    entry: dict[str, ConfigValue] = {ARTIFACT_TAG: name, "command": command}
    if hook.timeout is not None:
        entry["timeout"] = hook.timeout
    if hook.matcher:
        entry["matcher"] = hook.matcher
    entry.update(_override_fields(overrides, skip={"event"}))
    return entry


@dataclass(frozen=True)
class HookTarget:
    """Where and how one client records hook entries."""

    client_id: str
    config_path: Path
    fmt: ConfigFormat
    event_map: Mapping[str, str]
    build_entry: HookEntryBuilder
    root: tuple[str, ...] = ("hooks",)
    defaults: Mapping[str, ConfigValue] = field(default_factory=dict)
    owned_fields: frozenset[str] = HOOK_OWNED_FIELDS

    def section(self, event: str) -> HookEntryList:
        return HookEntryList(
            root=self.root,
            event=event,
            identity=tagged_by(ARTIFACT_TAG),
            owned_fields=self.owned_fields,
        )


class HookHandler:
    def __init__(self, target: HookTarget) -> None:
        self._target = target
        self._ops = DirectoryAssetOps(HOOKS_DIR, HOOK)

    def skip_reason(self, metadata: Metadata) -> str | None:
        return None

    def install(self, bundle: AssetBundle, target_base: Path, cancel: CancelToken) -> None:
        metadata = validate_hook_archive(bundle.archive)
        hook = metadata.hook
        assert hook is not None
        overrides = hook.client_overrides.get(self._target.client_id, {})
        event = map_event(hook.event, self._target.event_map, overrides, self._target.client_id)

        install_dir = self._ops.install(bundle.archive, bundle.name, target_base, cancel)
        command = resolve_command(hook, install_dir, bundle.archive.files)
        entry = ManagedEntry(
            key=bundle.name,
            fields=self._target.build_entry(bundle.name, hook, command, overrides),
        )
        add_or_update(
            self._target.config_path,
            self._target.fmt,
            self._target.section(event),
            entry,
            defaults=self._target.defaults,
        )

    def remove(self, asset: Asset, target_base: Path) -> bool:
        unregistered = remove_entry(
            self._target.config_path, self._target.fmt, self._target.section(""), asset.name
        )
        removed_dir = self._ops.remove(asset.name, target_base)
        return unregistered or removed_dir

    def verify(self, asset: Asset, target_base: Path) -> tuple[bool, str]:
        installed, message = self._ops.verify_installed(target_base, asset.name, asset.version)
        if not installed:
            return installed, message
        return verify_present(
            self._target.config_path, self._target.fmt, self._target.section(""), asset.name
        )

    def scan(self, target_base: Path) -> list[InstalledAssetInfo]:
        return self._ops.scan_installed(target_base)

    def asset_path(self, name: str, target_base: Path) -> Path:
        return self._ops.install_dir(target_base, name)
