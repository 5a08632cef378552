"""Hook event mapping and command resolution shared by all clients."""

import os
from collections.abc import Mapping, Sequence
from pathlib import Path

from sx.assets.archive import AssetArchive
from sx.assets.metadata import METADATA_FILE, HookSection, Metadata, parse_metadata
from sx.assets.types import HOOK
from sx.core.errors import AssetValidationError, UnsupportedHookEventError


def map_event(
    event: str,
    event_map: Mapping[str, str],
    client_overrides: Mapping[str, object] | None,
    client_id: str,
) -> str:
    """Translate a canonical hook event into a client's native event name.

    An `event` string in the client override table wins over the standard
    mapping.

    Raises:
        UnsupportedHookEventError: If neither table maps the event
    """
    if client_overrides is not None:
        override = client_overrides.get("event")
        if isinstance(override, str) and override:
            return override
    if event in event_map:
        return event_map[event]
    raise UnsupportedHookEventError(event, client_id)


def resolve_command(hook: HookSection, install_dir: Path, archive_files: Sequence[str]) -> str:
    """Build the shell command a client should run for a hook.

    Script-file hooks run the extracted script by absolute path. Command hooks
    keep the base command as given; each argument that is exactly a file in
    the archive is rewritten to its installed location.
    """
    if hook.script_file is not None:
        return os.path.join(install_dir, hook.script_file)

    assert hook.command is not None
    tokens = [hook.command]
    for arg in hook.args:
        if arg in archive_files:
            tokens.append(os.path.join(install_dir, arg))
        else:
            tokens.append(arg)
    return " ".join(tokens)


def validate_hook_archive(archive: AssetArchive) -> Metadata:
    """Check that an archive is an installable hook before touching disk.

    Returns:
        The parsed metadata

    Raises:
        AssetValidationError: Naming the first problem found
    """
    if not archive.contains(METADATA_FILE):
        raise AssetValidationError(f"{METADATA_FILE} not found in archive")
    try:
        metadata = parse_metadata(archive.read_file(METADATA_FILE))
    except AssetValidationError as e:
        raise AssetValidationError(f"failed to parse metadata: {e}") from e
    if metadata.asset_type != HOOK:
        raise AssetValidationError(
            f"asset type mismatch: expected hook, got {metadata.asset_type.key}"
        )
    if metadata.hook is None:
        raise AssetValidationError("[hook] section missing in metadata")
    script_file = metadata.hook.script_file
    if script_file is not None and not archive.contains(script_file):
        raise AssetValidationError(f"script file not found in archive: {script_file}")
    return metadata
