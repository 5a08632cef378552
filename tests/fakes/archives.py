"""Build asset archives in memory for tests."""

import io
import zipfile
from collections.abc import Mapping
from pathlib import Path

from sx.assets.archive import AssetArchive
from sx.assets.bundle import AssetBundle, bundle_from_archive


def make_zip(files: Mapping[str, str | bytes]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, content in files.items():
            zf.writestr(name, content)
    return buffer.getvalue()


def make_archive(files: Mapping[str, str | bytes]) -> AssetArchive:
    return AssetArchive(make_zip(files))


def make_bundle(files: Mapping[str, str | bytes]) -> AssetBundle:
    return bundle_from_archive(make_archive(files))


def skill_files(name: str, version: str = "1.0.0", description: str = "") -> dict[str, str]:
    return {
        "metadata.toml": (
            f'[asset]\nname = "{name}"\nversion = "{version}"\ntype = "skill"\n'
            f'description = "{description}"\n'
        ),
        "SKILL.md": f"# {name}\n\nDo the thing.\n",
        "reference/notes.md": "extra notes\n",
    }


def command_files(
    name: str, version: str = "1.0.0", body: str = "Run $ARGUMENTS\n"
) -> dict[str, str]:
    return {
        "metadata.toml": (
            f'[asset]\nname = "{name}"\nversion = "{version}"\ntype = "command"\n'
            'description = "A command"\n'
        ),
        "COMMAND.md": body,
    }


def agent_files(name: str, version: str = "1.0.0") -> dict[str, str]:
    return {
        "metadata.toml": f'[asset]\nname = "{name}"\nversion = "{version}"\ntype = "agent"\n',
        "AGENT.md": "You are a reviewer.\n",
    }


def rule_files(name: str, globs: list[str] | None = None, version: str = "1.0.0") -> dict[str, str]:
    rule_section = '[rule]\ndescription = "Style rules"\n'
    if globs is not None:
        rule_section += "globs = [" + ", ".join(f'"{g}"' for g in globs) + "]\n"
    return {
        "metadata.toml": (
            f'[asset]\nname = "{name}"\nversion = "{version}"\ntype = "rule"\n\n{rule_section}'
        ),
        "RULE.md": "Use four spaces.\n",
    }


def hook_files(name: str, event: str = "session-start", version: str = "1.0.0") -> dict[str, str]:
    return {
        "metadata.toml": (
            f'[asset]\nname = "{name}"\nversion = "{version}"\ntype = "hook"\n\n'
            f'[hook]\nevent = "{event}"\ncommand = "python"\n'
            'args = ["scripts/run.py", "--verbose"]\n'
        ),
        "scripts/run.py": "print('hi')\n",
    }


def config_only_mcp_files(
    name: str, version: str = "1.0.0", package: str = "@acme/server"
) -> dict[str, str]:
    return {
        "metadata.toml": (
            f'[asset]\nname = "{name}"\nversion = "{version}"\ntype = "mcp"\n\n'
            f'[mcp]\ncommand = "npx"\nargs = ["-y", "{package}"]\n'
        ),
    }


def packaged_mcp_files(name: str, version: str = "1.0.0") -> dict[str, str]:
    return {
        "metadata.toml": (
            f'[asset]\nname = "{name}"\nversion = "{version}"\ntype = "mcp"\n\n'
            '[mcp]\ncommand = "node"\nargs = ["src/index.js", "--port", "3000"]\n'
        ),
        "src/index.js": "console.log('server')\n",
    }


def remote_mcp_files(name: str, version: str = "1.0.0") -> dict[str, str]:
    return {
        "metadata.toml": (
            f'[asset]\nname = "{name}"\nversion = "{version}"\ntype = "mcp"\n\n'
            '[mcp]\ntransport = "sse"\nurl = "https://mcp.example.com/sse"\n'
        ),
    }


def write_archive(directory: Path, files: Mapping[str, str | bytes], filename: str) -> Path:
    """Write a zip to `directory/filename` for commands that take archive paths."""
    path = directory / filename
    path.write_bytes(make_zip(files))
    return path


def plugin_files(
    name: str,
    version: str = "1.0.0",
    marketplace: str | None = None,
    auto_enable: bool | None = None,
) -> dict[str, str]:
    section = ""
    if marketplace is not None:
        section += f'marketplace = "{marketplace}"\n'
    if auto_enable is not None:
        section += f"auto-enable = {'true' if auto_enable else 'false'}\n"
    metadata = f'[asset]\nname = "{name}"\nversion = "{version}"\ntype = "claude-code-plugin"\n'
    if section:
        metadata += f"\n[claude-code-plugin]\n{section}"
    return {
        "metadata.toml": metadata,
        ".claude-plugin/plugin.json": f'{{"name": "{name}"}}\n',
        "commands/hello.md": "Say hello.\n",
    }
