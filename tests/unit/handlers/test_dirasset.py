"""Tests for directory-tree asset operations."""

from pathlib import Path

from sx.assets.types import COMMAND, SKILL
from sx.core.cancellation import CancelToken
from sx.handlers.dirasset import DirectoryAssetOps
from tests.fakes.archives import make_archive, skill_files

OPS = DirectoryAssetOps("skills", SKILL)


def test_install_extracts_full_tree(tmp_path: Path) -> None:
    install_dir = OPS.install(make_archive(skill_files("demo")), "demo", tmp_path, CancelToken())

    assert install_dir == tmp_path / "skills" / "demo"
    assert (install_dir / "SKILL.md").is_file()
    assert (install_dir / "reference" / "notes.md").is_file()
    assert (install_dir / "metadata.toml").is_file()


def test_reinstall_replaces_previous_tree(tmp_path: Path) -> None:
    OPS.install(make_archive(skill_files("demo")), "demo", tmp_path, CancelToken())
    stale = tmp_path / "skills" / "demo" / "stale.md"
    stale.write_text("old")

    OPS.install(make_archive(skill_files("demo", version="2.0.0")), "demo", tmp_path, CancelToken())

    assert not stale.exists()
    assert OPS.verify_installed(tmp_path, "demo", "2.0.0") == (True, "installed")


def test_remove_missing_directory_is_not_an_error(tmp_path: Path) -> None:
    assert OPS.remove("never-installed", tmp_path) is False
    assert list(tmp_path.iterdir()) == []


def test_verify_messages_in_order(tmp_path: Path) -> None:
    assert OPS.verify_installed(tmp_path, "demo", "1.0.0") == (False, "directory not found")

    (tmp_path / "skills" / "demo").mkdir(parents=True)
    assert OPS.verify_installed(tmp_path, "demo", "1.0.0") == (False, "metadata.toml not found")

    OPS.install(make_archive(skill_files("demo")), "demo", tmp_path, CancelToken())
    assert OPS.verify_installed(tmp_path, "demo", "2.0.0") == (
        False,
        "version mismatch: installed 1.0.0, expected 2.0.0",
    )
    assert OPS.verify_installed(tmp_path, "demo", "1.0.0") == (True, "installed")


def test_scan_skips_unmanaged_and_foreign_directories(tmp_path: Path) -> None:
    alpha = make_archive(skill_files("alpha", description="First"))
    OPS.install(alpha, "alpha", tmp_path, CancelToken())
    (tmp_path / "skills" / "handmade").mkdir()
    (tmp_path / "skills" / "broken").mkdir()
    (tmp_path / "skills" / "broken" / "metadata.toml").write_text("not toml [")
    (tmp_path / "skills" / "garbled").mkdir()
    (tmp_path / "skills" / "garbled" / "metadata.toml").write_bytes(b"\xff\xfe")
    other = DirectoryAssetOps("skills", COMMAND)

    found = OPS.scan_installed(tmp_path)

    assert [(info.name, info.version, info.description) for info in found] == [
        ("alpha", "1.0.0", "First")
    ]
    assert other.scan_installed(tmp_path) == []


def test_read_prompt_content(tmp_path: Path) -> None:
    OPS.install(make_archive(skill_files("demo")), "demo", tmp_path, CancelToken())

    content = OPS.read_prompt_content(tmp_path, "demo")

    assert content is not None
    assert content.content == "# demo\n\nDo the thing.\n"
    assert content.base_dir == tmp_path / "skills" / "demo"
    assert OPS.read_prompt_content(tmp_path, "missing") is None
