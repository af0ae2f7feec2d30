"""Unit tests for the idempotent step primitives."""

from pathlib import Path
from unittest.mock import MagicMock

from picoprep.core.host import Host
from picoprep.core.steps import (
    append_line_once,
    ensure_present,
    overwrite_file,
    recreate_directory,
)


class TestAppendLineOnce:
    """Tests for append_line_once."""

    def test_creates_missing_file(self, tmp_path: Path) -> None:
        """append_line_once creates the file when it does not exist."""
        rc = tmp_path / ".bashrc"

        assert append_line_once(rc, "export A=1") is True

        assert rc.read_text() == "export A=1\n"

    def test_second_append_is_noop(self, tmp_path: Path) -> None:
        """Appending the same line twice leaves exactly one occurrence."""
        rc = tmp_path / ".bashrc"

        append_line_once(rc, "export PATH=/opt/x/bin:$PATH")
        appended = append_line_once(rc, "export PATH=/opt/x/bin:$PATH")

        assert appended is False
        assert rc.read_text().count("export PATH=/opt/x/bin:$PATH") == 1

    def test_preserves_existing_order(self, tmp_path: Path) -> None:
        """Existing lines keep their order and new lines go at the end."""
        rc = tmp_path / ".bashrc"
        rc.write_text("alias ll='ls -l'\nexport B=2\n")

        append_line_once(rc, "export A=1")
        append_line_once(rc, "export B=2")
        append_line_once(rc, "export C=3")
        append_line_once(rc, "export A=1")

        assert rc.read_text().splitlines() == [
            "alias ll='ls -l'",
            "export B=2",
            "export A=1",
            "export C=3",
        ]

    def test_exact_match_only(self, tmp_path: Path) -> None:
        """Lines differing only by whitespace or as substrings are distinct."""
        rc = tmp_path / ".bashrc"
        rc.write_text("  export A=1\nexport A=10\n")

        assert append_line_once(rc, "export A=1") is True
        assert rc.read_text().splitlines()[-1] == "export A=1"

    def test_adds_separator_when_file_lacks_trailing_newline(self, tmp_path: Path) -> None:
        """A file without a trailing newline is not glued onto the new line."""
        rc = tmp_path / ".bashrc"
        rc.write_text("export B=2")

        append_line_once(rc, "export A=1")

        assert rc.read_text() == "export B=2\nexport A=1\n"


class TestEnsurePresent:
    """Tests for ensure_present."""

    def test_skips_action_when_target_exists(self, tmp_path: Path) -> None:
        """The construction action is never invoked for an existing target."""
        target = tmp_path / "exists"
        target.mkdir()
        action = MagicMock()

        ran = ensure_present(target, action)

        assert ran is False
        action.assert_not_called()

    def test_runs_action_when_target_missing(self, tmp_path: Path) -> None:
        """The construction action runs once when the target is absent."""
        target = tmp_path / "missing"
        action = MagicMock(side_effect=lambda: target.mkdir())

        ran = ensure_present(target, action)

        assert ran is True
        action.assert_called_once()
        assert target.is_dir()

    def test_presence_check_overrides_path_test(self, tmp_path: Path) -> None:
        """A custom presence check decides, not the bare path."""
        target = tmp_path / "half-extracted"
        target.write_text("")
        action = MagicMock()

        ran = ensure_present(target, action, present=target.is_dir)

        assert ran is True
        action.assert_called_once()


class TestRecreateDirectory:
    """Tests for recreate_directory."""

    def test_removes_previous_content(self, tmp_path: Path) -> None:
        """Everything inside the directory is removed."""
        build = tmp_path / "build"
        (build / "CMakeFiles").mkdir(parents=True)
        (build / "CMakeCache.txt").write_text("STALE=1\n")

        recreate_directory(build)

        assert build.is_dir()
        assert list(build.iterdir()) == []

    def test_creates_missing_directory(self, tmp_path: Path) -> None:
        """A missing directory (and its parents) is created."""
        build = tmp_path / "src" / "build"

        recreate_directory(build)

        assert build.is_dir()

    def test_replaces_file_in_the_way(self, tmp_path: Path) -> None:
        """A plain file at the build path is replaced by a directory."""
        build = tmp_path / "build"
        build.write_text("oops")

        recreate_directory(build)

        assert build.is_dir()


class TestOverwriteFile:
    """Tests for overwrite_file."""

    def test_replaces_content(self, tmp_path: Path) -> None:
        """Prior content is fully replaced, never merged."""
        host = Host(MagicMock(), env={}, privileged_prefix=("sudo",))
        path = tmp_path / "cfg" / "a.cfg"
        path.parent.mkdir()
        path.write_text("custom line\nmore\n")

        overwrite_file(host, path, "new\n")

        assert path.read_text() == "new\n"

    def test_privileged_write_goes_through_tee(self, fake_host: Host, fake_runner, tmp_path: Path) -> None:
        """Privileged writes use sudo tee with the content on stdin."""
        path = tmp_path / "etc" / "rule.rules"

        overwrite_file(fake_host, path, "RULE\n", privileged=True)

        call = fake_runner.calls[-1]
        assert call.args == ["sudo", "tee", str(path)]
        assert call.input == "RULE\n"
        assert path.read_text() == "RULE\n"
