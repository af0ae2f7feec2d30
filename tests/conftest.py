"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules. The FakeRunner
stands in for picoprep.utils.shell.run_command: it records every command
and emulates the filesystem effects of the few commands whose output later
steps look at, so whole provisioning runs execute inside tmp_path.
"""

import shutil
from dataclasses import dataclass, field
from pathlib import Path

import pytest
from picoprep.core.config import ProvisionConfig
from picoprep.core.host import Host
from picoprep.utils.shell import CommandResult

PICOTOOL_HELP_WITH_USB = """PICOTOOL:
    Tool for interacting with RP2040/RP2350 device(s) in BOOTSEL mode, or with an RP2040/RP2350 binary

SYNOPSIS:
    picotool info [-b] [-p] [-d] [--debug] [-l] [-a] [device-selection]
    picotool load [--ignore-partitions] [--family <family_id>] [-n] [-N] [-u] [-v] [-x] <filename>
    picotool seal [--quiet] [--verbose] <infile> <outfile>
"""

PICOTOOL_HELP_WITHOUT_USB = """PICOTOOL:
    Tool for interacting with RP2040/RP2350 binaries

SYNOPSIS:
    picotool seal [--quiet] [--verbose] <infile> <outfile>
    picotool encrypt [--quiet] [--verbose] <infile> <outfile> <aes_key>
"""


@dataclass
class Call:
    """One command seen by the FakeRunner."""

    args: list[str]
    cwd: str | None
    input: str | None
    env: dict[str, str]

    @property
    def command(self) -> list[str]:
        """Arguments without a leading sudo."""
        return self.args[1:] if self.args and self.args[0] == "sudo" else self.args

    @property
    def privileged(self) -> bool:
        return bool(self.args) and self.args[0] == "sudo"


def _make_executable(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("#!/bin/sh\nexit 0\n")
    path.chmod(0o755)


@dataclass
class FakeRunner:
    """Records commands and emulates their side effects on the filesystem.

    Attributes:
        calls: Every command in execution order.
        failures: Command prefixes (without sudo) that exit with status 1.
        groups: Groups getent reports as existing.
        picotool_help: Output returned for ``picotool --help``.
    """

    calls: list[Call] = field(default_factory=list)
    failures: list[list[str]] = field(default_factory=list)
    groups: set[str] = field(default_factory=lambda: {"dialout", "plugdev"})
    picotool_help: str = PICOTOOL_HELP_WITH_USB
    _prefixes: dict[str, Path] = field(default_factory=dict)

    def fail_on(self, *prefix: str) -> None:
        self.failures.append(list(prefix))

    def commands(self) -> list[list[str]]:
        return [c.command for c in self.calls]

    def ran(self, *prefix: str) -> bool:
        return any(c[: len(prefix)] == list(prefix) for c in self.commands())

    def __call__(
        self,
        args: list[str],
        *,
        cwd: str | None = None,
        env: dict[str, str] | None = None,
        input: str | None = None,
        **kwargs: object,
    ) -> CommandResult:
        call = Call(args=list(args), cwd=cwd, input=input, env=dict(env or {}))
        self.calls.append(call)
        cmd = call.command

        for prefix in self.failures:
            if cmd[: len(prefix)] == prefix:
                return CommandResult(stdout="", stderr=f"{cmd[0]}: simulated failure", returncode=1)

        return self._emulate(cmd, cwd, input)

    def _emulate(self, cmd: list[str], cwd: str | None, input: str | None) -> CommandResult:
        ok = CommandResult(stdout="", stderr="", returncode=0)
        name = Path(cmd[0]).name

        if cmd[0] == "tee":
            target = Path(cmd[1])
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(input or "")
            return CommandResult(stdout=input or "", stderr="", returncode=0)

        if cmd[0] == "tar":
            archive = Path(cmd[2]).name.removesuffix("-linux-x64.tar.gz")
            root = Path(cmd[cmd.index("-C") + 1])
            _make_executable(root / archive / "bin" / "riscv-none-elf-gcc")
            return ok

        if cmd[:2] == ["git", "clone"]:
            Path(cmd[3]).mkdir(parents=True)
            return ok

        if cmd[:2] == ["cmake", "--build"] and cwd:
            _make_executable(Path(cwd) / "picotool")
            return ok

        if name == "configure":
            for arg in cmd:
                if arg.startswith("--prefix="):
                    self._prefixes[cwd or ""] = Path(arg.removeprefix("--prefix="))
            return ok

        if cmd[:2] == ["make", "install"]:
            prefix = self._prefixes.get(cwd or "")
            if prefix is not None:
                _make_executable(prefix / "bin" / "openocd")
            return ok

        if cmd[:2] == ["ln", "-sf"]:
            link = Path(cmd[3])
            link.parent.mkdir(parents=True, exist_ok=True)
            if link.is_symlink() or link.exists():
                link.unlink()
            link.symlink_to(cmd[2])
            return ok

        if cmd[0] == "cp":
            dest = Path(cmd[2])
            dest.mkdir(parents=True, exist_ok=True)
            shutil.copy(cmd[1], dest)
            return ok

        if cmd[:2] == ["getent", "group"]:
            found = cmd[2] in self.groups
            return CommandResult(stdout=f"{cmd[2]}:x:46:\n" if found else "", stderr="", returncode=0 if found else 2)

        if cmd[0] == "groupadd":
            self.groups.add(cmd[1])
            return ok

        if name == "picotool" and "--help" in cmd:
            return CommandResult(stdout=self.picotool_help, stderr="", returncode=0)

        if cmd[1:] == ["--version"]:
            return CommandResult(stdout=f"{name} (fake) 13.2.0\nCopyright\n", stderr="", returncode=0)

        return ok


@pytest.fixture
def fake_runner() -> FakeRunner:
    """Command runner that records calls instead of executing them."""
    return FakeRunner()


@pytest.fixture
def system_bin(tmp_path: Path) -> Path:
    """Directory standing in for /usr/bin, holding apt-installed tools."""
    bin_dir = tmp_path / "usr" / "bin"
    for tool in ("apt-get", "git", "cmake", "make", "udevadm", "usermod", "arm-none-eabi-gcc"):
        _make_executable(bin_dir / tool)
    return bin_dir


@pytest.fixture
def fake_host(tmp_path: Path, fake_runner: FakeRunner, system_bin: Path) -> Host:
    """Host wired to the FakeRunner with an isolated PATH."""
    return Host(
        fake_runner,
        env={"PATH": str(system_bin), "HOME": str(tmp_path / "home"), "USER": "dev"},
        user="dev",
        jobs=4,
        privileged_prefix=("sudo",),
    )


@pytest.fixture
def provision_config(tmp_path: Path) -> ProvisionConfig:
    """Settings pointing every path inside tmp_path."""
    home = tmp_path / "home"
    home.mkdir()
    return ProvisionConfig(
        toolchain_root=tmp_path / "opt",
        download_dir=tmp_path / "downloads",
        workdir=home / "pico-work",
        shell_rc=home / ".bashrc",
        rules_dir=tmp_path / "etc" / "udev" / "rules.d",
        system_bin_dir=tmp_path / "usr" / "local" / "bin",
        user="dev",
    )


@pytest.fixture
def picotool_without_usb(fake_runner: FakeRunner) -> FakeRunner:
    """FakeRunner whose picotool was built without libusb."""
    fake_runner.picotool_help = PICOTOOL_HELP_WITHOUT_USB
    return fake_runner
