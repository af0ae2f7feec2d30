"""Models for the external resources picoprep manages.

None of these carry state of their own. Each one names a path (or a line in
a file) on the host and knows how to derive the related paths; whether the
resource is "done" is always decided by looking at the filesystem.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

XPACK_RELEASES_URL = "https://github.com/xpack-dev-tools/riscv-none-elf-gcc-xpack/releases/download"


class TargetVariant(Enum):
    """Core architecture an OpenOCD config targets.

    Attributes:
        ARM: Cortex-M33 cores.
        RISCV: Hazard3 RISC-V cores.
    """

    ARM = "arm"
    RISCV = "riscv"

    @property
    def config_name(self) -> str:
        """File name of the generated OpenOCD config for this variant."""
        return f"rp2350-{self.value}.cfg"


@dataclass(frozen=True, slots=True)
class ToolchainInstallation:
    """An xPack riscv-none-elf GCC release unpacked under a system directory.

    Attributes:
        version: xPack release version, e.g. "13.2.0-1".
        root: Directory the archive is extracted into (needs root).
    """

    version: str
    root: Path = Path("/opt")

    def __post_init__(self) -> None:
        if not self.version:
            msg = "Toolchain version cannot be empty"
            raise ValueError(msg)

    @property
    def name(self) -> str:
        return f"xpack-riscv-none-elf-gcc-{self.version}"

    @property
    def directory(self) -> Path:
        return self.root / self.name

    @property
    def bin_dir(self) -> Path:
        return self.directory / "bin"

    @property
    def archive_name(self) -> str:
        return f"{self.name}-linux-x64.tar.gz"

    @property
    def url(self) -> str:
        return f"{XPACK_RELEASES_URL}/v{self.version}/{self.archive_name}"

    def is_installed(self) -> bool:
        """Check the installed marker (the install directory)."""
        return self.directory.is_dir()


@dataclass(frozen=True, slots=True)
class RepositoryCheckout:
    """A git working tree identified by its local path.

    Attributes:
        path: Local checkout directory.
        url: Remote to clone from when the checkout is absent.
    """

    path: Path
    url: str

    def exists(self) -> bool:
        return self.path.is_dir()


@dataclass(frozen=True, slots=True)
class BuildArtifact:
    """An out-of-tree build directory under a source checkout.

    The build directory is always thrown away and recreated, so the
    options given here are the only ones the build ever sees.

    Attributes:
        source_dir: Root of the source checkout.
        options: Feature flags passed to the configure step.
        build_type: Release-oriented build type (CMake only).
        generator: CMake generator (CMake only).
        install_prefix: Where to install, or None to skip installing.
        build_subdir: Build directory name relative to source_dir.
    """

    source_dir: Path
    options: tuple[str, ...] = ()
    build_type: str = "Release"
    generator: str = "Ninja"
    install_prefix: Path | None = None
    build_subdir: str = "build"

    @property
    def build_dir(self) -> Path:
        return self.source_dir / self.build_subdir


@dataclass(frozen=True, slots=True)
class ShellEnvironmentEntry:
    """A single literal line that must appear once in the shell startup file.

    Attributes:
        line: The exact line, without a trailing newline.
    """

    line: str

    def __post_init__(self) -> None:
        if not self.line or "\n" in self.line:
            msg = f"Shell entry must be a single non-empty line: {self.line!r}"
            raise ValueError(msg)

    @classmethod
    def export(cls, name: str, value: str | Path) -> "ShellEnvironmentEntry":
        """Create an ``export NAME=value`` line."""
        return cls(f"export {name}={value}")

    @classmethod
    def path_prepend(cls, directory: str | Path) -> "ShellEnvironmentEntry":
        """Create an ``export PATH=<dir>:$PATH`` line."""
        return cls(f"export PATH={directory}:$PATH")


@dataclass(frozen=True, slots=True)
class DeviceAccessRule:
    """A udev rule file with fixed content.

    Attributes:
        filename: File name inside the udev rules directory.
        content: Full file content.
    """

    filename: str
    content: str


@dataclass(frozen=True, slots=True)
class GeneratedConfigFile:
    """A static debugger config file written on every run.

    Attributes:
        path: Destination path.
        variant: Core architecture the config targets.
        content: Full file content.
    """

    path: Path
    variant: TargetVariant
    content: str = field(repr=False)
