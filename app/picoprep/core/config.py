"""Provisioning settings.

This module provides the settings model and loader. Every setting has a
default matching a stock Ubuntu workstation, so the settings file is
optional; when present it may override any subset of fields.

Settings are read from ~/.config/picoprep/config.toml
"""

import tomllib
from pathlib import Path
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from picoprep.core.paths import get_config_path
from picoprep.models.resources import (
    BuildArtifact,
    RepositoryCheckout,
    TargetVariant,
    ToolchainInstallation,
)


class RepositoryUrls(BaseModel):
    """Remotes for the source checkouts."""

    model_config = ConfigDict(extra="forbid")

    pico_sdk: str = "https://github.com/raspberrypi/pico-sdk.git"
    picotool: str = "https://github.com/raspberrypi/picotool.git"
    openocd: str = "https://github.com/raspberrypi/openocd.git"


class AptPackages(BaseModel):
    """APT package groups, installed in this order."""

    model_config = ConfigDict(extra="forbid")

    base: list[str] = Field(
        default_factory=lambda: [
            "build-essential",
            "git",
            "cmake",
            "ninja-build",
            "pkg-config",
            "libusb-1.0-0",
            "libusb-1.0-0-dev",
            "wget",
            "curl",
            "python3",
            "python3-pip",
            "minicom",
            "usbutils",
        ]
    )
    arm_toolchain: list[str] = Field(
        default_factory=lambda: [
            "gcc-arm-none-eabi",
            "binutils-arm-none-eabi",
            "libnewlib-arm-none-eabi",
            "gdb-multiarch",
        ]
    )
    openocd_deps: list[str] = Field(
        default_factory=lambda: [
            "autoconf",
            "automake",
            "libtool",
            "texinfo",
            "libhidapi-dev",
        ]
    )


class ProvisionConfig(BaseModel):
    """Settings for one provisioning run.

    Attributes:
        xpack_version: xPack riscv-none-elf GCC release to install.
        toolchain_root: System directory the toolchain archive unpacks into.
        download_dir: Where the archive is downloaded before extraction.
        workdir: Parent directory of every source checkout.
        shell_rc: Shell startup file receiving environment lines.
        rules_dir: udev rules directory.
        system_bin_dir: Directory for the sudo-visible picotool symlink.
        generator: CMake generator for picotool.
        build_type: CMake build type for picotool.
        jobs: Build parallelism (None = one job per CPU).
        user: User granted group membership (None = $USER).
        groups: Groups the user is added to, created if missing.
    """

    model_config = ConfigDict(extra="forbid")

    xpack_version: Annotated[str, Field(min_length=1)] = "13.2.0-1"
    toolchain_root: Path = Path("/opt")
    download_dir: Path = Path("/tmp")
    workdir: Path = Field(default_factory=lambda: Path.home() / "pico-work")
    shell_rc: Path = Field(default_factory=lambda: Path.home() / ".bashrc")
    rules_dir: Path = Path("/etc/udev/rules.d")
    system_bin_dir: Path = Path("/usr/local/bin")
    generator: str = "Ninja"
    build_type: str = "Release"
    jobs: Annotated[int, Field(ge=1)] | None = None
    user: str | None = None
    groups: list[str] = Field(default_factory=lambda: ["dialout", "plugdev"])
    repositories: RepositoryUrls = Field(default_factory=RepositoryUrls)
    packages: AptPackages = Field(default_factory=AptPackages)

    @field_validator(
        "toolchain_root",
        "download_dir",
        "workdir",
        "shell_rc",
        "rules_dir",
        "system_bin_dir",
    )
    @classmethod
    def expand_user(cls, v: Path) -> Path:
        return v.expanduser()

    @property
    def toolchain(self) -> ToolchainInstallation:
        return ToolchainInstallation(version=self.xpack_version, root=self.toolchain_root)

    @property
    def sdk(self) -> RepositoryCheckout:
        return RepositoryCheckout(path=self.workdir / "pico-sdk", url=self.repositories.pico_sdk)

    @property
    def picotool(self) -> RepositoryCheckout:
        return RepositoryCheckout(path=self.workdir / "picotool", url=self.repositories.picotool)

    @property
    def openocd(self) -> RepositoryCheckout:
        return RepositoryCheckout(path=self.workdir / "openocd-rpi", url=self.repositories.openocd)

    @property
    def picotool_prefix(self) -> Path:
        return self.picotool.path / "install"

    @property
    def openocd_prefix(self) -> Path:
        return self.openocd.path / "install"

    @property
    def picotool_build(self) -> BuildArtifact:
        return BuildArtifact(
            source_dir=self.picotool.path,
            options=(f"-DPICO_SDK_PATH={self.sdk.path}",),
            build_type=self.build_type,
            generator=self.generator,
            install_prefix=self.picotool_prefix,
        )

    @property
    def picotool_bin(self) -> Path:
        return self.picotool_build.build_dir / "picotool"

    @property
    def openocd_build(self) -> BuildArtifact:
        return BuildArtifact(
            source_dir=self.openocd.path,
            options=("--enable-cmsis-dap", "--enable-internal-jimtcl"),
            install_prefix=self.openocd_prefix,
        )

    @property
    def openocd_bin(self) -> Path:
        return self.openocd_prefix / "bin" / "openocd"

    @property
    def cfg_dir(self) -> Path:
        return self.workdir / "openocd-cfg"

    def cfg_path(self, variant: TargetVariant) -> Path:
        return self.cfg_dir / variant.config_name


class ConfigError(Exception):
    """Base exception for settings errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when an explicitly requested settings file is missing."""


class ConfigParseError(ConfigError):
    """Raised when the settings file cannot be parsed."""


class ConfigValidationError(ConfigError):
    """Raised when the settings content is invalid."""


def load_config(path: Path | None = None) -> ProvisionConfig:
    """Load provisioning settings.

    Args:
        path: Settings file. If None, uses the default path and falls back
            to built-in defaults when that file does not exist.

    Returns:
        Validated ProvisionConfig.

    Raises:
        ConfigNotFoundError: If an explicit path does not exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigValidationError: If the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        if path is not None:
            raise ConfigNotFoundError(f"Config not found: {config_path}")
        return ProvisionConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    try:
        return ProvisionConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid config content: {e}") from e
