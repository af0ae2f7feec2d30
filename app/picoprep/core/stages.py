"""The provisioning stages, in execution order.

Each stage is a plain function taking the run context. A stage either
returns a short status message or raises; it never swallows a failing
command. The single exception is the picotool USB check, which records a
soft warning and lets the run continue.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass, field
from importlib import resources

from picoprep.core.config import ProvisionConfig
from picoprep.core.errors import PreconditionError
from picoprep.core.host import Host
from picoprep.core.steps import append_line_once, ensure_present, overwrite_file
from picoprep.models.resources import (
    DeviceAccessRule,
    GeneratedConfigFile,
    ShellEnvironmentEntry,
    TargetVariant,
)
from picoprep.operators.apt import AptOperator
from picoprep.operators.build import AutotoolsBuilder, CMakeBuilder
from picoprep.operators.git import GitOperator
from picoprep.operators.groups import GroupOperator
from picoprep.operators.udev import UdevOperator

logger = logging.getLogger(__name__)

RISCV_TRIPLE = "riscv-none-elf"
REQUIRED_COMPILERS = ("arm-none-eabi-gcc", f"{RISCV_TRIPLE}-gcc")

# A USB-enabled picotool lists this subcommand in its help output
PICOTOOL_USB_SUBCOMMAND = "load"

DEVICE_RULE_FILES = ("99-rpi-debug-probe.rules", "99-pico-usb.rules")
OPENOCD_CONTRIB_RULES = "contrib/60-openocd.rules"

RELOGIN_NOTE = "If this is your first run, log out/in (or reboot) so new group memberships take effect."


@dataclass
class ProvisionContext:
    """State shared by the stages of one run.

    Attributes:
        config: Settings for the run.
        host: Handle on the machine being provisioned.
        shell_entries: Lines for the shell startup file, in recording order.
        warnings: Soft warnings raised so far.
        notes: Informational messages for the user.
        summary: (label, value) pairs for the final report.
    """

    config: ProvisionConfig
    host: Host
    shell_entries: list[ShellEnvironmentEntry] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)
    summary: list[tuple[str, str]] = field(default_factory=list)

    def persist(self, *entries: ShellEnvironmentEntry) -> None:
        """Queue lines for the shell startup file, ignoring repeats."""
        for entry in entries:
            if entry not in self.shell_entries:
                self.shell_entries.append(entry)

    def warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)

    def note(self, message: str) -> None:
        self.notes.append(message)


@dataclass(frozen=True, slots=True)
class Stage:
    """One step of the provisioning pipeline.

    Attributes:
        name: Stable identifier.
        title: Banner shown when the stage starts.
        run: Stage body.
    """

    name: str
    title: str
    run: Callable[[ProvisionContext], str | None]


def read_bundled(name: str) -> str:
    """Read a static file shipped in picoprep.data."""
    return resources.files("picoprep.data").joinpath(name).read_text()


def device_rules() -> list[DeviceAccessRule]:
    return [DeviceAccessRule(filename=name, content=read_bundled(name)) for name in DEVICE_RULE_FILES]


def debugger_configs(config: ProvisionConfig) -> list[GeneratedConfigFile]:
    return [
        GeneratedConfigFile(
            path=config.cfg_path(variant),
            variant=variant,
            content=read_bundled(variant.config_name),
        )
        for variant in TargetVariant
    ]


# =============================================================================
# Stages
# =============================================================================


def install_packages(ctx: ProvisionContext) -> str:
    """Install build tools, the Arm toolchain and OpenOCD build dependencies."""
    apt = AptOperator(ctx.host)
    apt.require()
    apt.update()

    groups = ctx.config.packages
    for packages in (groups.base, groups.arm_toolchain, groups.openocd_deps):
        apt.install(packages)

    total = len(groups.base) + len(groups.arm_toolchain) + len(groups.openocd_deps)
    return f"{total} package(s) ensured"


def install_toolchain(ctx: ProvisionContext) -> str:
    """Download and unpack the xPack RISC-V toolchain, then check both compilers."""
    host = ctx.host
    toolchain = ctx.config.toolchain
    archive = ctx.config.download_dir / toolchain.archive_name

    def fetch() -> None:
        host.run(["wget", "-q", toolchain.url, "-O", str(archive)])
        host.run(["tar", "-xzf", str(archive), "-C", str(toolchain.root)], privileged=True)

    installed = ensure_present(toolchain.directory, fetch, present=toolchain.is_installed)

    host.prepend_path(toolchain.bin_dir)
    host.setenv("PICO_GCC_TRIPLE", RISCV_TRIPLE)
    host.setenv("PICO_TOOLCHAIN_PATH", toolchain.bin_dir)
    ctx.persist(
        ShellEnvironmentEntry.path_prepend(toolchain.bin_dir),
        ShellEnvironmentEntry.export("PICO_GCC_TRIPLE", RISCV_TRIPLE),
        ShellEnvironmentEntry.export("PICO_TOOLCHAIN_PATH", toolchain.bin_dir),
    )

    for executable in REQUIRED_COMPILERS:
        if host.which(executable) is None:
            raise PreconditionError(executable)

    state = "installed" if installed else "already installed"
    return f"{toolchain.name} {state}"


def acquire_sdk(ctx: ProvisionContext) -> str:
    """Clone or update pico-sdk with its submodules."""
    git = GitOperator(ctx.host)
    git.require()

    sdk = ctx.config.sdk
    cloned = git.acquire(sdk)

    ctx.host.setenv("PICO_SDK_PATH", sdk.path)
    ctx.persist(ShellEnvironmentEntry.export("PICO_SDK_PATH", sdk.path))
    return f"{'cloned' if cloned else 'updated'} {sdk.path}"


def _picotool_remediation(config: ProvisionConfig) -> str:
    build = config.picotool_build
    return (
        "picotool appears to be built WITHOUT USB support.\n"
        "Rebuild after confirming libusb-1.0-0-dev is installed:\n"
        f"  rm -rf {build.build_dir} && mkdir {build.build_dir} && cd {build.build_dir}\n"
        f"  cmake .. -DPICO_SDK_PATH={config.sdk.path} -DCMAKE_BUILD_TYPE={build.build_type} "
        f"-G {build.generator} && cmake --build . -j"
    )


def build_picotool(ctx: ProvisionContext) -> str:
    """Build picotool with USB support, install it, and expose it on PATH."""
    host = ctx.host
    config = ctx.config

    git = GitOperator(host)
    git.require()
    git.acquire(config.picotool)

    cmake = CMakeBuilder(host)
    cmake.require()
    build = config.picotool_build
    cmake.build(build)

    prefix = config.picotool_prefix
    host.prepend_path(build.build_dir)
    ctx.persist(
        ShellEnvironmentEntry.path_prepend(build.build_dir),
        ShellEnvironmentEntry.path_prepend(prefix / "bin"),
        ShellEnvironmentEntry.export("picotool_DIR", prefix / "lib" / "cmake" / "picotool"),
    )

    binary = config.picotool_bin
    if os.access(binary, os.X_OK):
        # sudo resets PATH, so privileged invocations need a system-wide link
        host.run(
            ["ln", "-sf", str(binary), str(config.system_bin_dir / "picotool")],
            privileged=True,
        )

    result = host.probe([str(binary), "--help"])
    if PICOTOOL_USB_SUBCOMMAND not in result.stdout + result.stderr:
        ctx.warn(_picotool_remediation(config))
        return "built without USB support"

    return f"built {binary}"


def build_openocd(ctx: ProvisionContext) -> str:
    """Build the Raspberry Pi OpenOCD fork with CMSIS-DAP and internal jimtcl."""
    host = ctx.host
    config = ctx.config

    git = GitOperator(host)
    git.require()
    git.acquire(config.openocd)

    make = AutotoolsBuilder(host)
    make.require()
    build = config.openocd_build
    make.build(build)

    bin_dir = config.openocd_bin.parent
    host.prepend_path(bin_dir)
    ctx.persist(ShellEnvironmentEntry.path_prepend(bin_dir))
    return f"installed {config.openocd_bin}"


def configure_device_access(ctx: ProvisionContext) -> str:
    """Install udev rules for the Debug Probe and RP2xxx devices, and grant groups."""
    config = ctx.config
    udev = UdevOperator(ctx.host, rules_dir=config.rules_dir)

    installed: list[str] = []
    contrib = config.openocd.path / OPENOCD_CONTRIB_RULES
    if contrib.is_file():
        installed.append(udev.copy_rule_file(contrib).name)

    for rule in device_rules():
        installed.append(udev.install_rule(rule).name)
    udev.reload()

    groups = GroupOperator(ctx.host)
    for group in config.groups:
        groups.ensure_group(group)
        groups.add_user(group, config.user)

    ctx.note(RELOGIN_NOTE)
    return f"rules: {', '.join(installed)}; groups: {', '.join(config.groups)}"


def write_debugger_configs(ctx: ProvisionContext) -> str:
    """Write the CMSIS-DAP OpenOCD configs for both RP2350 core types."""
    written: list[str] = []
    for cfg in debugger_configs(ctx.config):
        overwrite_file(ctx.host, cfg.path, cfg.content)
        written.append(cfg.path.name)
    return f"wrote {', '.join(written)} to {ctx.config.cfg_dir}"


def persist_environment(ctx: ProvisionContext) -> str:
    """Append every recorded environment line to the shell startup file once."""
    rc = ctx.config.shell_rc
    added = sum(1 for entry in ctx.shell_entries if append_line_once(rc, entry.line))
    return f"{added} line(s) added to {rc}"


def _first_version_line(host: Host, executable: str) -> str:
    result = host.probe([executable, "--version"])
    if not result.success:
        return "not found"
    return result.first_line


def summarize(ctx: ProvisionContext) -> str:
    """Collect installed versions and paths for the final report."""
    host = ctx.host
    config = ctx.config
    ctx.summary.extend(
        [
            ("Arm GCC", _first_version_line(host, "arm-none-eabi-gcc")),
            ("RISC-V", _first_version_line(host, f"{RISCV_TRIPLE}-gcc")),
            ("pico-sdk", str(config.sdk.path)),
            ("picotool", host.which("picotool") or "not found"),
            ("openocd", str(config.openocd_bin)),
            ("OpenOCD Arm cfg", str(config.cfg_path(TargetVariant.ARM))),
            ("OpenOCD RISC-V cfg", str(config.cfg_path(TargetVariant.RISCV))),
        ]
    )
    return "Environment ready"


STAGES: tuple[Stage, ...] = (
    Stage(
        "packages",
        "Installing base packages, Arm toolchain and OpenOCD build dependencies",
        install_packages,
    ),
    Stage("toolchain", "Installing RISC-V toolchain (xPack riscv-none-elf)", install_toolchain),
    Stage("sdk", "Cloning/updating pico-sdk", acquire_sdk),
    Stage("picotool", "Building picotool (USB-enabled)", build_picotool),
    Stage(
        "openocd",
        "Building Raspberry Pi OpenOCD fork (RP2350 targets, internal jimTCL)",
        build_openocd,
    ),
    Stage(
        "device-access",
        "Installing udev rules (Debug Probe & RP USB) and adding user to groups",
        configure_device_access,
    ),
    Stage("configs", "Writing OpenOCD config snippets (CMSIS-DAP + RP2350)", write_debugger_configs),
    Stage("environment", "Persisting environment to shell startup file", persist_environment),
    Stage("summary", "Environment ready!", summarize),
)
