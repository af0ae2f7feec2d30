"""Build-from-source operators.

Both builders follow the same pipeline: throw away the build directory,
configure it with the artifact's options, build with one job per CPU, and
install when the artifact has a prefix.
"""

import logging

from picoprep.core.steps import recreate_directory
from picoprep.models.resources import BuildArtifact
from picoprep.operators.base import Operator

logger = logging.getLogger(__name__)


class CMakeBuilder(Operator):
    """Configures, builds and installs CMake projects."""

    @property
    def command(self) -> str:
        return "cmake"

    def configure_args(self, artifact: BuildArtifact) -> list[str]:
        args = [
            "cmake",
            str(artifact.source_dir),
            "-G",
            artifact.generator,
            f"-DCMAKE_BUILD_TYPE={artifact.build_type}",
        ]
        if artifact.install_prefix is not None:
            args.append(f"-DCMAKE_INSTALL_PREFIX={artifact.install_prefix}")
        args.extend(artifact.options)
        return args

    def build(self, artifact: BuildArtifact) -> None:
        """Run a fresh configure, build and (optional) install.

        Raises:
            CommandFailedError: If any cmake invocation fails.
        """
        build_dir = artifact.build_dir
        recreate_directory(build_dir)

        logger.info("Configuring %s (%s)", artifact.source_dir, " ".join(artifact.options))
        self._host.run(self.configure_args(artifact), cwd=build_dir)
        self._host.run(["cmake", "--build", ".", "-j", str(self._host.jobs)], cwd=build_dir)

        if artifact.install_prefix is not None:
            self._host.run(["cmake", "--install", "."], cwd=build_dir)


class AutotoolsBuilder(Operator):
    """Bootstraps and builds autotools projects out of tree."""

    @property
    def command(self) -> str:
        return "make"

    def configure_args(self, artifact: BuildArtifact) -> list[str]:
        args = [str(artifact.source_dir / "configure")]
        if artifact.install_prefix is not None:
            args.append(f"--prefix={artifact.install_prefix}")
        args.extend(artifact.options)
        return args

    def build(self, artifact: BuildArtifact) -> None:
        """Run bootstrap, a fresh out-of-tree configure, make and make install.

        Raises:
            CommandFailedError: If any step fails.
        """
        self._host.run(["./bootstrap"], cwd=artifact.source_dir)
        if (artifact.source_dir / "config.status").exists():
            # automake refuses to configure out of tree over an in-tree configuration
            logger.info("Cleaning in-tree configuration in %s", artifact.source_dir)
            self._host.run(["make", "distclean"], cwd=artifact.source_dir)

        build_dir = artifact.build_dir
        recreate_directory(build_dir)

        logger.info("Configuring %s (%s)", artifact.source_dir, " ".join(artifact.options))
        self._host.run(self.configure_args(artifact), cwd=build_dir)
        self._host.run(["make", f"-j{self._host.jobs}"], cwd=build_dir)

        if artifact.install_prefix is not None:
            self._host.run(["make", "install"], cwd=build_dir)
