"""Invocation of the OPA binary for eval, test, build and refactor."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from ..errors import CommandError
from ..logging import get_logger
from ..process import Runner, run_command

_LOGGER = get_logger("opa")


@dataclass(frozen=True)
class Opa:
    """A configured OPA invocation over a fixed set of data locations."""

    data_locations: Tuple[str, ...] = ()
    executable: str = "opa"
    entrypoints: Tuple[str, ...] = ()
    target: Optional[str] = None
    runner: Runner = field(default=run_command, repr=False, compare=False)

    @classmethod
    def create(
        cls,
        data_locations: Sequence[Path | str],
        *,
        executable: str = "opa",
        runner: Runner | None = None,
    ) -> "Opa":
        _LOGGER.debug(
            "Creating OPA instance (location: %s, data: %s)",
            executable,
            [str(location) for location in data_locations],
        )
        return cls(
            data_locations=tuple(str(location) for location in data_locations),
            executable=executable,
            runner=runner or run_command,
        )

    def with_entrypoints(self, entrypoints: Sequence[str]) -> "Opa":
        return replace(self, entrypoints=tuple(entrypoints))

    def with_target(self, target: Optional[str]) -> "Opa":
        return replace(self, target=target or None)

    def eval(self, args: Sequence[str] = ()) -> str:
        _LOGGER.info("Running OPA eval")
        flags: List[str] = []
        for location in self.data_locations:
            flags.extend(["-d", location])
        flags.extend(args)
        return self._run("eval", flags)

    def test(self, args: Sequence[str] = ()) -> str:
        _LOGGER.info("Running OPA test")
        return self._run("test", [*self.data_locations, *args])

    def build(self, output_path: Path | str, args: Sequence[str] = ()) -> str:
        _LOGGER.info("Running OPA build")
        _LOGGER.debug("Output bundle path: %s", output_path)
        flags: List[str] = []
        if self.target:
            if _has_flag(args, "-t", "--target"):
                _LOGGER.debug("Target present on pass-through flags to OPA, ignoring configured target")
            else:
                flags.extend(["-t", self.target])
        if _has_flag(args, "-o", "--output"):
            _LOGGER.debug("Output path present on pass-through flags to OPA, ignoring configured output path")
        else:
            flags.extend(["-o", str(output_path)])
        for entrypoint in self.entrypoints:
            flags.extend(["-e", entrypoint])
        # Data locations must precede every flag.
        return self._run("build", [*self.data_locations, *flags, *args])

    def refactor(self, from_package: str, to_package: str) -> None:
        """Rename ``from_package`` to ``to_package`` in place across the data locations."""
        _LOGGER.info("Running OPA refactor")
        _LOGGER.debug("Moving package %s to %s", from_package, to_package)
        mapping = f"{from_package}:{to_package}"
        self._run("refactor", ["move", *self.data_locations, "-w", "-p", mapping])

    def _run(self, command: str, flags: Sequence[str]) -> str:
        args = [self.executable, command, *flags]
        try:
            return self.runner(args, cwd=None)
        except CommandError as exc:
            raise CommandError(f"error running opa {command}:\n {exc}", exc.output) from exc


def _has_flag(args: Sequence[str], *names: str) -> bool:
    for arg in args:
        for name in names:
            if arg == name or arg.startswith(f"{name}="):
                return True
    return False


__all__ = ["Opa"]
