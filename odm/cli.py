"""CLI entrypoints for odm commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Sequence

from .errors import OdmError
from .logging import configure_logging
from .orchestrator import Orchestrator
from .project.constants import DEFAULT_SOURCE_DIR


_VERBOSE_DESTS = ("verbose", "command_verbose", "resource_verbose")


def _add_verbose_option(parser: argparse.ArgumentParser, *, level: int = 0) -> None:
    # One dest per parser level; subparser results replace same-named attributes.
    kwargs: dict[str, object] = {
        "action": "count",
        "dest": _VERBOSE_DESTS[level],
        "help": "Increase log verbosity; repeat for more detail (-vv).",
    }
    if level:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = 0
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _verbosity(args: argparse.Namespace) -> int:
    return sum(int(getattr(args, dest, 0) or 0) for dest in _VERBOSE_DESTS)


def _add_no_update_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--no-update",
        action="store_true",
        help="Use the dependencies from the last update instead of refreshing them.",
    )


def _add_passthrough_args(parser: argparse.ArgumentParser, tool_command: str) -> None:
    parser.add_argument(
        "opa_args",
        nargs=argparse.REMAINDER,
        help=f"Flags passed through to 'opa {tool_command}' (place them after --).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="odm",
        description="OPA Dependency Manager: fetch, namespace and bundle policy dependencies.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "-C",
        "--project-dir",
        default=".",
        help="Directory containing opa.project (defaults to current directory).",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write log records to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init", help="Initialize a new OPA project.")
    _add_verbose_option(init_parser, level=1)
    init_parser.add_argument(
        "name",
        nargs="?",
        default="",
        help="Project name; when given the project is created in ./<name>.",
    )
    source_group = init_parser.add_mutually_exclusive_group()
    source_group.add_argument(
        "-s",
        "--source",
        default=DEFAULT_SOURCE_DIR,
        help="Source directory for the project.",
    )
    source_group.add_argument(
        "--no-source",
        action="store_true",
        help="Don't assign a source directory for the project.",
    )

    depend_parser = subparsers.add_parser(
        "depend",
        help="Add a dependency to the project.",
        description=(
            "Add a dependency to the project. Supported locations: git+http://..., "
            "git+https://..., git+ssh://... (optionally suffixed with #<tag>), "
            "file://path/to/dir, file:/../relative/dir, or a library name "
            "provided by a declared repository."
        ),
    )
    _add_verbose_option(depend_parser, level=1)
    depend_parser.add_argument("name", help="Name of the dependency.")
    depend_parser.add_argument("location", help="Location of the dependency.")
    depend_parser.add_argument(
        "-n",
        "--namespaced",
        action="store_true",
        help="Use the dependency name as namespace. Ignored if --namespace is set.",
    )
    depend_parser.add_argument(
        "-N",
        "--namespace",
        default="",
        help="Namespace of the dependency.",
    )

    update_parser = subparsers.add_parser("update", help="Update OPA project dependencies.")
    _add_verbose_option(update_parser, level=1)

    eval_parser = subparsers.add_parser(
        "eval",
        help="Evaluate a Rego query using OPA with project dependencies.",
        description=(
            "Runs 'opa eval' with every project and dependency source directory "
            "as data, e.g. 'odm eval -- \"data.main.allow\"'."
        ),
    )
    _add_verbose_option(eval_parser, level=1)
    _add_no_update_option(eval_parser)
    _add_passthrough_args(eval_parser, "eval")

    test_parser = subparsers.add_parser("test", help="Run OPA tests.")
    _add_verbose_option(test_parser, level=1)
    _add_no_update_option(test_parser)
    test_parser.add_argument(
        "--include-deps",
        action="store_true",
        help="Include dependency tests.",
    )
    _add_passthrough_args(test_parser, "test")

    build_parser = subparsers.add_parser("build", help="Build an OPA bundle.")
    _add_verbose_option(build_parser, level=1)
    _add_no_update_option(build_parser)
    _add_passthrough_args(build_parser, "build")

    list_parser = subparsers.add_parser("list", help="List project resources.")
    _add_verbose_option(list_parser, level=1)
    list_subparsers = list_parser.add_subparsers(dest="resource", required=True)

    source_parser = list_subparsers.add_parser("source", help="List OPA project source folders.")
    _add_verbose_option(source_parser, level=2)
    _add_no_update_option(source_parser)
    source_parser.add_argument(
        "-t",
        "--include-test-dirs",
        action="store_true",
        help="Include test directories in the list.",
    )
    source_parser.add_argument(
        "--include-dep-tests",
        action="store_true",
        help="Include dependency tests.",
    )

    deps_parser = list_subparsers.add_parser(
        "dependencies",
        aliases=["deps"],
        help="Print the resolved dependency tree.",
    )
    _add_verbose_option(deps_parser, level=2)
    _add_no_update_option(deps_parser)

    return parser


def _passthrough(values: Sequence[str] | None) -> List[str]:
    args = list(values or [])
    if args and args[0] == "--":
        args = args[1:]
    return args


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for odm commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbosity=_verbosity(args), log_file=args.log_file)

    orchestrator = Orchestrator()
    project_dir = Path(args.project_dir)

    try:
        _dispatch(orchestrator, project_dir, args)
    except OdmError as exc:
        parser.exit(1, f"{exc}\n")
    except OSError as exc:  # pragma: no cover
        parser.exit(1, f"odm {args.command} failed: {exc}\nRun with --verbose for more details.\n")


def _dispatch(orchestrator: Orchestrator, project_dir: Path, args: argparse.Namespace) -> None:
    update = not getattr(args, "no_update", False)

    if args.command == "init":
        target = project_dir / args.name if args.name else project_dir
        source_dir = None if args.no_source else args.source
        manifest_file = orchestrator.run_init(target, name=args.name, source_dir=source_dir)
        print(f"Project created at {_relativize(manifest_file)}")
    elif args.command == "depend":
        namespace = args.namespace or (args.name if args.namespaced else "")
        orchestrator.run_depend(args.name, args.location, namespace=namespace, path=project_dir)
    elif args.command == "update":
        orchestrator.run_update(project_dir)
    elif args.command == "eval":
        print(orchestrator.run_eval(project_dir, _passthrough(args.opa_args), update=update))
    elif args.command == "test":
        print(
            orchestrator.run_test(
                project_dir,
                _passthrough(args.opa_args),
                include_dependencies=args.include_deps,
                update=update,
            )
        )
    elif args.command == "build":
        outcome = orchestrator.run_build(project_dir, _passthrough(args.opa_args), update=update)
        if outcome.output.strip():
            print(outcome.output)
        print(f"Bundle written to {_relativize(outcome.bundle_path)}")
    elif args.command == "list":
        if args.resource == "source":
            locations = orchestrator.list_sources(
                project_dir,
                include_test_dirs=args.include_test_dirs,
                include_dependency_tests=args.include_dep_tests,
                update=update,
            )
            print("\n".join(str(location) for location in locations))
        else:
            print(orchestrator.dependency_tree(project_dir, update=update))
    else:  # pragma: no cover - argparse enforces choices
        raise OdmError("Unknown command")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
