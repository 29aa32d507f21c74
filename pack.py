import argparse
import json
import os
import subprocess
import sys
import traceback

from builder import build, describe
from minipack.config import BUILD_DIR, load_config
from minipack.errors import BundleError
from minipack.log import debug_log, is_verbose, log, set_verbose


def resolve_settings(args):
    """Merge minipack.json settings with command line flags."""
    config = load_config(getattr(args, "config", None))
    settings = config.merged(
        entry=getattr(args, "entry", None),
        output=getattr(args, "output", None),
        banner=False if getattr(args, "no_banner", False) else None,
    )
    if settings.entry is None:
        raise BundleError(
            "No entry module given",
            suggestion="Pass an entry file or set \"entry\" in minipack.json",
        )
    debug_log(f"Settings: {settings.model_dump()}")
    return settings


def write_bundle(settings):
    """Build the bundle and write it; returns the target path or None for stdout."""
    output = build(settings.entry, banner=settings.banner)

    target = settings.output_path()
    if target == "-":
        sys.stdout.write(output)
        return None

    directory = os.path.dirname(target)
    if directory and not os.path.exists(directory):
        os.makedirs(directory)
    with open(target, "w", encoding="utf-8") as f:
        f.write(output)
    return target


def cmd_build(args):
    settings = resolve_settings(args)
    target = write_bundle(settings)
    if target is not None:
        log(f"Bundled {settings.entry} into {target}")


def cmd_run(args):
    settings = resolve_settings(args)
    if settings.output == "-":
        settings = settings.merged(output=os.path.join(BUILD_DIR, "bundle.py"))
    target = write_bundle(settings)
    return subprocess.call([sys.executable, target])


def cmd_graph(args):
    settings = resolve_settings(args)
    modules = describe(settings.entry)

    print("┌──────┬──────────────────────────────────────────┬──────────────┐")
    print("│ Id   │ Module                                   │ Dependencies │")
    print("├──────┼──────────────────────────────────────────┼──────────────┤")
    root = os.path.dirname(modules[0]["path"])
    for module in modules:
        name = os.path.relpath(module["path"], root)[-40:].ljust(40)
        deps = ", ".join(str(i) for i in module["mapping"].values())[:12].ljust(12)
        print(f"│ {str(module['id']).ljust(4)} │ {name} │ {deps} │")
    print("└──────┴──────────────────────────────────────────┴──────────────┘")

    if args.save_report:
        with open(args.save_report, "w", encoding="utf-8") as f:
            json.dump(modules, f, indent=2)
        log(f"📁 Report saved to {args.save_report}")


def cmd_init(args):
    log("Initializing project...")
    with open("main.py", "w", encoding="utf-8") as f:
        f.write('import { greet } from "./greet.py"\n\nprint(greet("minipack"))\n')
    with open("greet.py", "w", encoding="utf-8") as f:
        f.write('export def greet(name):\n    return f"Hello, {name}!"\n')
    with open("minipack.json", "w", encoding="utf-8") as f:
        json.dump({"entry": "main.py"}, f, indent=2)
    log("Created main.py, greet.py and minipack.json")


def parser():
    parser = argparse.ArgumentParser(
        prog="minipack",
        description="Bundle a Python entry module and everything it imports into one script",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable verbose output (sent to stderr)")
    parser.add_argument("--config", help="Read settings from this file instead of minipack.json")
    subparsers = parser.add_subparsers(dest="command")

    build_cmd = subparsers.add_parser("build", help="Bundle an entry module")
    build_cmd.add_argument("entry", nargs="?", help="Entry module (default: from minipack.json)")
    build_cmd.add_argument("-o", "--output", help="Output file, '-' for stdout (default: __minipack_build__/bundle.py)")
    build_cmd.add_argument("--no-banner", action="store_true", help="Omit the shebang and generated-file banner")

    run_cmd = subparsers.add_parser("run", help="Bundle an entry module and execute the bundle")
    run_cmd.add_argument("entry", nargs="?", help="Entry module (default: from minipack.json)")
    run_cmd.add_argument("-o", "--output", help="Where to write the bundle before running it")

    graph_cmd = subparsers.add_parser("graph", help="Show the dependency graph of an entry module")
    graph_cmd.add_argument("entry", nargs="?", help="Entry module (default: from minipack.json)")
    graph_cmd.add_argument("--save-report", help="Save the module records as JSON to file")

    subparsers.add_parser("init", help="Create an example project")
    return parser


def main(argv=None):
    arg_parser = parser()
    args = arg_parser.parse_args(argv)
    set_verbose(args.verbose)

    commands = {
        "build": cmd_build,
        "run": cmd_run,
        "graph": cmd_graph,
        "init": cmd_init,
    }
    command = commands.get(args.command)
    if command is None:
        arg_parser.print_help()
        return 0

    try:
        return command(args) or 0
    except BundleError as e:
        print(f"Error: Bundling Failed:\n{e}", file=sys.stderr)
        return 1
    except Exception as e:
        if is_verbose():
            traceback.print_exception(e)
        else:
            print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
