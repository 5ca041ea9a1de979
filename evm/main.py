from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Optional

from .config_store import CURRENT, PATH, RECIPES_URL
from .context import Evm
from .errors import ConfigError, EvmError, ShimError
from .lib.git import Git
from .logging_utils import configure_logging
from .package import Package, deactivate
from .reconcile import inspect_activation
from .shims import check_shim_target

logger = logging.getLogger(__name__)

# Keys `evm config` may change; `current` only moves through use/disuse.
SETTABLE_KEYS = (PATH, RECIPES_URL)


def cmd_install(ctx: Evm, args: argparse.Namespace) -> int:
    pkg = Package.find(args.name, ctx)

    if pkg.is_installed():
        if args.skip:
            logger.info("%s already installed, skipping", pkg)
            print(f"{pkg} is already installed")
            return 0
        if not args.force:
            raise EvmError(f"{pkg} is already installed (use --force to reinstall)")
        if not args.dry_run:
            pkg.uninstall()

    if args.dry_run:
        # Nothing on disk changes; the builder only logs its commands.
        logger.info("Would install %s into %s", pkg, pkg.path)
        ctx.builder_factory(pkg.recipe, pkg.path, ctx.tmp_path).build()
        if args.use:
            logger.info("Would activate %s", pkg)
        print(f"Would install {pkg}")
        return 0

    ctx.installations_path.mkdir(parents=True, exist_ok=True)
    pkg.install()

    if args.use:
        if not pkg.is_installed():
            raise EvmError(f"{pkg} built but {pkg.bin} is missing; not activating")
        pkg.use()
    print(f"Installed {pkg}")
    return 0


def cmd_uninstall(ctx: Evm, args: argparse.Namespace) -> int:
    pkg = Package.find(args.name, ctx)
    if not pkg.is_installed() and not os.path.lexists(pkg.path):
        raise EvmError(f"{pkg} is not installed")
    pkg.uninstall()
    print(f"Uninstalled {pkg}")
    return 0


def cmd_use(ctx: Evm, args: argparse.Namespace) -> int:
    pkg = Package.find(args.name, ctx)
    if not pkg.is_installed():
        raise EvmError(f"{pkg} is not installed")
    pkg.use()
    print(f"Using {pkg}")
    return 0


def cmd_disuse(ctx: Evm, args: argparse.Namespace) -> int:
    deactivate(ctx)
    print("No package is active")
    return 0


def cmd_list(ctx: Evm, args: argparse.Namespace) -> int:
    current = ctx.config.get(CURRENT)
    for pkg in Package.all(ctx):
        marker = "*" if pkg.name == current else " "
        installed = " [I]" if pkg.is_installed() else ""
        print(f"{marker} {pkg.name}{installed}")
    return 0


def cmd_bin(ctx: Evm, args: argparse.Namespace) -> int:
    if args.name:
        pkg = Package.find(args.name, ctx)
    else:
        current = Package.current(ctx)
        if current is None:
            raise EvmError("No package is active")
        pkg = current
    print(pkg.bin)
    return 0


def cmd_update(ctx: Evm, args: argparse.Namespace) -> int:
    git = Git(ctx.settings.recipes_path, dry_run=args.dry_run)
    if git.exists():
        git.pull()
    else:
        url = ctx.settings.recipes_url or ctx.config.get(RECIPES_URL)
        if not url:
            raise ConfigError("No recipe repository configured (set EVM_RECIPES_URL or `evm config recipes_url URL`)")
        git.clone(url)
    print(f"Recipes updated in {ctx.settings.recipes_path}")
    return 0


def cmd_config(ctx: Evm, args: argparse.Namespace) -> int:
    if args.key is None:
        for key, value in sorted(ctx.config.items().items()):
            print(f"{key}: {value}")
        return 0

    if args.value is None:
        print(ctx.config.get(args.key) or "")
        return 0

    if args.key not in SETTABLE_KEYS:
        raise ConfigError(f"Unknown config key: {args.key} (expected one of {', '.join(SETTABLE_KEYS)})")
    if args.key == PATH and args.value:
        try:
            check_shim_target(args.value)
        except ShimError as e:
            raise ConfigError(f"Installation path {args.value} cannot appear in a shim") from e
    ctx.config.set(args.key, args.value or None)
    return 0


def cmd_status(ctx: Evm, args: argparse.Namespace) -> int:
    report = inspect_activation(ctx)
    print(f"current: {report.current or '-'}")
    for shim in (report.primary, report.managed):
        if not shim.present:
            state = "absent"
        elif shim.foreign:
            state = "not managed by evm"
        else:
            state = f"-> {shim.target}"
        print(f"{shim.path}: {state}")
    for issue in report.issues:
        print(f"WARNING: {issue}")
    return 0 if report.ok else 1


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="evm", description="Emacs version manager")
    p.add_argument("--log", default=None, help="Log file path (default: $EVM_HOME/evm.log)")
    p.add_argument("-v", "--verbose", action="store_true", help="Also log to the console, including debug output")
    p.add_argument("--dry-run", action="store_true", help="Log build commands without running them")

    sub = p.add_subparsers(dest="subcmd", required=True)

    sp = sub.add_parser("install", help="Build and install a package")
    sp.add_argument("name")
    sp.add_argument("--force", action="store_true", help="Reinstall if already installed")
    sp.add_argument("--use", action="store_true", help="Activate after installing")
    sp.add_argument("--skip", action="store_true", help="Do nothing if already installed")
    sp.set_defaults(func=cmd_install)

    sp = sub.add_parser("uninstall", help="Remove an installed package")
    sp.add_argument("name")
    sp.set_defaults(func=cmd_uninstall)

    sp = sub.add_parser("use", help="Activate an installed package")
    sp.add_argument("name")
    sp.set_defaults(func=cmd_use)

    sp = sub.add_parser("disuse", help="Deactivate the current package")
    sp.set_defaults(func=cmd_disuse)

    sp = sub.add_parser("list", help="List known packages")
    sp.set_defaults(func=cmd_list)

    sp = sub.add_parser("bin", help="Print the binary path of a package (default: current)")
    sp.add_argument("name", nargs="?", default=None)
    sp.set_defaults(func=cmd_bin)

    sp = sub.add_parser("update", help="Fetch or update the recipe repository")
    sp.set_defaults(func=cmd_update)

    sp = sub.add_parser("config", help="Show or set configuration")
    sp.add_argument("key", nargs="?", default=None)
    sp.add_argument("value", nargs="?", default=None)
    sp.set_defaults(func=cmd_config)

    sp = sub.add_parser("status", help="Check shims against the current package")
    sp.set_defaults(func=cmd_status)

    return p


def main(argv: Optional[list[str]] = None, *, ctx: Optional[Evm] = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)

    if ctx is None:
        ctx = Evm.default(dry_run=args.dry_run)

    configure_logging(
        log_path=args.log or str(ctx.settings.log_path),
        level=logging.DEBUG if args.verbose else logging.INFO,
        also_console=args.verbose,
    )

    try:
        return int(args.func(ctx, args))
    except EvmError as e:
        logger.error("%s failed: %s", args.subcmd, e)
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        logger.exception("%s failed", args.subcmd)
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
