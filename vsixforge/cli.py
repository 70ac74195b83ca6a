# vsixforge/cli.py
from __future__ import annotations

import argparse
import asyncio
import logging
import re
import sys
from collections.abc import Awaitable, Sequence
from typing import Any

from vsixforge import __version__
from vsixforge.core.errors import VsixForgeError
from vsixforge.core.logging import clearLogContext, configureLogging
from vsixforge.manifest.model import PackageOptions
from vsixforge.package import ls, packageCommand

logger = logging.getLogger(__name__)

__all__ = ["buildParser", "main"]


_CANCELLED_RE = re.compile(r"^cancell?ed$", re.IGNORECASE)



def buildParser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vsixforge",
        usage="%(prog)s <command> [options]",
        description="Package an editor extension into a .vsix archive.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True, metavar="<command>")

    lsParser = subparsers.add_parser("ls", help="Lists all the files that will be published")
    lsParser.add_argument("--yarn", action="store_true", help="Use yarn instead of npm")
    lsParser.add_argument(
        "--packagedDependencies",
        action="append",
        metavar="NAME",
        help="Select packages that should be published only (includes dependencies)",
    )
    lsParser.add_argument("--ignoreFile", metavar="PATH", help="Indicate alternative .vscodeignore")

    packageParser = subparsers.add_parser("package", help="Packages an extension")
    packageParser.add_argument("-o", "--out", metavar="PATH", help="Output .vsix extension file to PATH location")
    packageParser.add_argument(
        "--baseContentUrl", metavar="URL", help="Prepend all relative links in README.md with this url."
    )
    packageParser.add_argument(
        "--baseImagesUrl", metavar="URL", help="Prepend all relative image links in README.md with this url."
    )
    packageParser.add_argument("--yarn", action="store_true", help="Use yarn instead of npm")
    packageParser.add_argument("--ignoreFile", metavar="PATH", help="Indicate alternative .vscodeignore")
    packageParser.add_argument(
        "--packagedDependencies",
        action="append",
        metavar="NAME",
        help="Select packages that should be published only (includes dependencies)",
    )

    return parser



def _task(args: argparse.Namespace) -> Awaitable[Any]:
    if args.command == "ls":
        return ls(None, args.yarn, args.packagedDependencies, args.ignoreFile)

    options = PackageOptions(
        packagePath=args.out,
        baseContentUrl=args.baseContentUrl,
        baseImagesUrl=args.baseImagesUrl,
        useYarn=args.yarn,
        dependencyEntryPoints=args.packagedDependencies,
        ignoreFile=args.ignoreFile,
    )
    return packageCommand(options)



def _fatal(err: BaseException) -> int:
    message = str(err)
    if _CANCELLED_RE.match(message):
        return 1
    logger.error("%s", message)
    return 1



def main(argv: Sequence[str] | None = None) -> int:
    args = buildParser().parse_args(argv)
    configureLogging(devMode=True if args.verbose else None)

    try:
        asyncio.run(_task(args))
    except VsixForgeError as err:
        return _fatal(err)
    except KeyboardInterrupt:
        return 130
    finally:
        clearLogContext()
    return 0



if __name__ == "__main__":
    sys.exit(main())
