"""
Command line entry point.

    sudo app-datasets [options] <app_name> [child1 child2 ...]
"""
import argparse
import asyncio
import sys
from pathlib import Path
from typing import Callable, Optional, Sequence

from . import __version__
from .config import AppDatasetsConfig, CONFIG_FILE_NAME
from .provisioning.core.entities.run_context import RunContext
from .provisioning.core.exceptions import (
    EnvironmentCheckError,
    MissingArgumentError,
    ProvisioningError,
    ValidationError,
)
from .provisioning.factories.service_factory import ServiceFactory
from .provisioning.infrastructure.confirmation import AutoConfirm
from .provisioning.infrastructure.logging.structured_logger import LOG_FORMATS

EXIT_SUCCESS = 0
EXIT_FAILURE = 1

EPILOG = f"""\
examples:
  sudo app-datasets immich config data upload
      creates (or ensures) Pool/apps-config/immich and its config, data
      and upload children, and remembers the pool and root for future runs.
  sudo app-datasets --force-acl immich config data upload
      re-applies ACLs and ownership to datasets that already exist.
  sudo app-datasets --encrypt immich config data upload
      Pool/apps-config/immich becomes an encryption root with its own key;
      children inherit that encryption.

Pool and root are remembered in {CONFIG_FILE_NAME} next to the tool.
"""


class _ArgumentParser(argparse.ArgumentParser):
    """Usage errors exit with status 1 like every other failure."""
    
    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(EXIT_FAILURE, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="app-datasets",
        description=(
            "Create a TrueNAS SCALE app dataset plus optional children under the Apps preset "
            "and apply NFSv4 ACLs and apps:apps ownership for host-path apps."
        ),
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("app_name", nargs="?", help="app dataset name, e.g. immich")
    parser.add_argument("children", nargs="*", help="optional child dataset names, e.g. config data")
    parser.add_argument("-p", "--pool", help="ZFS pool (overrides default / config file)")
    parser.add_argument("-r", "--root", help="parent dataset root, e.g. apps-config")
    parser.add_argument("-f", "--force-acl", action="store_true",
                        help="apply ACLs and ownership even if datasets already exist")
    parser.add_argument("-e", "--encrypt", action="store_true",
                        help="create <app_name> as a new AES-256-GCM encryption root with an "
                             "auto-generated key; children inherit encryption")
    parser.add_argument("--dry-run", action="store_true", help="show what would happen, make no changes")
    parser.add_argument("--config", type=Path, help=f"config file (default: {CONFIG_FILE_NAME} next to the tool)")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], type=str.upper)
    parser.add_argument("--log-format", choices=LOG_FORMATS)
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def default_factory(config: AppDatasetsConfig, dry_run: bool) -> ServiceFactory:
    if dry_run:
        return ServiceFactory(config, confirmation=AutoConfirm())
    return ServiceFactory(config)


def print_summary(context: RunContext, config: AppDatasetsConfig, out=None) -> None:
    out = out or sys.stdout
    request = context.request
    runtime = config.runtime
    lines = [
        f"Pool             : {request.pool}",
        f"Root dataset     : {request.root}",
        f"Parent dataset   : {request.app_path.mount_path(runtime.mount_prefix)}",
    ]
    if request.children:
        lines.append(f"Child datasets   : {', '.join(request.children)}")
    lines += [
        f"Encrypted root?  : {str(request.encrypt).lower()}",
        f"Ownership        : {runtime.apps_user}:{runtime.apps_group}",
        f"(Tip: save defaults in {config.config_path} or use -p/-r flags to configure.)",
    ]
    print("\n".join(lines), file=out)


def main(argv: Optional[Sequence[str]] = None,
         factory: Callable[[AppDatasetsConfig, bool], ServiceFactory] = default_factory,
         config: Optional[AppDatasetsConfig] = None) -> int:
    parser = build_parser()
    args = parser.parse_intermixed_args(argv)
    
    config = config or AppDatasetsConfig(config_path=args.config)
    if args.log_level:
        config.runtime.log_level = args.log_level
    if args.log_format:
        config.runtime.log_format = args.log_format
    
    services = factory(config, args.dry_run)
    logger = services.get_logger("cli")
    
    try:
        services.create_environment_check().verify()
        
        logger.info(f"Loading configuration from {config.config_path}...")
        config.load()
        for warning in config.warnings:
            logger.warning(warning)
        config.apply_overrides(pool=args.pool, root=args.root)
        logger.debug("Resolved configuration", config.get_summary())
        
        request = services.create_input_validator().build_request(
            pool=config.storage.pool,
            root=config.storage.root,
            app_name=args.app_name,
            children=args.children,
            encrypt=args.encrypt,
            force_acl=args.force_acl,
            dry_run=args.dry_run,
        )
    except EnvironmentCheckError as e:
        logger.error(str(e))
        return EXIT_FAILURE
    except ValidationError as e:
        logger.error(str(e))
        if isinstance(e, MissingArgumentError):
            parser.print_usage(sys.stderr)
        return EXIT_FAILURE
    
    try:
        context = asyncio.run(services.create_workflow().run(request))
    except ProvisioningError:
        # Already reported by the workflow's cleanup reporter.
        return EXIT_FAILURE
    except KeyboardInterrupt:
        logger.error("Interrupted.")
        return EXIT_FAILURE
    except Exception:
        logger.exception("Unexpected error during provisioning.")
        return EXIT_FAILURE
    
    print(file=sys.stdout)
    if request.dry_run:
        logger.success("DRY RUN COMPLETE – no changes were made.")
    else:
        logger.success("All datasets created and configured.")
    print_summary(context, config)
    return EXIT_SUCCESS


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
