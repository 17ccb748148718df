"""GitHub access provisioner entry point.

Examples:
    github-access-provisioner teams --input access.csv --dry-run
    github-access-provisioner grants --input access.csv --mode team

"""

import argparse
import sys
import traceback
from pathlib import Path
from typing import Optional, Sequence

from github_access_provisioner.adapters.config import ConfigLoader, load_config
from github_access_provisioner.adapters.csv_entries import CsvEntriesReader
from github_access_provisioner.adapters.github import GitHubClient
from github_access_provisioner.app import AccessProvisioner
from github_access_provisioner.domain.entities import GrantMode, RunSummary
from github_access_provisioner.ports.errors import (
    ConfigLoaderError,
    InputError,
    PrerequisiteError,
)
from github_access_provisioner.utils import ProvisionerLogger

EXIT_OK = 0
EXIT_FAILURE = 1


def build_parser() -> argparse.ArgumentParser:
    """Return the configured ``argparse`` parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="github-access-provisioner",
        description="Provision GitHub teams and repository access from a CSV file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    grants_parser = subparsers.add_parser(
        "grants",
        help="Resolve and apply repository permissions for teams or users.",
    )
    grants_parser.add_argument(
        "--mode",
        choices=[mode.value for mode in GrantMode],
        default=None,
        help="Grant target: `team` (default) or `direct` collaborators.",
    )

    teams_parser = subparsers.add_parser(
        "teams",
        help="Create missing teams and add the listed users as members.",
    )

    for sub_parser in (grants_parser, teams_parser):
        sub_parser.add_argument(
            "--input",
            type=Path,
            default=None,
            help="CSV file with repository, user, role and team columns.",
        )
        sub_parser.add_argument(
            "--organization",
            default=None,
            help="GitHub organization (overrides GITHUB_ORGANIZATION).",
        )
        sub_parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Resolve and validate without changing anything on GitHub.",
        )
    return parser


def build_provisioner(
    config: ConfigLoader, args: argparse.Namespace, logger: ProvisionerLogger
) -> AccessProvisioner:
    """Wire the adapters into the provisioner, command line values taking precedence."""
    mode = getattr(args, "mode", None)
    directory = GitHubClient(
        token=config.github.token.get_secret_value(),
        logger=logger,
        api_url=str(config.github.api_url),
        timeout=config.github.request_timeout,
    )
    return AccessProvisioner(
        directory=directory,
        entries_reader=CsvEntriesReader(),
        logger=logger,
        organization=args.organization or config.github.organization,
        mode=GrantMode(mode) if mode else config.provisioner.grant_mode,
        dry_run=args.dry_run or config.provisioner.dry_run,
        num_threads=config.provisioner.num_threads,
        team_privacy=config.provisioner.team_privacy,
        team_membership_role=config.provisioner.team_membership_role,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run one provisioning stage and return the process exit status."""
    args = build_parser().parse_args(argv)

    # Start up issues: configuration
    try:
        config = load_config()
    except ConfigLoaderError as err:
        print(err, file=sys.stderr)
        return EXIT_FAILURE

    logger = ProvisionerLogger(
        "github-access-provisioner",
        level=config.provisioner.log_level,
        json_logging=config.provisioner.json_logging,
    )

    input_file = args.input or config.provisioner.input_file
    if input_file is None:
        logger.error(
            "[PROVISIONER] No input file given (--input or PROVISIONER_INPUT_FILE)."
        )
        return EXIT_FAILURE

    provisioner = build_provisioner(config, args, logger)
    if provisioner.dry_run:
        logger.info("[DRY-RUN] Dry run enabled, GitHub will not be modified.")

    try:
        provisioner.check_prerequisites()
        if args.command == "teams":
            summary: RunSummary = provisioner.provision_teams(input_file)
        else:
            summary = provisioner.provision_grants(input_file)
    except (PrerequisiteError, InputError) as err:
        logger.error(
            "[PROVISIONER] Run aborted before processing.",
            {"error": str(err), "type": type(err).__name__},
        )
        return EXIT_FAILURE

    return EXIT_OK if summary.success else EXIT_FAILURE


def run() -> None:
    """Console script entry point."""
    try:
        sys.exit(main())
    except Exception:
        traceback.print_exc()
        sys.exit(EXIT_FAILURE)


if __name__ == "__main__":
    run()
