#!/usr/bin/env python3
# main.py
"""
git-slack-hook - post-receive hook that announces pushes in a Slack channel.

Install by linking (or calling) this script from hooks/post-receive of a bare
repository. git writes one "<old-rev> <new-rev> <ref-name>" line per updated
ref to stdin; each line becomes one Slack message.
"""

import argparse
import logging
import sys
from enum import Enum
from typing import IO, List, Optional

from config import HELP_TEXT, ConfigError, HookConfig, load_config
from git_query import GitQuery
from logging_config import setup_logging
from models.hook_context import HookContext
from models.ref_update import RefKind, RefUpdate
from notifications import SlackNotifier
from ref_change import RefChange
from utils import GitCommandError

__version__ = "1.0.0"

logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    SENT = "sent"
    PRINTED = "printed"
    SUPPRESSED = "suppressed"
    SKIPPED = "skipped"
    FAILED = "failed"


def process_line(line: str, git, config: HookConfig, context: HookContext, notifier: SlackNotifier) -> Outcome:
    try:
        update = RefUpdate.from_line(line)
    except ValueError as e:
        logger.error(f"*** Ignoring malformed input line: {e}")
        return Outcome.FAILED

    change = RefChange(update, git, config, context)
    try:
        change.prepare()
        if change.suppressed:
            for diagnostic in change.diagnostic():
                logger.warning(diagnostic, extra={"ref_name": update.ref_name})
            return Outcome.SUPPRESSED if change.kind == RefKind.TRACKING_BRANCH else Outcome.SKIPPED
        message = change.get_message()
    except GitCommandError as e:
        logger.error(f"*** Could not describe update to {update.ref_name}: {e}",
                     extra={"ref_name": update.ref_name})
        return Outcome.FAILED

    notifier.notify(message, channel=change.channel)
    return Outcome.PRINTED if notifier.debug else Outcome.SENT


def process_input(stream: IO[str], git, config: HookConfig, context: HookContext,
                  notifier: SlackNotifier) -> List[Outcome]:
    """
    Handle every ref update on the stream, one at a time, in input order.
    """
    outcomes = []
    for line in stream:
        if not line.strip():
            continue
        outcome = process_line(line, git, config, context, notifier)
        logger.debug(f"{line.strip()} -> {outcome.value}")
        outcomes.append(outcome)
    return outcomes


def exit_status(outcomes: List[Outcome]) -> int:
    return 1 if Outcome.FAILED in outcomes else 0


def main(argv: Optional[List[str]] = None, stdin: Optional[IO[str]] = None,
         git: Optional[GitQuery] = None, context: Optional[HookContext] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    p = argparse.ArgumentParser(prog="git-slack-hook", description="Post pushed ref updates to Slack")
    p.add_argument("--debug", action="store_true", help="print the webhook request instead of sending it")
    p.add_argument("--config", help="path to a YAML settings file")
    p.add_argument("-v", "--version", action="version", version=__version__)
    args = p.parse_args(argv)

    setup_logging(args.debug)

    context = context or HookContext.from_environment()
    git = git or GitQuery()

    try:
        config = load_config(git, context.repo_name, config_path=args.config)
    except (ConfigError, GitCommandError) as e:
        print(f"git-slack-hook: {e}", file=sys.stderr)
        print(HELP_TEXT, file=sys.stderr)
        return 1

    debug = args.debug or config.debug
    if debug or config.log_db:
        setup_logging(debug, config.log_db)

    notifier = SlackNotifier(config, debug=debug)
    outcomes = process_input(stdin or sys.stdin, git, config, context, notifier)
    return exit_status(outcomes)


def cli():
    sys.exit(main())


if __name__ == "__main__":
    cli()
