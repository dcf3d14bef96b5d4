# Copyright 2025-present CodeScribe Authors. All rights reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
CodeScribe - PR Documentation Generator

Main entry point, run by the GitHub Actions workflow on `issue_comment` events.
"""
import sys
import os
import argparse
from loguru import logger

from codescribe import config
from codescribe.agents.ai_gateway import AIGateway
from codescribe.core.generator import DocumentationGenerator
from codescribe.errors import CatastrophicError
from codescribe.tools.event import CommentEvent, load_event
from codescribe.tools.github_client import GitHubClient


def init_logger(log_dir: str = "logs", max_size: str = "10 MB", log_level: str = "INFO"):
    """Initialize logger with console and file output"""
    os.makedirs(log_dir, exist_ok=True)
    logger.remove()
    logger.add(
        sys.stderr,
        level=log_level,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}",
        colorize=True,
    )
    logger.add(
        f"{log_dir}/codescribe.{{time:YYYY-MM-DD}}.log",
        level="INFO",
        rotation=max_size,
        retention="7 days",
        compression="zip",
        enqueue=True,
        encoding="utf-8",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='CodeScribe - generate AsciiDoc documentation for merged pull requests',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Inside GitHub Actions (reads GITHUB_EVENT_NAME / GITHUB_EVENT_PATH)
  %(prog)s

  # Replay a saved event payload
  %(prog)s --event-path ./event.json --config ./conf/codescribe.conf

  # Manual run against a merged PR
  %(prog)s --pr 42 --comment "!doxai --scope include:src --lang ko"
        """
    )
    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help='Path to configuration file (default: conf/codescribe.conf)'
    )
    parser.add_argument(
        '--event-path',
        type=str,
        default=None,
        help='Path to the event payload JSON (default: GITHUB_EVENT_PATH)'
    )
    parser.add_argument(
        '--comment',
        type=str,
        default=None,
        help='Command comment for a manual run (requires --pr)'
    )
    parser.add_argument(
        '--pr',
        type=int,
        default=None,
        help='Pull request number for a manual run'
    )
    return parser


def main(argv=None) -> int:
    """Main entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if (args.comment is None) != (args.pr is None):
        parser.error('--comment and --pr must be given together')

    # Load configuration
    try:
        config.reload_config(args.config)
    except Exception as e:
        logger.error(f"Failed to load configuration: {e}")
        print(f"::error::Invalid configuration: {e}")
        return 1

    # Initialize logger
    init_logger(log_dir=config.LOG_DIR, log_level=config.LOG_LEVEL)
    logger.info("PR Documentation Generator starting...")

    try:
        if args.pr is not None:
            event = CommentEvent.manual(args.comment, args.pr)
        else:
            event = load_event(event_path=args.event_path)

        generator = DocumentationGenerator(GitHubClient(), AIGateway())
        report = generator.run(event)
    except CatastrophicError as e:
        logger.exception(f"Documentation generation failed: {e}")
        print(f"::error::Documentation generation failed: {e}")
        return 1
    except Exception as e:
        logger.exception(f"Execution failed: {e}")
        print(f"::error::Documentation generation failed: {e}")
        return 1

    logger.info(f"Run finished: {report.to_dict()}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
