#!/usr/bin/env python3
"""
Command-line interface for sitepipe.
"""

import argparse
import os
import sys
import time
from typing import List, Optional

from . import __version__
from .core import Site
from .errors import SitepipeError
from .logger import setup_logging
from .settings import SiteSettings

TASKS = ['lint', 'build', 'clean', 'watch', 'develop', 'serve', 'report']


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='sitepipe',
        description='sitepipe - static site build tasks',
        epilog="Information about customization is in the README.",
    )
    parser.add_argument('task', nargs='?', choices=TASKS,
                        help='Task to run: ' + ', '.join(TASKS))
    parser.add_argument('--config', type=str,
                        help='Configuration file (default: sitepipe.yml, sitepipe.yaml, sitepipe.json or config.json)')
    parser.add_argument('--production', action='store_true', default=None,
                        help='Does a production build with compressed output.')
    parser.add_argument('--target', type=str,
                        help='Override the target directory')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Show debug output on the console')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.task:
        parser.print_help()
        return

    try:
        settings_loader = SiteSettings(config_file=args.config)
        settings_loader.load_settings()

        args_dict = {k: v for k, v in vars(args).items() if v is not None}
        final_settings = settings_loader.merge_with_args(args_dict)

        log_dir = final_settings.get('log_dir')
        logger = setup_logging(args.verbose, settings_loader.resolve(log_dir) if log_dir else None)
        if settings_loader.config_file_path:
            logger.info(f"Loaded configuration from: {os.path.relpath(settings_loader.config_file_path)}")

        start_time = time.time()
        site = Site(final_settings, settings_loader.resolve)
        ok = site.run(args.task)
        logger.info(f"'{args.task}' completed in {time.time() - start_time:.6f} seconds.")
    except SitepipeError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if not ok:
        sys.exit(1)


if __name__ == '__main__':
    main()
