"""
Command-line interface for listing iCloud Photos media.
"""
import argparse
import json
import logging
import sys
from datetime import date, datetime
from pathlib import Path
from typing import Any, List, Optional

from dotenv import load_dotenv

from icloud_media.adapter import MediaAdapter
from icloud_media.config import AdapterConfig, ListParameters
from icloud_media.exceptions import MediaAdapterError, MfaRequiredError
from icloud_media.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def _json_default(value: Any) -> Any:
    """Serialize values json cannot handle natively (dates, pyicloud assets)."""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, bytes):
        return value.decode('utf-8', errors='replace')
    master = getattr(value, '_master_record', None)
    if master is not None:
        return {
            'masterRecord': master,
            'assetRecord': getattr(value, '_asset_record', None),
        }
    return str(value)


def load_config(config_path: Optional[str]) -> AdapterConfig:
    """Load the YAML config if given (or if ./config.yaml exists), else env-only defaults."""
    if config_path:
        return AdapterConfig.from_yaml(config_path)
    if Path('config.yaml').exists():
        return AdapterConfig.from_yaml('config.yaml')
    return AdapterConfig.from_dict(AdapterConfig._apply_env_overrides({}))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='icloud-media',
        description='List media from iCloud Photos'
    )
    parser.add_argument(
        'operation',
        nargs='?',
        default=None,
        help='Operation to run (default: list)'
    )
    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help='Path to configuration file (default: config.yaml if present)'
    )
    parser.add_argument(
        '--limit',
        type=int,
        default=None,
        help='Maximum number of media items to return (0 = all available)'
    )
    parser.add_argument(
        '--media-type',
        choices=['all', 'photo', 'video'],
        default=None,
        help='Only return photos or videos (default: all)'
    )
    parser.add_argument(
        '--include-raw',
        action='store_true',
        default=None,
        help='Include the unmodified upstream record for each item'
    )
    parser.add_argument(
        '--mfa-code',
        type=str,
        default=None,
        help='Six-digit MFA code for Apple ID authentication'
    )
    parser.add_argument(
        '--log-level',
        type=str,
        default=None,
        help='Logging level (default: from config, INFO)'
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    load_dotenv()
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    setup_logging(
        log_file=config.logging.file,
        level=args.log_level or config.logging.level,
        enable_json=config.logging.enable_json,
        enable_rotation=config.logging.enable_rotation,
        max_bytes=config.logging.max_bytes,
        backup_count=config.logging.backup_count,
    )

    if args.mfa_code:
        config.icloud.mfa_code = args.mfa_code

    listing = config.listing
    try:
        parameters = ListParameters(
            operation=args.operation or listing.operation,
            limit=args.limit if args.limit is not None else listing.limit,
            media_type=args.media_type or listing.media_type,
            include_raw=listing.include_raw if args.include_raw is None else args.include_raw,
        )
    except ValueError as e:
        logger.error(f"Invalid arguments: {e}")
        return 2

    adapter = MediaAdapter(ready_timeout=config.icloud.auth_timeout)
    try:
        assets = adapter.run_sync(config.icloud.credentials(), parameters)
    except MfaRequiredError as e:
        logger.error(str(e))
        logger.error("Re-run with --mfa-code CODE (or set ICLOUD_2FA_CODE), or use ICLOUD_COOKIE.")
        return 1
    except MediaAdapterError as e:
        logger.error(f"Listing failed: {e}")
        return 1

    json.dump(assets, sys.stdout, indent=2, default=_json_default)
    sys.stdout.write('\n')
    return 0


if __name__ == '__main__':
    sys.exit(main())
