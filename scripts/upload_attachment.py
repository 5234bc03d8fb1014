#!/usr/bin/env python3
"""Upload a file to Yep storage from the command line.

Fetches signed upload credentials for the chosen scope, then posts the file
straight to the storage endpoint.

Usage:
    export YEP_STORAGE_API_TOKEN=...
    python scripts/upload_attachment.py photo.png
    python scripts/upload_attachment.py avatar.jpg --scope public --mime-type image/jpeg
"""

import argparse
import asyncio
import mimetypes
import os
import sys

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

from services.storage.app.config import get_settings  # noqa: E402
from services.storage.app.core.exceptions import StorageError  # noqa: E402
from services.storage.app.core.schemas import CredentialScope, UploadSource  # noqa: E402
from services.storage.app.service import StorageService  # noqa: E402
from shared.utils.logging import configure_logging  # noqa: E402


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Upload a file to Yep storage")
    parser.add_argument("path", help="File to upload")
    parser.add_argument(
        "--scope",
        choices=[scope.value for scope in CredentialScope],
        default=CredentialScope.PRIVATE.value,
        help="private for attachments, public for avatars",
    )
    parser.add_argument(
        "--mime-type",
        help="Content type of the file (guessed from the name if omitted)",
    )
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> int:
    settings = get_settings()
    if not settings.api_token:
        print("YEP_STORAGE_API_TOKEN is not set", file=sys.stderr)
        return 2

    mime_type = args.mime_type or mimetypes.guess_type(args.path)[0] or "application/octet-stream"

    async with StorageService.from_settings(settings) as service:
        try:
            outcome = await service.upload(
                CredentialScope(args.scope),
                UploadSource.from_path(args.path),
                mime_type,
            )
        except StorageError as e:
            print(f"Could not get upload credentials: {e.message}", file=sys.stderr)
            return 2

    if outcome.success:
        print(f"Uploaded {args.path} ({outcome.status_code})")
        return 0

    print(f"Upload failed: {outcome.error}", file=sys.stderr)
    return 1


def main() -> None:
    args = parse_args()
    settings = get_settings()
    configure_logging(settings.service_name, settings.log_level, settings.log_json)
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
