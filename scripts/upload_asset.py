#!/usr/bin/env python3
"""
Upload a local file to COS through the storage adapter.

Handy for checking a bucket configuration before pointing the CMS at it:
the printed URL is exactly what the CMS would store.

Usage:
    python scripts/upload_asset.py photo.jpg
    python scripts/upload_asset.py photo.jpg --target-dir 2024/05

Requires:
    - .env file (or environment) with GHOST_STORAGE_ADAPTER_COS_* settings
"""

import asyncio
import mimetypes
import sys
from pathlib import Path

# Add project root to path so we can import our modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from cos_store.config.settings import CosSettings
from cos_store.core.exceptions import ConfigError, StorageError
from cos_store.core.models import StoredFile
from cos_store.core.store import COSStore


def build_store() -> COSStore:
    """Create the adapter, refusing to run with an incomplete config."""
    settings = CosSettings()
    missing = settings.validate_required_fields()
    if missing:
        raise ConfigError(f"Missing required settings: {', '.join(missing)}")
    return COSStore(settings)


async def upload(path: Path, target_dir: str | None, content_type: str | None) -> str:
    store = build_store()
    if content_type is None:
        content_type, _ = mimetypes.guess_type(path.name)

    return await store.save(
        StoredFile(name=path.name, path=str(path), type=content_type),
        target_dir,
    )


def main():
    import argparse

    parser = argparse.ArgumentParser(description='Upload a file to COS via the storage adapter')
    parser.add_argument('file', help='Local file to upload')
    parser.add_argument('--target-dir', default=None, help='Directory under the path prefix (default: YYYY/MM)')
    parser.add_argument('--content-type', default=None, help='Content type (default: guessed from name)')
    args = parser.parse_args()

    path = Path(args.file)
    if not path.is_file():
        print(f"ERROR: Cannot find {args.file}")
        sys.exit(1)

    try:
        url = asyncio.run(upload(path, args.target_dir, args.content_type))
    except ConfigError as e:
        print(f"ERROR: {e}")
        sys.exit(2)
    except StorageError as e:
        print(f"ERROR uploading {path.name}: {e}")
        sys.exit(1)

    print(url)


if __name__ == '__main__':
    main()
