import argparse
import asyncio
import logging
from datetime import timedelta

from src.store.config import settings
from src.store.utils.logging_setup import configure_logging

logger = logging.getLogger("run")


async def _reconcile(max_age_minutes: int) -> dict:
    from src.store.crud.pending_upload import reconcile_orphaned_uploads
    from src.store.utils.database import AsyncSessionLocal, init_models
    from src.store.utils.image_host import configure_cloudinary, destroy

    await init_models()
    if not configure_cloudinary():
        raise SystemExit("Cloudinary credentials are required to delete orphaned uploads")
    async with AsyncSessionLocal() as db:
        return await reconcile_orphaned_uploads(db, destroy, timedelta(minutes=max_age_minutes))


def main():
    parser = argparse.ArgumentParser(description="ave-store management commands")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="run the API and admin console")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=settings.PORT)
    serve.add_argument("--reload", action="store_true")

    rec = sub.add_parser("reconcile-uploads", help="delete images uploaded for records that were never saved")
    rec.add_argument("--max-age", type=int, default=settings.ORPHAN_UPLOAD_MAX_AGE_MINUTES, help="minutes")

    sub.add_parser("init-db", help="create missing tables")

    args = parser.parse_args()
    configure_logging()

    if args.command == "serve":
        import uvicorn

        uvicorn.run("src.store.app:app", host=args.host, port=args.port, reload=args.reload)
    elif args.command == "reconcile-uploads":
        stats = asyncio.run(_reconcile(args.max_age))
        print(f"Orphaned uploads discarded: {stats['discarded']}, failed: {stats['failed']}")
    elif args.command == "init-db":
        from src.store.utils.database import init_models

        asyncio.run(init_models())
        print("Tables created")


if __name__ == '__main__':
    main()
