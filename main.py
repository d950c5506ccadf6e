"""
=========================================================
Entry point for the video collections sample.
=========================================================

Walks through collection-typed columns on a single videos row:
    - SET  (tags):    add / remove
    - MAP  (formats): put / remove of video_format values, read by hand and via codec
    - LIST (frames):  replace all / append / replace at index

Before the walkthrough the keyspace database, the video_format type and the
videos table are created if needed and the table is emptied.

Usage:
    # Setup and walkthrough (default)
    python main.py

    # Setup only
    python main.py --setup

    # Keep existing rows, debug logging to console and file
    python main.py --keep-data --verbose --log-file sample.log

    # Drop and recreate the keyspace database first (DESTRUCTIVE)
    python main.py --force-recreate

Example:
    >>> from main import CollectionsSampleOrchestrator
    >>>
    >>> orchestrator = CollectionsSampleOrchestrator()
    >>> state = orchestrator.run_sample()
    >>> state['frames']
    [1, 128, 3, 4]
"""

import argparse
import sys
from typing import Any, Dict

from core.config import config
from core.logger import get_logger, setup_logging
from models.video_models import VideoDto, VideoFormat
from setup.setup_orchestrator import SetupError, SetupOrchestrator
from utils.database_utils import (
    DatabaseConnectionError,
    get_database_connection_info,
    verify_connection,
    wait_for_database,
)
from videos.video_collections import VideoCollectionsRepository

logger = get_logger(__name__)


class OrchestratorError(Exception):
    """Exception raised when prerequisites or setup for the sample fail."""
    pass


class CollectionsSampleOrchestrator:
    """
    Runs setup and the collections walkthrough.

    Attributes:
        max_retries: Connection attempts while waiting for PostgreSQL
        retry_delay: Seconds between connection attempts
        setup_orchestrator: SetupOrchestrator of the last run_setup() call
    """

    def __init__(self, max_retries: int = 5, retry_delay: int = 2):
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.setup_orchestrator = None

        logger.info("=" * 70)
        logger.info("Video Collections Sample - SET / LIST / MAP / UDT")
        logger.info("=" * 70)

    def verify_prerequisites(self) -> bool:
        """
        Check PostgreSQL is reachable.

        Raises:
            OrchestratorError: If the server cannot be reached
        """
        conn_info = get_database_connection_info()
        logger.info(f"📍 PostgreSQL Server: {conn_info['host']}:{conn_info['port']}")
        logger.info(f"👤 User: {conn_info['user']}")
        logger.info(f"🗄️  Keyspace Database: {conn_info['keyspace_database']}")

        try:
            wait_for_database(max_retries=self.max_retries, retry_delay=self.retry_delay)
        except DatabaseConnectionError as e:
            raise OrchestratorError(
                f"PostgreSQL connection failed: {e}\n"
                f"Please ensure PostgreSQL is running at {conn_info['host']}:{conn_info['port']}"
            ) from e

        success, message = verify_connection()
        if not success:
            raise OrchestratorError(f"PostgreSQL connection failed: {message}")

        logger.info(f"✅ {message}")
        return True

    def run_setup(self, truncate: bool = True, force_recreate: bool = False) -> Dict[str, bool]:
        """
        Create the keyspace database, video_format type and videos table.

        Args:
            truncate: Empty the videos table
            force_recreate: Drop and recreate the keyspace database (DESTRUCTIVE)

        Raises:
            OrchestratorError: If setup fails
        """
        self.setup_orchestrator = SetupOrchestrator()
        try:
            return self.setup_orchestrator.run_complete_setup(
                truncate=truncate,
                force_recreate=force_recreate
            )
        except SetupError as e:
            raise OrchestratorError(f"Setup failed: {e}") from e
        finally:
            self.setup_orchestrator.close_connections()

    def run_walkthrough(self, repository: VideoCollectionsRepository) -> Dict[str, Any]:
        """
        Create one video and run every collection operation on it.

        Returns:
            Final state: videoid, tags, frames and formats of the row
        """
        repository.prepare_statements()

        # ========= CREATE ============
        dto = VideoDto(
            title="The World’s Largest Apache Cassandra™ NoSQL Event | DataStax Accelerate 2020",
            url="https://www.youtube.com/watch?v=7afxKEH7t8Q",
            email="clun@sample.com"
        )
        dto.tags.add("cassandra")
        dto.frames.extend([2, 3, 5, 8, 13, 21])
        dto.tags.add("accelerate")
        dto.formats["mp4"] = VideoFormat(640, 480)
        dto.formats["ogg"] = VideoFormat(640, 480)
        repository.create_video(dto)
        videoid = dto.videoid
        logger.info(f"+ Video {videoid} created")

        # Operations on SET (add/remove)
        logger.info(f"+ Tags before adding 'OK' {repository.list_tags(videoid)}")
        repository.add_tag(videoid, "OK")
        logger.info(f"+ Tags after adding 'OK' {repository.list_tags(videoid)}")
        repository.remove_tag(videoid, "accelerate")
        logger.info(f"+ Tags after removing 'accelerate' {repository.list_tags(videoid)}")

        # Operations on MAP (put/remove)
        logger.info(f"+ Formats before {repository.list_formats(videoid)}")
        repository.add_format(videoid, "hd", VideoFormat(1920, 1080))
        logger.info(f"+ Formats after adding 'hd' {repository.list_formats(videoid)}")
        repository.remove_format(videoid, "ogg")
        logger.info(f"+ Formats after removing 'ogg' {repository.list_formats(videoid)}")
        logger.info(f"+ Formats after removing 'ogg' (codec) {repository.list_formats_with_codec(videoid)}")

        # Operations on LIST (replace all, append, replace one)
        logger.info(f"+ Frames before {repository.list_frames(videoid)}")
        repository.update_all_frames(videoid, [1, 2, 3])
        logger.info(f"+ Frames after update all {repository.list_frames(videoid)}")
        repository.append_frame(videoid, 4)
        logger.info(f"+ Frames after append 4 {repository.list_frames(videoid)}")
        repository.update_frame(videoid, 1, 128)
        logger.info(f"+ Frames after changing idx=1 to 128 {repository.list_frames(videoid)}")

        return {
            'videoid': videoid,
            'tags': repository.list_tags(videoid),
            'frames': repository.list_frames(videoid),
            'formats': repository.list_formats_with_codec(videoid),
        }

    def run_sample(self, truncate: bool = True, force_recreate: bool = False) -> Dict[str, Any]:
        """
        Verify connectivity, run setup, then the walkthrough.

        The repository engine is always disposed, even when an operation fails.
        """
        self.verify_prerequisites()
        self.run_setup(truncate=truncate, force_recreate=force_recreate)

        repository = VideoCollectionsRepository()
        try:
            return self.run_walkthrough(repository)
        finally:
            repository.close()


def main():
    """
    Command-line interface for the collections sample.

    Returns:
        Exit code (0 = success, 1 = failure, 130 = interrupted)
    """
    parser = argparse.ArgumentParser(
        description='Video collections sample: SET, LIST, MAP and UDT columns',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                      # setup + walkthrough
  python main.py --setup              # setup only
  python main.py --keep-data          # do not truncate videos first
  python main.py --force-recreate     # drop and recreate database (DANGEROUS!)
        """
    )

    parser.add_argument(
        '--setup',
        action='store_true',
        help='Create database, type and table only; skip the walkthrough'
    )
    parser.add_argument(
        '--sample',
        action='store_true',
        help='Run setup and the collections walkthrough (default)'
    )
    parser.add_argument(
        '--keep-data',
        action='store_true',
        help='Do not truncate the videos table during setup'
    )
    parser.add_argument(
        '--force-recreate',
        action='store_true',
        help='Drop and recreate the keyspace database (DANGEROUS!)'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose logging (DEBUG level)'
    )
    parser.add_argument(
        '--log-file',
        type=str,
        default=None,
        help='Also write logs to this file under logs/'
    )

    args = parser.parse_args()

    setup_logging(
        log_level='DEBUG' if args.verbose else config.log_level,
        log_file=args.log_file
    )

    try:
        orchestrator = CollectionsSampleOrchestrator()

        if args.setup and not args.sample:
            orchestrator.verify_prerequisites()
            results = orchestrator.run_setup(
                truncate=not args.keep_data,
                force_recreate=args.force_recreate
            )
            if all(results.values()):
                logger.info("\n🎉 Setup completed successfully!")
                return 0
            logger.error("\n❌ Setup completed with errors")
            return 1

        orchestrator.run_sample(
            truncate=not args.keep_data,
            force_recreate=args.force_recreate
        )
        logger.info("\n🎉 Sample completed successfully!")
        return 0

    except OrchestratorError as e:
        logger.error(f"\n❌ Sample failed: {e}")
        return 1
    except KeyboardInterrupt:
        logger.warning("\n⚠️  Operation interrupted by user")
        return 130
    except Exception as e:
        logger.error(f"\n❌ Unexpected error: {e}", exc_info=True)
        return 1


if __name__ == '__main__':
    sys.exit(main())
