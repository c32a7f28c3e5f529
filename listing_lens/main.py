from listing_lens.config.settings import Settings
from listing_lens.jobs.queue import RedisJobQueue
from listing_lens.logging.logger import Log
from listing_lens.processor.processor import build_processor
from listing_lens.store.connection import close_client, init_client
from listing_lens.store.redis_store import RedisStore
from listing_lens.worker.job_runner import JobRunner
from listing_lens.worker.worker import Worker


def main() -> None:
    """Worker process: open Redis, wire the report pipeline, consume the job queue."""
    settings = Settings()
    Log.configure(settings.log_level)
    Log.info(
        "Starting report worker",
        env=settings.app_env,
        provider=settings.generation_provider,
        queue=settings.job_queue_name,
    )
    client = init_client(settings)

    try:
        processor = build_processor(settings, RedisStore(client))
        queue = RedisJobQueue(client, settings.job_queue_name)
        Worker(queue, JobRunner(processor), settings).run()
    finally:
        close_client()


if __name__ == "__main__":
    main()
