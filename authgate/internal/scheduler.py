# authgate/internal/scheduler.py
import asyncio, time
from authgate.common.config import JobSpec
from authgate.internal.client import InternalClient

CRON_PREFIX = "/api/cron/"

def due_jobs(jobs, last_run: dict, now: float) -> list:
    return [j for j in jobs if now - last_run.get(j.name, 0) >= j.interval_sec]

async def run_job(client: InternalClient, job: JobSpec, logger) -> dict | None:
    try:
        res = await client.call(CRON_PREFIX + job.name, {"job": job.name})
        logger.info(f"job {job.name} ok")
        return res
    except Exception as e:
        logger.error(f"job {job.name} fail err={e}")
        return None

async def job_loop(client: InternalClient, jobs, logger, tick_sec: float = 1.0, max_ticks: int | None = None):
    last_run: dict[str, float] = {}
    ticks = 0
    while max_ticks is None or ticks < max_ticks:
        now = time.time()
        due = due_jobs(jobs, last_run, now)
        for j in due:
            last_run[j.name] = now
        if due:
            await asyncio.gather(*(run_job(client, j, logger) for j in due))
        ticks += 1
        await asyncio.sleep(tick_sec)
