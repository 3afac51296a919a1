"""
Enrichment Orchestrator
=======================

Drives a photo's ``ai_status`` through:

    PENDING ──provider ok──▶ DONE   (ai_description set)
       │
       └──provider fails──▶ ERROR  (ai_error set)

DONE and ERROR are left only through an explicit regenerate, which
puts the photo back into PENDING.

Dispatch is fire-and-forget: the work is queued on the request's
``BackgroundTasks`` and runs after the response has been sent. Nothing
is persisted about the task itself, so a process restart leaves the
photo in PENDING until the owner regenerates. Overlapping runs for the
same photo are not serialized; whichever write lands last wins.
"""

import logging
from typing import Callable

from fastapi import BackgroundTasks
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from photomap.models import AiStatus, Photo
from photomap.services.vision import VisionProvider, VisionProviderFailure

logger = logging.getLogger(__name__)


def failure_message(exc: Exception) -> str:
    """Turn a provider failure into the text stored on the photo."""
    if isinstance(exc, VisionProviderFailure) and str(exc):
        return str(exc)
    return f"Unexpected error during image description generation ({type(exc).__name__})"


def reset_to_pending(photo: Photo) -> None:
    """Put ``photo`` back into PENDING with both outcome fields cleared."""
    photo.ai_status = AiStatus.PENDING
    photo.ai_description = None
    photo.ai_error = None


class EnrichmentOrchestrator:
    """Runs the vision provider for a photo and records the outcome.

    Attributes:
        provider: Backend producing descriptions.
        session_factory: Opens sessions independent of any request.
    """

    def __init__(
        self,
        provider: VisionProvider,
        session_factory: Callable[[], AsyncSession],
    ) -> None:
        self.provider = provider
        self.session_factory = session_factory

    def dispatch(
        self,
        background_tasks: BackgroundTasks,
        photo_id: str,
        location_ref: str,
    ) -> None:
        """Schedule enrichment of ``photo_id`` without waiting for it."""
        background_tasks.add_task(self.enrich, photo_id, location_ref)
        logger.debug(f"Enrichment dispatched for photo {photo_id}")

    async def enrich(self, photo_id: str, location_ref: str) -> None:
        """Describe the image and persist DONE or ERROR in one update."""
        try:
            description = await run_in_threadpool(self.provider.describe_image, location_ref)
        except Exception as exc:
            message = failure_message(exc)
            logger.warning(f"Enrichment failed for photo {photo_id}: {message}")
            values = {
                "ai_status": AiStatus.ERROR,
                "ai_description": None,
                "ai_error": message,
            }
        else:
            logger.info(f"Enrichment finished for photo {photo_id}")
            values = {
                "ai_status": AiStatus.DONE,
                "ai_description": description,
                "ai_error": None,
            }

        await self._record(photo_id, values)

    async def _record(self, photo_id: str, values: dict) -> None:
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    update(Photo).where(Photo.id == photo_id).values(**values)
                )
                await session.commit()
        except Exception:
            # No caller is left to report to; the photo stays PENDING.
            logger.exception(f"Failed to record enrichment outcome for photo {photo_id}")
            return

        if result.rowcount == 0:
            logger.info(f"Photo {photo_id} was deleted before enrichment finished")
