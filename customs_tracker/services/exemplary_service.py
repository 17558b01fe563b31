"""
ExemplaryProcessService for Customs Process Tracker

Curated "best practice" examples that show operators how a process should
look when done right.
"""

from typing import List, Optional
from uuid import uuid4

from ..models.exemplary import ExemplaryProcess
from ..utils.database import DatabaseManager
from ..utils.logger import get_logger
from ..core.exceptions import ExemplaryProcessNotFoundError, ProcessNotFoundError


class ExemplaryProcessService:
    """Read and create exemplary process entries."""

    def __init__(self, database_manager: DatabaseManager):
        self.db = database_manager
        self.logger = get_logger(__name__)

    async def list_examples(self) -> List[ExemplaryProcess]:
        return await self.db.get_exemplary_processes()

    async def get_example(self, exemplary_id: str) -> ExemplaryProcess:
        example = await self.db.get_exemplary_process(exemplary_id)
        if not example:
            raise ExemplaryProcessNotFoundError(exemplary_id)
        return example

    async def create_example(
        self,
        process_id: str,
        title: str,
        created_by: str,
        description: str = "",
        image_url: str = "",
        video_url: Optional[str] = None
    ) -> ExemplaryProcess:
        """
        Create an example for an existing process.

        Raises:
            ProcessNotFoundError: the referenced process does not exist
        """
        if not await self.db.get_process(process_id):
            raise ProcessNotFoundError(process_id)

        example = ExemplaryProcess(
            id=str(uuid4()),
            process_id=process_id,
            title=title,
            created_by=created_by,
            description=description,
            image_url=image_url,
            video_url=video_url
        )
        await self.db.insert_exemplary_process(example)

        self.logger.info("Exemplary process created", extra={
            "exemplary_process_id": example.id,
            "process_id": process_id,
            "created_by": created_by
        })
        return example
