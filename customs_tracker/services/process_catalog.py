"""
ProcessCatalog service for Customs Process Tracker
"""

from typing import List

from ..models.process import Process
from ..utils.database import DatabaseManager
from ..core.exceptions import ProcessNotFoundError


class ProcessCatalog:
    """Read-only access to process templates and their steps."""

    def __init__(self, database_manager: DatabaseManager):
        self.db = database_manager

    async def list_processes(self) -> List[Process]:
        return await self.db.get_all_processes()

    async def get_process(self, process_id: str) -> Process:
        """Get a process with its steps in order."""
        process = await self.db.get_process(process_id)
        if not process:
            raise ProcessNotFoundError(process_id)
        return process
