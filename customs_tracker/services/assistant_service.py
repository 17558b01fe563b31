"""
AssistantService for Customs Process Tracker

Answers operator questions through an external NLP service. When the service
is not configured or fails, a keyword matcher answers the common questions so
operators on the floor always get a response.
"""

from typing import Optional
from uuid import uuid4

import httpx

from ..models.exemplary import AssistantAnswer, AssistantLog
from ..utils.database import DatabaseManager
from ..utils.logger import get_logger
from ..core.exceptions import AssistantServiceError, DatabaseError


EXPORT_PROCESS_ANSWER = AssistantAnswer(
    intent="process_inquiry",
    confidence=0.92,
    answer=(
        "Para los procesos de exportación, debes asegurarte de verificar los siguientes "
        "documentos: factura comercial, lista de empaque, certificado de origen y documento "
        "de transporte. Recuerda que cada tipo de mercancía puede requerir documentación adicional."
    ),
    process_id="proc_export_123",
    image_url="https://images.pexels.com/photos/4483610/pexels-photo-4483610.jpeg"
)

ERROR_HELP_ANSWER = AssistantAnswer(
    intent="error_help",
    confidence=0.88,
    answer=(
        'Si encuentras un error en el proceso, debes reportarlo inmediatamente usando el botón '
        '"Reportar problema". Describe el error con detalle para que el administrador pueda '
        "resolverlo rápidamente. En caso de errores críticos, también puedes contactar "
        "directamente al supervisor de turno."
    )
)

SCAN_HELP_ANSWER = AssistantAnswer(
    intent="scan_help",
    confidence=0.95,
    answer=(
        "Para escanear un código, asegúrate de que la cámara esté limpia y que haya buena "
        "iluminación. Mantén el dispositivo a unos 15-20 cm del código y asegúrate de que todo "
        "el código sea visible en la pantalla. Si tienes problemas, puedes intentar mejorar la "
        "iluminación o limpiar el código si está dañado."
    )
)

GENERAL_ANSWER = AssistantAnswer(
    intent="general_inquiry",
    confidence=0.75,
    answer=(
        "Puedo ayudarte con información sobre los procesos de importación y exportación, "
        "escaneo de códigos, reportes de problemas y más. Por favor, sé más específico sobre "
        "qué información necesitas."
    )
)


def match_keywords(query: str) -> AssistantAnswer:
    """Answer a question by keyword matching."""
    text = query.lower()

    if "proceso" in text and "exportación" in text:
        return EXPORT_PROCESS_ANSWER
    if "error" in text or "problema" in text:
        return ERROR_HELP_ANSWER
    if "escanear" in text or "código" in text:
        return SCAN_HELP_ANSWER
    return GENERAL_ANSWER


class AssistantService:
    """Operator help desk backed by an optional NLP service."""

    def __init__(
        self,
        database_manager: DatabaseManager,
        service_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        """
        Initialize AssistantService.

        Args:
            database_manager: Store used for query analytics
            service_url: NLP service endpoint; keyword matching is used when unset
            api_key: Bearer key for the NLP service
            timeout: Request timeout in seconds
            http_client: Optional preconfigured client (mainly for tests)
        """
        self.db = database_manager
        self.service_url = service_url
        self.api_key = api_key
        self.timeout = timeout
        self._client = http_client
        self._owns_client = http_client is None
        self.logger = get_logger(__name__)

    @property
    def remote_enabled(self) -> bool:
        return bool(self.service_url and self.api_key)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self):
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _ask_remote(self, query: str, context: Optional[str]) -> AssistantAnswer:
        payload = {"query": query}
        if context:
            payload["context"] = context

        try:
            response = await self._get_client().post(
                self.service_url,
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"}
            )
            response.raise_for_status()
            return AssistantAnswer.from_dict(response.json())
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
            raise AssistantServiceError(str(e))

    async def answer(self, user_id: str, query: str, context: Optional[str] = None) -> AssistantAnswer:
        """
        Answer an operator question and record it for analytics.

        Args:
            user_id: Operator asking
            query: Free-text question
            context: Optional hint about where the operator is in the app

        Returns:
            AssistantAnswer with the detected intent
        """
        if self.remote_enabled:
            try:
                answer = await self._ask_remote(query, context)
            except AssistantServiceError as e:
                self.logger.warning("NLP service failed, using keyword matching", extra={
                    "error": e.message
                })
                answer = match_keywords(query)
        else:
            answer = match_keywords(query)

        log = AssistantLog(
            id=str(uuid4()),
            user_id=user_id,
            query=query,
            detected_intent=answer.intent,
            confidence=answer.confidence
        )
        try:
            await self.db.insert_assistant_log(log)
        except DatabaseError as e:
            # Query logging never fails the request
            self.logger.error("Error logging assistant query", extra={"error": e.message})

        return answer
