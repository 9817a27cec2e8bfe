"""
Question answering over retrieved chunks.

1. Retrieve chunks (hybrid search, or dense-only when requested)
2. Build a numbered context from the chunk texts
3. Ask Gemini for an answer grounded in that context
4. Attach the sources: filename, signed download URL, relevance, excerpt

No hits means no LLM call: the caller gets NO_RESULTS_ANSWER and no sources.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from google import genai
from google.genai import types

from . import config
from .exceptions import InputError
from .models import AnswerSource, ChatAnswer, RankedResult
from .pipeline import HybridSearcher, _guard
from .providers.base import ObjectStore

logger = logging.getLogger(__name__)

NO_RESULTS_ANSWER = "I couldn't find any relevant information in your documents."
NO_RESPONSE_ANSWER = "I couldn't generate a response."
EXCERPT_CHARS = 150

SYSTEM_PROMPT = (
    "Você é um assistente de IA que responde a perguntas com base no contexto do documento fornecido.\n"
    "Se a resposta não puder ser encontrada no contexto, diga que não sabe com base nas informações disponíveis.\n"
    "Sempre cite suas fontes, mencionando qual(is) documento(s) continha(m) a informação."
)


def build_context(results: List[RankedResult]) -> str:
    """Number each chunk and label it with its file name"""
    blocks = []
    for i, result in enumerate(results, start=1):
        filename = result.payload.get("metadata", {}).get("filename", "unknown")
        blocks.append(f"Document {i}: {filename}\n{result.payload.get('text', '')}")
    return "\n\n".join(blocks)


class RagChat:
    """Retrieval-augmented answers with cited sources"""

    def __init__(
        self,
        searcher: HybridSearcher,
        object_store: ObjectStore,
        genai_client: Optional[genai.Client] = None,
        model_name: str = config.LLM_MODEL,
        project_id: Optional[str] = config.PROJECT_ID,
        location: str = config.LOCATION,
        temperature: float = 0.3,
        max_output_tokens: int = 5000,
        url_expiration: int = config.SIGNED_URL_EXPIRATION,
    ):
        """
        Args:
            searcher: Retrieval over the indexed chunks
            object_store: Resolves stored file handles to signed URLs
            genai_client: Existing client (tests pass a mock); created from
                project_id/location when omitted
            model_name: Gemini model used for answers
            temperature: Sampling temperature (low keeps answers close to the context)
            max_output_tokens: Answer length cap
            url_expiration: Signed URL lifetime in seconds
        """
        if genai_client is None:
            if not project_id:
                raise InputError("GCP project ID required. Set GCP_PROJECT_ID env var or pass genai_client.")
            genai_client = genai.Client(vertexai=True, project=project_id, location=location)
        self.searcher = searcher
        self.object_store = object_store
        self.client = genai_client
        self.model_name = model_name
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self.url_expiration = url_expiration

    async def answer(
        self,
        question: str,
        use_hybrid: bool = True,
        limit: int = 5,
        alpha: float = config.DEFAULT_ALPHA,
        filter: Optional[Dict[str, Any]] = None,
        path_file_external: Optional[str] = None,
    ) -> ChatAnswer:
        """
        Answer a question from the indexed documents.

        Args:
            question: Natural language question
            use_hybrid: Fuse dense and BM25 results (False = dense only)
            limit: Number of chunks given to the model as context
            alpha: Dense weight for hybrid retrieval
            filter: Payload filter for retrieval
            path_file_external: Restrict retrieval to files under this folder

        Returns:
            ChatAnswer with one source per retrieved chunk, in ranking order

        Raises:
            InputError: Invalid retrieval parameters
            DependencyError: Retrieval, object store or LLM call failed
        """
        if use_hybrid:
            results = await self.searcher.search(
                question, limit=limit, alpha=alpha, filter=filter, path_file_external=path_file_external,
            )
        else:
            results = await self.searcher.search_dense(
                question, limit=limit, filter=filter, path_file_external=path_file_external,
            )

        if not results:
            logger.info("No chunks retrieved; answering without the model")
            return ChatAnswer(answer=NO_RESULTS_ANSWER, sources=[])

        sources = await asyncio.gather(*[self._source(result) for result in results])

        prompt = f"Context:\n{build_context(results)}\n\nQuestion: {question}"
        logger.debug(f"Asking {self.model_name} with {len(results)} context chunks ({len(prompt)} chars)")
        response = await _guard("llm", asyncio.to_thread(
            self.client.models.generate_content,
            model=self.model_name,
            contents=prompt,
            config=types.GenerateContentConfig(
                system_instruction=SYSTEM_PROMPT,
                temperature=self.temperature,
                max_output_tokens=self.max_output_tokens,
            ),
        ))

        text = (response.text or "").strip()
        if not text:
            logger.warning(f"{self.model_name} returned an empty answer")
            text = NO_RESPONSE_ANSWER

        return ChatAnswer(answer=text, sources=list(sources))

    async def _source(self, result: RankedResult) -> AnswerSource:
        metadata = result.payload.get("metadata", {})
        handle = metadata.get("file_handle")
        url = None
        if handle:
            url = await _guard("object store", asyncio.to_thread(
                self.object_store.url, handle, self.url_expiration,
            ))

        text = result.payload.get("text", "")
        excerpt = text[:EXCERPT_CHARS] + ("..." if len(text) > EXCERPT_CHARS else "")
        return AnswerSource(
            filename=metadata.get("filename"),
            url=url,
            relevance=result.score,
            excerpt=excerpt,
        )
