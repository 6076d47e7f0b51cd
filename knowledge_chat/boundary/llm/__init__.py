"""
External model service adapters.

- QueryEmbedder: question embeddings for similarity search
- CompletionClient: chat completions for the assistant reply

Dependencies: langchain_google_genai, tenacity
System role: LLM boundary layer
"""

from knowledge_chat.boundary.llm.completion_client import CompletionClient
from knowledge_chat.boundary.llm.embedder import QueryEmbedder

__all__ = ["CompletionClient", "QueryEmbedder"]
