"""
Dependencies - Dependency injection for the API layer.

Provides the conversation store and the per-request factories the
routes receive through FastAPI's Depends().
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from threading import Lock
from typing import Any, Dict, List, Optional

from fastapi import Depends

from chatflow.core.config import Settings, get_settings
from chatflow.core.exceptions import ConversationNotFoundError
from chatflow.services.registry import ProviderRegistry
from chatflow.workflow.factory import WorkflowFactory

logger = logging.getLogger(__name__)


class ConversationStore:
    """
    Keeps conversation history between requests.

    In-memory only; entries not updated within the TTL are pruned
    whenever the store is touched.
    """

    def __init__(self, ttl_hours: int = 24):
        self.ttl = timedelta(hours=ttl_hours)
        self._conversations: Dict[str, Dict[str, Any]] = {}
        self._lock = Lock()

    def create_conversation(self) -> str:
        """Create a new conversation and return its ID."""
        conversation_id = str(uuid.uuid4())
        with self._lock:
            self._prune()
            self._conversations[conversation_id] = {
                "history": [],
                "last_updated": datetime.now(timezone.utc),
            }
        return conversation_id

    def get_history(self, conversation_id: str) -> List[Dict[str, str]]:
        """
        Get the history of a conversation.

        Raises:
            ConversationNotFoundError: If the id is unknown or expired
        """
        with self._lock:
            self._prune()
            conversation = self._conversations.get(conversation_id)
            if conversation is None:
                raise ConversationNotFoundError(conversation_id)
            return list(conversation["history"])

    def get_or_create(self, conversation_id: Optional[str]) -> str:
        """Return the id if it is still live, otherwise start a new conversation."""
        if conversation_id:
            with self._lock:
                self._prune()
                if conversation_id in self._conversations:
                    return conversation_id
            logger.info(f"Conversation {conversation_id} not found, starting a new one")
        return self.create_conversation()

    def append(self, conversation_id: str, role: str, content: str) -> None:
        """Append a turn and refresh the conversation's timestamp."""
        with self._lock:
            conversation = self._conversations.get(conversation_id)
            if conversation is None:
                raise ConversationNotFoundError(conversation_id)
            conversation["history"].append({"role": role, "content": content})
            conversation["last_updated"] = datetime.now(timezone.utc)

    def delete_conversation(self, conversation_id: str) -> bool:
        """Delete a conversation."""
        with self._lock:
            return self._conversations.pop(conversation_id, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._conversations)

    def _prune(self) -> None:
        cutoff = datetime.now(timezone.utc) - self.ttl
        expired = [
            conversation_id
            for conversation_id, conversation in self._conversations.items()
            if conversation["last_updated"] < cutoff
        ]
        for conversation_id in expired:
            del self._conversations[conversation_id]
        if expired:
            logger.info(f"Pruned {len(expired)} expired conversations")


_conversation_store: Optional[ConversationStore] = None


def get_conversation_store() -> ConversationStore:
    """Get the conversation store instance."""
    global _conversation_store
    if _conversation_store is None:
        _conversation_store = ConversationStore(ttl_hours=get_settings().conversation_ttl_hours)
    return _conversation_store


def get_provider_registry(settings: Settings = Depends(get_settings)) -> ProviderRegistry:
    """
    Get a provider registry for one request.

    Providers are built lazily from the server-side credentials in Settings.
    """
    return ProviderRegistry(settings=settings)


def get_workflow_factory(
    registry: ProviderRegistry = Depends(get_provider_registry)
) -> WorkflowFactory:
    """Get a workflow factory bound to the request's provider registry."""
    return WorkflowFactory(registry)
