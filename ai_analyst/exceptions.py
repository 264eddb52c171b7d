"""Custom exceptions for the ai_analyst package."""

class OpenAIRateLimitError(Exception):
    """Raised when OpenAI API rate limit is exceeded."""
    pass

class OpenAIAPIError(Exception):
    """Raised when OpenAI API returns an error."""
    pass

class ConfigurationError(Exception):
    """Raised when there is a configuration error."""
    pass

class ConversationNotFoundError(Exception):
    """Raised when a conversation id is not registered."""

    def __init__(self, conversation_id: str):
        super().__init__(f"Conversation not found: {conversation_id}")
        self.conversation_id = conversation_id

class ConversationClosedError(Exception):
    """Raised when an operation targets a conversation that was closed."""

    def __init__(self, conversation_id: str):
        super().__init__(f"Conversation is closed: {conversation_id}")
        self.conversation_id = conversation_id
