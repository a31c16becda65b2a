from .topic import (
    AddTopicRequest,
    AddTopicResponse,
    UpdateStatusRequest,
    UpdateStatusResponse,
)

__all__ = [
    "AddTopicRequest",
    "AddTopicResponse",
    "UpdateStatusRequest",
    "UpdateStatusResponse",
]
