from __future__ import annotations

from social_chat.domain.entities.message import Message, ReadReceipt
from social_chat.infrastructure.db.models.message import MessageModel


def model_to_entity(model: MessageModel) -> Message:
    return Message(
        id=model.id,
        sender_id=model.sender_id,
        recipient_id=model.recipient_id,
        group_id=model.group_id,
        content=model.content,
        media_url=model.media_url,
        media_type=model.media_type,
        read=model.read,
        read_by=tuple(
            ReadReceipt(user_id=r.user_id, read_at=r.read_at) for r in model.reads
        ),
        created_at=model.created_at,
    )


def entity_to_model(entity: Message) -> MessageModel:
    # Receipts are written through MessageWriterRepo.add_read_receipt only.
    return MessageModel(
        id=entity.id,
        sender_id=entity.sender_id,
        recipient_id=entity.recipient_id,
        group_id=entity.group_id,
        content=entity.content,
        media_url=entity.media_url,
        media_type=entity.media_type,
        read=entity.read,
        created_at=entity.created_at,
        reads=[],
    )
