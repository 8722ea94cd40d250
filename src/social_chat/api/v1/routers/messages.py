from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Response, status

from social_chat.api.deps import CurrentPrincipal, PublisherDep, UoWDep
from social_chat.api.v1.schemas.conversation import (
    ConversationResponse,
    LastMessageResponse,
    UnreadCountResponse,
    UserSummaryResponse,
)
from social_chat.api.v1.schemas.message import MessageResponse, SendMessageRequest
from social_chat.application.dto.message import SendMessageDTO
from social_chat.config import settings
from social_chat.services import conversation_service, message_service

router = APIRouter(prefix="/api/v1/messages", tags=["messages"])

# Static paths first: "/{user_id}" would otherwise swallow them.


@router.get("/conversations", response_model=list[ConversationResponse])
async def list_conversations(
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> list[ConversationResponse]:
    conversations = await conversation_service.conversations_for(principal, uow)
    return [
        ConversationResponse(
            user=UserSummaryResponse.model_validate(c.counterpart, from_attributes=True),
            last_message=LastMessageResponse.model_validate(c.last_message, from_attributes=True),
            unread_count=c.unread_count,
        )
        for c in conversations
    ]


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(principal: CurrentPrincipal, uow: UoWDep) -> UnreadCountResponse:
    total = await conversation_service.unread_total(principal, uow)
    return UnreadCountResponse(unread_count=total)


@router.post("/group/{group_id}", response_model=MessageResponse, status_code=201)
async def send_group_message(
    group_id: UUID,
    body: SendMessageRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
    publisher: PublisherDep,
) -> MessageResponse:
    msg = await message_service.send_to_group(
        principal,
        group_id,
        SendMessageDTO(body.content, body.media_url, body.media_type),
        uow,
        publisher=publisher,
        max_length=settings.MESSAGE_MAX_LENGTH,
    )
    return MessageResponse.model_validate(msg, from_attributes=True)


@router.get("/group/{group_id}", response_model=list[MessageResponse])
async def list_group_messages(
    group_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> list[MessageResponse]:
    messages = await message_service.list_group_messages(principal, group_id, uow)
    return [MessageResponse.model_validate(m, from_attributes=True) for m in messages]


@router.get("/message/{message_id}", response_model=MessageResponse)
async def get_message(
    message_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> MessageResponse:
    msg = await message_service.get_message(principal, message_id, uow)
    return MessageResponse.model_validate(msg, from_attributes=True)


@router.post("/{user_id}", response_model=MessageResponse, status_code=201)
async def send_message(
    user_id: int,
    body: SendMessageRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
    publisher: PublisherDep,
) -> MessageResponse:
    msg = await message_service.send_to_user(
        principal,
        user_id,
        SendMessageDTO(body.content, body.media_url, body.media_type),
        uow,
        publisher=publisher,
        max_length=settings.MESSAGE_MAX_LENGTH,
    )
    return MessageResponse.model_validate(msg, from_attributes=True)


@router.get("/{user_id}", response_model=list[MessageResponse])
async def list_private_messages(
    user_id: int,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> list[MessageResponse]:
    messages = await message_service.list_private_messages(principal, user_id, uow)
    return [MessageResponse.model_validate(m, from_attributes=True) for m in messages]


@router.put("/{message_id}/read", response_model=MessageResponse)
async def mark_message_read(
    message_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> MessageResponse:
    msg = await message_service.mark_read(principal, message_id, uow)
    return MessageResponse.model_validate(msg, from_attributes=True)


@router.delete("/{message_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_message(
    message_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> Response:
    await message_service.delete_message(principal, message_id, uow)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
