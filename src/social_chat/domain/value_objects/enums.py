from __future__ import annotations

from enum import StrEnum


class MediaType(StrEnum):
    IMAGE = "image"
    VIDEO = "video"
    DOCUMENT = "document"
    NONE = "none"


class PresenceStatus(StrEnum):
    ONLINE = "online"
    OFFLINE = "offline"


class InboundEvent(StrEnum):
    SEND_MESSAGE = "sendMessage"
    JOIN_CHAT = "joinChat"
    LEAVE_CHAT = "leaveChat"
    TYPING = "typing"
    PING = "ping"


class OutboundEvent(StrEnum):
    NEW_MESSAGE = "newMessage"
    USER_TYPING = "userTyping"
    USER_STATUS = "userStatus"
    JOINED_CHAT = "joinedChat"
    ERROR = "error"
    PONG = "pong"
