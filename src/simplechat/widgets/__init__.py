"""Textual widgets for the SimpleChat terminal UI."""

from .activity_bar import ActivityBar
from .conversation import ConversationView
from .input_box import InputBox
from .message import MessageBubble
from .sidebar import ConversationSidebar
from .welcome import WelcomePanel

__all__ = [
    "ActivityBar",
    "ConversationSidebar",
    "ConversationView",
    "InputBox",
    "MessageBubble",
    "WelcomePanel",
]
