# ProjectDesk Models
from .project import Project, ProjectStatus, ProjectCategory
from .todo import Todo, TodoPriority
from .note import Note, Attachment, NoteStatusCategory, NoteStatusType
from .link import Link
from .meeting import Meeting, MeetingTranscript, MeetingSummary, MeetingTodo, MeetingStatus
from .configuration import ProjectConfiguration, ConfiguratorBlock
from .profile import Profile, DashboardLayout
from .sync import MirrorOutboxEntry, OutboxStatus

__all__ = [
    "Project",
    "ProjectStatus",
    "ProjectCategory",
    "Todo",
    "TodoPriority",
    "Note",
    "Attachment",
    "NoteStatusCategory",
    "NoteStatusType",
    "Link",
    "Meeting",
    "MeetingTranscript",
    "MeetingSummary",
    "MeetingTodo",
    "MeetingStatus",
    "ProjectConfiguration",
    "ConfiguratorBlock",
    "Profile",
    "DashboardLayout",
    "MirrorOutboxEntry",
    "OutboxStatus",
]
