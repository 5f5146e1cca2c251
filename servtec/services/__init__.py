"""
Business Logic Services
"""
from .bot import BotController
from .classifier import MessageClassifier, ClassifierRules
from .intake import IntakePipeline
from .lifecycle import TicketLifecycleEngine
from .numbering import NumberingService
from .reminders import ReminderService
from .resolver import EntityResolver
from .scheduler import Scheduler, AsyncioScheduler
from .whatsapp import Notifier, WhatsAppNotifier

__all__ = [
    "BotController",
    "MessageClassifier",
    "ClassifierRules",
    "IntakePipeline",
    "TicketLifecycleEngine",
    "NumberingService",
    "ReminderService",
    "EntityResolver",
    "Scheduler",
    "AsyncioScheduler",
    "Notifier",
    "WhatsAppNotifier",
]
