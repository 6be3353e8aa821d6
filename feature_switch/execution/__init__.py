# feature_switch/execution/__init__.py
"""Asynchronous delivery of change notifications."""
from .notifier import EventLoopNotifier, ListenerNotifier, ThreadPoolNotifier, deliver_change

__all__ = [
    'ListenerNotifier',
    'ThreadPoolNotifier',
    'EventLoopNotifier',
    'deliver_change'
]
