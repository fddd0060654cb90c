"""Webhook receiver for task-completion callbacks.

Public API::

    from kieai.api import create_callback_app
"""

from kieai.api.app import create_callback_app

__all__ = ["create_callback_app"]
