"""
List service - state controllers for paginated list screens.
"""

from .list_controller import ListScreenController, ListState, ListStatus, FetchTicket

__all__ = [
    'ListScreenController',
    'ListState',
    'ListStatus',
    'FetchTicket'
]
