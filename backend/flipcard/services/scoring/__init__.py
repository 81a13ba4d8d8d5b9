"""Scoring service: append-only time/contact store and percentile ranking.

Mirrors the spreadsheet web-app the relay forwards to: one entry point,
`handle_request`, dispatching on the payload's ``type``.
"""

from .service import handle_request

__all__ = ['handle_request']
