"""
Services - the operations the HTTP layer exposes.

- content: posts and comments behind the policy engine
- pagination: offset pagination with one extra row instead of a count
"""

from scribe.services.content import ContentService
from scribe.services.pagination import paginate

__all__ = [
    "ContentService",
    "paginate",
]
