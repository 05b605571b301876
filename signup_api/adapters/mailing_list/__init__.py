"""Mailing-list provider adapter layer."""

from signup_api.adapters.mailing_list.base import AbstractMailingListClient
from signup_api.adapters.mailing_list.convertkit import ConvertKitClient

__all__ = [
    "AbstractMailingListClient",
    "ConvertKitClient",
]
