"""
Identifier types for the three id spaces that meet at the notification boundary.

A party (team or agent) row id, a profile row id and an auth user id are all
plain integers in the database. Only a UserId may address a notification.
"""

from typing import NewType

UserId = NewType("UserId", int)
PartyId = NewType("PartyId", int)
ProfileId = NewType("ProfileId", int)
