"""State sync — keep governed items in line with the lock policy.

This package provides:
- Policy: the predicates and the rules mapping them to desired states
- Engine: change-only writes that mute the handle's own notification
- Router: the host and item events that trigger reconciliation
- Drift: detection of items out of line with the policy
"""
