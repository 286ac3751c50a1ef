"""TaskPilot activity and notification dispatch package.

The package re-exports nothing; import from the layered subpackages
(``domain``, ``application``, ``infrastructure`` and ``interfaces``).
"""
