"""Users app package.

Holds agencies and members, the role policy that governs them, and the
integration with the external identity provider. ``apps.users.models.Member``
is the AUTH_USER_MODEL throughout the project.
"""
