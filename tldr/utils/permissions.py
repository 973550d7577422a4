"""
Permission helpers for slash commands.
"""


def is_guild_admin(member) -> bool:
    """Check if a guild member holds the administrator permission."""
    permissions = getattr(member, "guild_permissions", None)
    return bool(permissions and permissions.administrator)
