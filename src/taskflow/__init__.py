"""TaskFlow: task management API with per-user ownership.

Users register, log in for a JWT, and manage their own task list.
Admins get a read-only view across every user's tasks.
"""

__version__ = "0.1.0"
