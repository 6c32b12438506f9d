"""Shared service instances for the route modules."""

from ..services import ActivityLog, FolderTree, NoteLifecycle, PermissionResolver

activity_log = ActivityLog()
permission_resolver = PermissionResolver(activity_log)
note_lifecycle = NoteLifecycle(permission_resolver, activity_log)
folder_tree = FolderTree()
