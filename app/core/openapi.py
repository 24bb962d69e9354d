"""
OpenAPI schema customizations for drf-spectacular.

Groups operations into documentation tags by URL so ReDoc shows Auth,
Profile, Users, Conversations, Messages and Contacts sections.

Tag naming follows the pattern: [Area] or [Area] - [Group]
"""


def _tag_for_path(path):
    """Return the documentation tag for a schema path, or None."""
    if path.startswith("/api/auth/"):
        return "Auth"
    if path.startswith("/api/profile"):
        return "Users - Profile"
    if path.startswith("/api/users/"):
        return "Users - Discovery"
    if path.startswith("/api/conversations"):
        if path.rstrip("/").endswith("/messages"):
            return "Chat - Messages"
        return "Chat - Conversations"
    if path.startswith("/api/contacts"):
        return "Contacts"
    return None


TAG_DESCRIPTIONS = {
    "Auth": "Signup, signin, signout, token refresh and the current user.",
    "Users - Profile": "The caller's own profile (partial updates).",
    "Users - Discovery": "Public profiles, user search and the user directory.",
    "Chat - Conversations": "1:1 and group conversations, details and read state.",
    "Chat - Messages": "Polling-friendly message history and posting.",
    "Contacts": "The caller's contact list.",
}


def group_endpoints(result, generator, request, public):
    """Postprocessing hook that tags each operation by its path."""
    paths = result.get("paths", {})

    for path, methods in paths.items():
        tag = _tag_for_path(path)
        if tag is None:
            continue
        for operation in methods.values():
            if isinstance(operation, dict):
                operation["tags"] = [tag]

    result["tags"] = [
        {"name": name, "description": description}
        for name, description in TAG_DESCRIPTIONS.items()
    ]
    return result
