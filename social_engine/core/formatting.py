"""
Display helpers for social counters.

User-facing strings are Spanish, matching the rest of the front end.
"""

from social_engine.models.dtos import ActionKind

# Message shown when an action fails without a server-provided reason
ACTION_ERROR_MESSAGES = {
    ActionKind.LIKE: "Error al dar like",
    ActionKind.BOOKMARK: "Error al guardar",
    ActionKind.REPOST: "Error al repostear",
    ActionKind.COMMENT: "Error al comentar",
}

# Message shown when the mutation raised or timed out
UNEXPECTED_ERROR_MESSAGES = {
    ActionKind.LIKE: "Error inesperado al dar like",
    ActionKind.BOOKMARK: "Error inesperado al guardar",
    ActionKind.REPOST: "Error inesperado al repostear",
    ActionKind.COMMENT: "Error inesperado al comentar",
}

COMMENT_LIKE_ERROR_MESSAGE = "Error inesperado al dar like al comentario"
FOLLOW_ERROR_MESSAGE = "Error al seguir/dejar de seguir"
AUTH_REQUIRED_MESSAGE = "Se requiere iniciar sesión"

# (singular, plural) per display action
_ACTION_LABELS = {
    "liked": ("me gusta", "me gusta"),
    "commented": ("comentario", "comentarios"),
    "reposted": ("repost", "reposts"),
    "bookmarked": ("guardado", "guardados"),
}


def format_count(count: int) -> str:
    """
    Compact a counter for display.

    Below 1000 the number is shown as-is; thousands become ``X.Yk`` and millions
    ``X.YM``, with one decimal truncated rather than rounded (1999 -> ``1.9k``).
    """
    count = int(count)
    if count < 1000:
        return str(count)
    if count < 1_000_000:
        tenths = count // 100
        suffix = "k"
    else:
        tenths = count // 100_000
        suffix = "M"
    return f"{tenths // 10}.{tenths % 10}{suffix}"


def get_action_text(action: str, count: int) -> str:
    """Pluralised label such as ``"1 comentario"`` or ``"3 comentarios"``."""
    labels = _ACTION_LABELS.get(action)
    if labels is None:
        return f"{count}"
    singular, plural = labels
    return f"1 {singular}" if count == 1 else f"{count} {plural}"
