from datetime import UTC, datetime


def now() -> datetime:
    return datetime.now(UTC)


def format_last_seen(moment: datetime | None, reference: datetime | None = None) -> str:
    """Humanize how long ago a user was last seen ("Ahora", "Hace 5 min", "Ayer", ...)."""
    if moment is None:
        return ""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    reference = reference or now()

    seconds = (reference - moment).total_seconds()
    minutes = int(seconds // 60)
    hours = int(seconds // 3600)
    days = int(seconds // 86400)

    if minutes < 1:
        return "Ahora"
    if minutes < 60:
        return f"Hace {minutes} min"
    if hours < 24:
        return f"Hace {hours}h"
    if days == 1:
        return "Ayer"
    if days < 7:
        return f"Hace {days} días"
    return moment.strftime("%d/%m/%Y")


def format_clock(moment: datetime | None) -> str:
    """Format a timestamp as HH:MM."""
    if moment is None:
        return ""
    return moment.strftime("%H:%M")
