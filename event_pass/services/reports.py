import pandas as pd
from sqlalchemy.ext.asyncio import AsyncSession

from event_pass.errors import NotFound
from event_pass.services.registrations import list_by_event
from event_pass.utils.time import isoformat_utc

CSV_COLUMNS = ["Name", "Email", "RollNumber", "RegisteredAt", "Status"]


class NoRegistrations(NotFound):
    message = "No registrations found for this event"


async def export_event_csv(session: AsyncSession, event_id: int) -> bytes:
    """Roster of one event as CSV, newest registration first."""
    rows = []
    for registration, student in await list_by_event(session, event_id):
        rows.append(
            {
                "Name": getattr(student, "name", None) or "-",
                "Email": getattr(student, "email", None) or "-",
                "RollNumber": getattr(student, "roll_number", None) or "-",
                "RegisteredAt": isoformat_utc(registration.created_at),
                "Status": "Scanned" if registration.scanned else "Pending",
            }
        )

    if not rows:
        raise NoRegistrations()

    df = pd.DataFrame(rows, columns=CSV_COLUMNS)
    return df.to_csv(index=False).encode("utf-8")
