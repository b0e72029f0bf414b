from services.errors import AvailabilityUnavailable, StoreUnavailable


def open_slots(template, booked):
    """Slots of ``template`` not in ``booked``, template order kept, each label once."""
    seen = set()
    out = []
    for slot in template or []:
        if slot in booked or slot in seen:
            continue
        seen.add(slot)
        out.append(slot)
    return out


class AvailabilityEngine:
    def __init__(self, store):
        self.store = store

    def compute_availability(self, date: str):
        """
        Open slots per service for ``date``.

        ``date`` is matched verbatim against stored bookings, so an unknown
        day simply yields every service fully open. Catalog rows are read,
        never modified; the result is a list of fresh dicts.
        """
        try:
            services = self.store.find_service_catalog()
            bookings = self.store.find_bookings_for_date(date)
        except StoreUnavailable as exc:
            raise AvailabilityUnavailable() from exc

        booked_by_treatment = {}
        for b in bookings:
            booked_by_treatment.setdefault(b.treatment, set()).add(b.slot)

        return [
            {
                "id": s.id,
                "name": s.name,
                "price": s.price,
                "slots": open_slots(s.slots, booked_by_treatment.get(s.name, set())),
            }
            for s in services
        ]
