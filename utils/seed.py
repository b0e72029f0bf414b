from flask import current_app

# Default treatment catalog; each day offers the same slot template
DEFAULT_SLOTS = [
    "08.00 AM - 08.30 AM",
    "08.30 AM - 09.00 AM",
    "09.00 AM - 09.30 AM",
    "09.30 AM - 10.00 AM",
    "10.00 AM - 10.30 AM",
    "10.30 AM - 11.00 AM",
    "11.00 AM - 11.30 AM",
    "11.30 AM - 12.00 PM",
    "04.00 PM - 04.30 PM",
    "04.30 PM - 05.00 PM",
]

DEFAULT_SERVICES = [
    {"name": "Teeth Orthodontics", "slots": DEFAULT_SLOTS, "price": 99},
    {"name": "Cosmetic Dentistry", "slots": DEFAULT_SLOTS, "price": 120},
    {"name": "Teeth Cleaning", "slots": DEFAULT_SLOTS, "price": 50},
    {"name": "Cavity Protection", "slots": DEFAULT_SLOTS, "price": 75},
    {"name": "Pediatric Dental", "slots": DEFAULT_SLOTS, "price": 80},
    {"name": "Oral Surgery", "slots": DEFAULT_SLOTS, "price": 150},
]

def seed_services(catalog=None):
    """Adds missing catalog entries by name. Safe to run repeatedly."""
    return current_app.extensions["store"].add_services(catalog or DEFAULT_SERVICES)
