"""
Reference data shipped with the service
"""

# National public holidays (fixed dates plus Orthodox Easter and Pentecost)
PUBLIC_HOLIDAYS = {
    2025: [
        ("2025-01-01", "Anul Nou"), ("2025-01-02", "Anul Nou"),
        ("2025-01-06", "Boboteaza"), ("2025-01-07", "Sf. Ioan"),
        ("2025-01-24", "Ziua Unirii"),
        ("2025-04-18", "Vinerea Mare"), ("2025-04-19", "Paste"),
        ("2025-04-20", "Paste"), ("2025-04-21", "Paste"),
        ("2025-05-01", "Ziua Muncii"), ("2025-06-01", "Ziua Copilului"),
        ("2025-06-08", "Rusalii"), ("2025-06-09", "Rusalii"),
        ("2025-08-15", "Adormirea Maicii Domnului"), ("2025-11-30", "Sf. Andrei"),
        ("2025-12-01", "Ziua Nationala"), ("2025-12-25", "Craciunul"),
        ("2025-12-26", "Craciunul"),
    ],
    2026: [
        ("2026-01-01", "Anul Nou"), ("2026-01-02", "Anul Nou"),
        ("2026-01-06", "Boboteaza"), ("2026-01-07", "Sf. Ioan"),
        ("2026-01-24", "Ziua Unirii"),
        ("2026-04-10", "Vinerea Mare"), ("2026-04-11", "Paste"),
        ("2026-04-12", "Paste"), ("2026-04-13", "Paste"),
        ("2026-05-01", "Ziua Muncii"), ("2026-05-31", "Rusalii"),
        ("2026-06-01", "Ziua Copilului / Rusalii"),
        ("2026-08-15", "Adormirea Maicii Domnului"), ("2026-11-30", "Sf. Andrei"),
        ("2026-12-01", "Ziua Nationala"), ("2026-12-25", "Craciunul"),
        ("2026-12-26", "Craciunul"),
    ],
    2027: [
        ("2027-01-01", "Anul Nou"), ("2027-01-02", "Anul Nou"),
        ("2027-01-06", "Boboteaza"), ("2027-01-07", "Sf. Ioan"),
        ("2027-01-24", "Ziua Unirii"),
        ("2027-05-01", "Ziua Muncii / Vinerea Mare"), ("2027-05-02", "Paste"),
        ("2027-05-03", "Paste"), ("2027-05-04", "Paste"),
        ("2027-06-01", "Ziua Copilului"),
        ("2027-06-20", "Rusalii"), ("2027-06-21", "Rusalii"),
        ("2027-08-15", "Adormirea Maicii Domnului"), ("2027-11-30", "Sf. Andrei"),
        ("2027-12-01", "Ziua Nationala"), ("2027-12-25", "Craciunul"),
        ("2027-12-26", "Craciunul"),
    ],
}

PROCUREMENT_CATEGORIES = (
    "consumabile_laborator",
    "echipamente_it",
    "birotica",
    "echipamente_cercetare",
    "servicii",
    "mobilier",
    "altele",
)

PROCUREMENT_URGENCIES = ("normal", "urgent", "foarte_urgent")

HR_DOCUMENT_TYPES = ("adeverinta", "delegatie", "demisie", "altele")

DEFAULT_CURRENCY = "RON"
