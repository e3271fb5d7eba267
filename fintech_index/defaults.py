# fintech_index/defaults.py
# Dataset incluido con la aplicación: se usa cuando no hay caché válida.
from fintech_index.schemas import CountryDataOut

_COLUMNS = (
    "country_code", "name", "literacy_rate", "digital_infrastructure", "investment",
    "final_score", "year", "population", "gdp", "fintech_companies",
)

_ROWS = [
    # 2024
    ("NG", "Nigeria", 62.0, 78.5, 85.2, 75.2, 2024, 218000000, 440.8, 144),
    ("ZA", "South Africa", 94.3, 82.1, 71.8, 82.7, 2024, 60000000, 419.0, 89),
    ("KE", "Kenya", 81.5, 75.3, 68.9, 75.2, 2024, 54000000, 110.3, 67),
    ("EG", "Egypt", 71.2, 69.8, 64.5, 68.5, 2024, 104000000, 469.0, 52),
    ("GH", "Ghana", 79.0, 72.4, 58.7, 70.0, 2024, 32000000, 73.0, 34),
    ("MA", "Morocco", 73.8, 68.9, 62.3, 68.3, 2024, 37000000, 132.0, 28),
    ("ET", "Ethiopia", 51.8, 45.2, 38.7, 45.2, 2024, 120000000, 107.6, 15),
    ("TZ", "Tanzania", 77.9, 52.6, 42.1, 57.5, 2024, 61000000, 67.8, 22),
    # 2023
    ("NG", "Nigeria", 59.5, 75.2, 82.1, 72.3, 2023, 216000000, 432.3, 128),
    ("ZA", "South Africa", 93.1, 79.8, 69.2, 80.7, 2023, 59000000, 408.2, 82),
    ("KE", "Kenya", 79.2, 72.1, 65.8, 72.4, 2023, 53000000, 106.0, 61),
    ("EG", "Egypt", 68.9, 66.5, 61.2, 65.5, 2023, 102000000, 458.0, 47),
    ("GH", "Ghana", 76.8, 69.1, 55.4, 67.1, 2023, 31000000, 70.1, 29),
    ("MA", "Morocco", 71.5, 65.6, 59.1, 65.4, 2023, 36000000, 126.0, 24),
    ("ET", "Ethiopia", 49.1, 41.8, 35.2, 42.0, 2023, 118000000, 101.2, 12),
    ("TZ", "Tanzania", 75.2, 49.3, 38.9, 54.5, 2023, 60000000, 64.4, 18),
]


def default_dataset() -> list[CountryDataOut]:
    return [CountryDataOut(**dict(zip(_COLUMNS, row))) for row in _ROWS]
