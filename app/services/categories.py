from datetime import date
from typing import Optional

# (gender, age from, age to, code) - FIDAL/UISP age bands
CATEGORY_RANGES = [
    # Femminile
    ("F", 0, 5, "Baby /F"),
    ("F", 6, 7, "Es 6/F"),
    ("F", 8, 9, "Es 8/F"),
    ("F", 10, 11, "Es 10/F"),
    ("F", 12, 13, "Rag /F"),
    ("F", 14, 15, "Cad /F"),
    ("F", 16, 17, "All /F"),
    ("F", 18, 19, "Jun /F"),
    ("F", 20, 34, "Sen /F"),
    ("F", 35, 99, "Am /F"),
    # Maschile
    ("M", 0, 5, "Baby /M"),
    ("M", 6, 7, "Es 6/M"),
    ("M", 8, 9, "Es 8/M"),
    ("M", 10, 11, "Es 10/M"),
    ("M", 12, 13, "Rag /M"),
    ("M", 14, 15, "Cad /M"),
    ("M", 16, 17, "All /M"),
    ("M", 18, 19, "Jun /M"),
    ("M", 20, 34, "Sen /M"),
    ("M", 35, 44, "Am A/M"),
    ("M", 45, 54, "Am B/M"),
    ("M", 55, 99, "Am C/M"),
]


def calculate_age(birth_date: date, reference: Optional[date] = None) -> int:
    reference = reference or date.today()
    age = reference.year - birth_date.year
    # Birthday not reached yet this year
    if (reference.month, reference.day) < (birth_date.month, birth_date.day):
        age -= 1
    return age


def calculate_category(birth_date: Optional[date], gender, reference: Optional[date] = None) -> Optional[str]:
    """
    Athletic category for an athlete, e.g. "Sen /M".
    None when birth date or gender is missing or the age falls outside the table.
    """
    if not birth_date or not gender:
        return None

    gender = getattr(gender, "value", gender)
    if gender not in ("M", "F"):
        return None

    age = calculate_age(birth_date, reference)
    if age < 0:
        return None

    for range_gender, age_from, age_to, code in CATEGORY_RANGES:
        if range_gender == gender and age_from <= age <= age_to:
            return code

    return None
