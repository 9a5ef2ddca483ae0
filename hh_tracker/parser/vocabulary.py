"""Fixed vocabulary of the hh.ru responses page."""

# Boilerplate that hh.ru interleaves with the fields we need. Matched as
# case-sensitive substrings.
NOISE_SUBSTRINGS: tuple[str, ...] = (
    "Employer Logo",
    "Был онлайн",
    "Разбирает",
    "Получите работу быстрее",
    "подпиской hh PRO",
    "доступ к статистике",
)

# Relative dates, compared after lower-casing.
RELATIVE_DATES: frozenset[str] = frozenset({"сегодня", "вчера"})

# Genitive month names, as in "5 февраля".
MONTHS: tuple[str, ...] = (
    "января",
    "февраля",
    "марта",
    "апреля",
    "мая",
    "июня",
    "июля",
    "августа",
    "сентября",
    "октября",
    "ноября",
    "декабря",
)
