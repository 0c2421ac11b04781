"""Content written to a fresh content file."""

from speechcast.core.models import ContentCatalog

DEFAULT_SECTIONS: dict[str, list[str]] = {
    "en": [
        "Welcome everyone! Today I'm excited to share with you some important insights.",
        "First, let's discuss the current state of technology and how it's evolving.",
        "Technology has transformed the way we work, communicate, and live our daily lives.",
        "As we move forward, it's crucial to understand the implications of these changes.",
        "Thank you for your attention. I'm happy to answer any questions you may have.",
    ],
    "fr": [
        "Bienvenue à tous ! Aujourd'hui, je suis ravi de partager avec vous des informations importantes.",
        "Tout d'abord, discutons de l'état actuel de la technologie et de son évolution.",
        "La technologie a transformé notre façon de travailler, de communiquer et de vivre.",
        "Alors que nous avançons, il est crucial de comprendre les implications de ces changements.",
        "Merci pour votre attention. Je suis heureux de répondre à toutes vos questions.",
    ],
    "de": [
        "Willkommen alle! Heute freue ich mich, Ihnen einige wichtige Erkenntnisse zu präsentieren.",
        "Zunächst wollen wir den aktuellen Stand der Technologie und ihre Entwicklung diskutieren.",
        "Die Technologie hat unsere Art zu arbeiten, zu kommunizieren und zu leben verändert.",
        "Wenn wir voranschreiten, ist es wichtig, die Auswirkungen dieser Veränderungen zu verstehen.",
        "Vielen Dank für Ihre Aufmerksamkeit. Ich beantworte gerne Ihre Fragen.",
    ],
}


def default_catalog() -> ContentCatalog:
    """Return a fresh copy of the built-in presentation."""
    return ContentCatalog(
        sections={language: list(texts) for language, texts in DEFAULT_SECTIONS.items()}
    )
