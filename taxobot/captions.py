from dataclasses import dataclass


@dataclass(frozen=True)
class Caption:
    lang: str
    text: str
    alt_text: str


# =========================================================
# POST TEMPLATES (FRENCH IS POSTED FIRST)
# =========================================================
TEMPLATES = [
    (
        "fr",
        "🦟 Cette semaine, découvrez les ornementations uniques de {name} ⬇️!\n"
        "Voir les détails et la distribution sur le GBIF🌱: {url} .\n"
        "Fascinante diversité des #moustiques !\n\n"
        "Photos de @{credit}\n\n"
        "#Entomologie #Biodiversité",
        "Une planche photographique de {name}",
    ),
    (
        "en",
        "🦟 This week, discover the unique ornaments of {name} ⬇️!\n"
        "Explore details and distribution on GBIF🌱: {url} "
        "Fascinating diversity of #mosquitoes !\n\n"
        "Photos by @{credit} \n\n"
        "#Entomology #Biodiversity 🧪🌐",
        "A photographic plate of {name}",
    ),
]


def compose_captions(match, credit_handle):
    return [
        Caption(
            lang=lang,
            text=text.format(name=match.scientific_name, url=match.url, credit=credit_handle),
            alt_text=alt.format(name=match.scientific_name),
        )
        for lang, text, alt in TEMPLATES
    ]
