"""Static Ghana gazetteer used by the location scorer.

Regions and their representative towns, principal cities, and which regions
border each other. Names are lower-case; matching lower-cases its inputs.
Order matters: the scorer walks these tables in the order written here.
"""
from types import MappingProxyType

REGION_TOWNS = MappingProxyType({
    "greater accra": ("accra", "tema", "ashaiman", "madina", "adenta", "dodowa", "prampram", "ningo", "ada"),
    "ashanti": ("kumasi", "obuasi", "konongo", "ejisu", "mampong", "bekwai", "offinso", "afigya-kwabre"),
    "western": ("takoradi", "sekondi", "tarkwa", "prestea", "bogoso", "axim", "elubo", "half assini"),
    "central": ("cape coast", "saltpond", "winneba", "agona swedru", "dunkwa", "assin fosu", "mankessim"),
    "eastern": ("koforidua", "nsawam", "suhum", "akropong", "aburi", "mamfe", "akim oda", "kibi"),
    "volta": ("ho", "keta", "akatsi", "hohoe", "kpeve", "anloga", "ave", "kadjebi"),
    "northern": ("tamale", "yendi", "savelugu", "bimbilla", "damongo", "salaga", "buipe", "saboba"),
    "upper east": ("bolgatanga", "navrongo", "bawku", "zebilla", "binduri", "garu", "tempane"),
    "upper west": ("wa", "tumu", "lawra", "jirapa", "nandom", "hamile", "funsi"),
    "bono": ("sunyani", "techiman", "wenchi", "bechem", "duayaw nkwanta", "nkrankwanta", "sampa"),
    "bono east": ("techiman", "kintampo", "nkoranza", "ahenkro", "prang", "yeji", "kwame danso"),
    "ahafo": ("goaso", "duayaw nkwanta", "kenyasi", "hwidiem", "kukuom", "bechem"),
    "western north": ("sefwi wiawso", "bibiani", "enchi", "juaboso", "akontombra", "bodi"),
    "savannah": ("damongo", "buipe", "salaga", "sawla", "fulfulso", "larabanga"),
    "north east": ("nalerigu", "gambaga", "walewale", "bunkpurugu", "nakpanduri", "chereponi"),
    "oti": ("dambai", "krachi", "nkwanta", "kadjebi", "worawora", "jasikan"),
    "ono": ("agona swedru", "mankessim", "asamankese", "akim oda", "kibi", "akropong"),
})

MAJOR_CITIES = MappingProxyType({
    "accra": "greater accra",
    "kumasi": "ashanti",
    "tamale": "northern",
    "takoradi": "western",
    "cape coast": "central",
    "koforidua": "eastern",
    "ho": "volta",
    "sunyani": "bono",
    "bolgatanga": "upper east",
    "wa": "upper west",
    "tema": "greater accra",
    "obuasi": "ashanti",
    "tarkwa": "western",
    "winneba": "central",
    "nsawam": "eastern",
    "keta": "volta",
    "yendi": "northern",
    "navrongo": "upper east",
    "tumu": "upper west",
    "techiman": "bono",
})

# As listed per region; not every pair is listed in both directions.
NEARBY_REGIONS = MappingProxyType({
    "greater accra": ("central", "eastern"),
    "ashanti": ("bono", "eastern", "bono east"),
    "western": ("central", "western north"),
    "central": ("greater accra", "western", "eastern"),
    "eastern": ("greater accra", "central", "ashanti", "volta"),
    "volta": ("eastern", "oti"),
    "northern": ("savannah", "north east", "upper east"),
    "upper east": ("northern", "upper west", "north east"),
    "upper west": ("upper east", "savannah"),
    "bono": ("ashanti", "bono east", "ahafo"),
    "bono east": ("ashanti", "bono", "oti"),
    "ahafo": ("bono", "ashanti"),
    "western north": ("western", "bono"),
    "savannah": ("northern", "upper west"),
    "north east": ("northern", "upper east"),
    "oti": ("volta", "bono east"),
    "ono": ("central", "eastern"),
})
