"""Bundled country set used until (or instead of) a remote catalog refresh.

Items follow the REST Countries v3.1 shape so they go through the same parser
as remote and local-file data.
"""

FALLBACK_COUNTRIES = (
    {"name": {"common": "United States"}, "cca3": "USA", "flags": {"png": "https://flagcdn.com/w320/us.png"},
     "capital": ["Washington D.C."], "region": "Americas", "population": 340110988},
    {"name": {"common": "Russia"}, "cca3": "RUS", "flags": {"png": "https://flagcdn.com/w320/ru.png"},
     "capital": ["Moscow"], "region": "Europe", "population": 146028325},
    {"name": {"common": "China"}, "cca3": "CHN", "flags": {"png": "https://flagcdn.com/w320/cn.png"},
     "capital": ["Beijing"], "region": "Asia", "population": 1408280000},
    {"name": {"common": "Germany"}, "cca3": "DEU", "flags": {"png": "https://flagcdn.com/w320/de.png"},
     "capital": ["Berlin"], "region": "Europe", "population": 83491249},
    {"name": {"common": "Japan"}, "cca3": "JPN", "flags": {"png": "https://flagcdn.com/w320/jp.png"},
     "capital": ["Tokyo"], "region": "Asia", "population": 123210000},
    {"name": {"common": "Brazil"}, "cca3": "BRA", "flags": {"png": "https://flagcdn.com/w320/br.png"},
     "capital": ["Brasília"], "region": "Americas", "population": 213421037},
    {"name": {"common": "United Kingdom"}, "cca3": "GBR", "flags": {"png": "https://flagcdn.com/w320/gb.png"},
     "capital": ["London"], "region": "Europe", "population": 69281437},
    {"name": {"common": "France"}, "cca3": "FRA", "flags": {"png": "https://flagcdn.com/w320/fr.png"},
     "capital": ["Paris"], "region": "Europe", "population": 66351959},
    {"name": {"common": "Italy"}, "cca3": "ITA", "flags": {"png": "https://flagcdn.com/w320/it.png"},
     "capital": ["Rome"], "region": "Europe", "population": 58927633},
    {"name": {"common": "Canada"}, "cca3": "CAN", "flags": {"png": "https://flagcdn.com/w320/ca.png"},
     "capital": ["Ottawa"], "region": "Americas", "population": 41651653},
    {"name": {"common": "Australia"}, "cca3": "AUS", "flags": {"png": "https://flagcdn.com/w320/au.png"},
     "capital": ["Canberra"], "region": "Oceania", "population": 27536874},
    {"name": {"common": "India"}, "cca3": "IND", "flags": {"png": "https://flagcdn.com/w320/in.png"},
     "capital": ["New Delhi"], "region": "Asia", "population": 1417492000},
)
