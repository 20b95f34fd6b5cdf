"""업스트림 API envelope data 자산 (구조화된 응답 형태)"""

HOTELS = [
    {"hotelId": "-1", "name": "Todas", "type": "All"},
    {"hotelId": "4", "name": "Amparo", "type": "Hotel"},
    {"hotelId": 5, "name": "Appenzell", "type": "Hotel"},
]

STRUCTURED_SEARCH_DATA = {
    "success": True,
    "date": "11/7/2025",
    "hasAvailability": True,
    "result": {
        "hasAvailability": True,
        "status": "AVAILABLE",
        "summary": "Found vacancies in 2 hotel(s): Amparo, Areado",
        "vacancies": [
            "Amparo: COQUEIROS (até 3 pessoas)07/11 - 09/11 (2 dias livres) - 2 Quarto(s)",
            "Areado: FURNAS (até 3 pessoas)07/11 - 09/11 (2 dias livres) - 5 Quarto(s)",
        ],
        "hotelGroups": {
            "Amparo": [
                "COQUEIROS (até 3 pessoas)07/11 - 09/11 (2 dias livres) - 2 Quarto(s)",
                "COQUEIROS (até 3 pessoas)07/11 - 09/11 (2 dias livres) - 2 Quarto(s)",
            ],
            "Areado": [
                "FURNAS (até 3 pessoas)07/11 - 09/11 (2 dias livres) - 5 Quarto(s)",
            ],
        },
    },
}

STRUCTURED_NO_AVAILABILITY = {
    "success": True,
    "date": "11/14/2025",
    "hasAvailability": False,
    "result": {
        "hasAvailability": False,
        "status": "NO AVAILABILITY",
        "summary": "No período escolhido não há nenhum quarto disponível",
        "vacancies": [],
        "hotelGroups": {},
    },
}

WEEKEND_SEARCH_DATA = {
    "weekendResults": [
        {
            "weekendNumber": 1,
            "dates": "2025-11-07 to 2025-11-09",
            "friday": "2025-11-07",
            "sunday": "2025-11-09",
            **STRUCTURED_SEARCH_DATA,
        },
        {
            "weekendNumber": 2,
            "dates": "2025-11-14 to 2025-11-16",
            "friday": "2025-11-14",
            "sunday": "2025-11-16",
            **STRUCTURED_NO_AVAILABILITY,
        },
    ],
    "searchDetails": {"totalWeekendsSearched": 2},
}

HEALTH = {
    "status": "OK",
    "version": "1.3.0",
    "name": "busca_vagas_api",
}
