from salon_api.schemas.common import ErrorOut


_ERROR_EXAMPLES: dict[int, tuple[str, str]] = {
    400: ("bad_request", "Requête invalide"),
    401: ("unauthorized", "Non authentifié"),
    404: ("not_found", "Ressource non trouvée"),
    409: ("conflict", "Conflit avec une donnée existante"),
    500: ("internal_error", "Erreur serveur"),
}


def error_responses(*status_codes: int) -> dict[int, dict]:
    responses: dict[int, dict] = {}
    for status_code in status_codes:
        code, message = _ERROR_EXAMPLES.get(status_code, ("http_error", "HTTP error"))
        responses[status_code] = {
            "model": ErrorOut,
            "description": message,
            "content": {
                "application/json": {
                    "example": {
                        "error": message,
                        "code": code,
                        "request_id": "request-id",
                        "path": "/api/example",
                    }
                }
            },
        }
    return responses
