"""URL builders for Sellsy endpoints."""

# Collection name -> snapshot/archive entry name
COLLECTIONS: dict[str, str] = {
    "companies": "companies.json",
    "contacts": "contacts.json",
    "invoices": "invoices.json",
    "credit-notes": "credit-notes.json",
    "subscriptions": "subscriptions.json",
}

# Collections whose records carry a downloadable PDF
DOCUMENT_COLLECTIONS: tuple[str, ...] = ("invoices", "credit-notes")


def get_collection_url(api_url: str, collection: str) -> str:
    """Get the v2 endpoint for a collection."""
    if collection not in COLLECTIONS:
        raise ValueError(f"Unknown collection: {collection}")
    return f"{api_url.rstrip('/')}/v2/{collection}"


def get_token_url(login_url: str) -> str:
    """Get the OAuth2 token endpoint."""
    return f"{login_url.rstrip('/')}/oauth2/access-tokens"
