import secrets

def new_id() -> str:
    # url-safe, 21 chars; same shape as the ids already in the catalog
    return secrets.token_urlsafe(16)[:21]
