"""Idempotency key helpers"""
import hashlib
import json


def scope_idempotency_key(actor_id: int, idempotency_key: str) -> str:
    """
    Bind a client-supplied key to the account that sent it.

    Two users picking the same key must not see each other's cached responses,
    so the stored key is a digest of actor id and client key.
    """
    raw = f"{actor_id}:{idempotency_key.strip()}".encode("utf-8")
    return hashlib.sha256(raw).hexdigest()


def fingerprint_request(fields: dict) -> str:
    """
    Digest of the fields that define a request.

    Stored next to the idempotency key so a reused key can be told apart
    from a genuine retry of the same request.
    """
    raw = json.dumps(fields, sort_keys=True, default=str).encode("utf-8")
    return hashlib.sha256(raw).hexdigest()
