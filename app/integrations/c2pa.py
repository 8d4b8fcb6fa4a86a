"""C2PA Content Credentials reader (wraps the c2pa-python SDK)."""

import os
import json
import asyncio
import logging
from typing import Any, Dict, Optional

import c2pa

from app.config import settings
from app.schemas.verification import ProvenanceResult

logger = logging.getLogger(__name__)

GENERATIVE_SOURCE_TYPE = "trainedAlgorithmicMedia"
VALID_STATES = ("valid", "trusted")


def read_manifest_store(file_path: str) -> Optional[Dict[str, Any]]:
    """
    Returns the parsed manifest store, or None when the file carries no manifest.

    Raises FileNotFoundError for a missing file; that is an I/O failure,
    not an absence of credentials.
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(file_path)
    try:
        with c2pa.Reader(file_path) as reader:
            return json.loads(reader.json())
    except Exception as e:
        logger.info(f"[C2PA] No readable manifest in {os.path.basename(file_path)}: {e}")
        return None


def _issuer(manifest: Dict[str, Any]) -> Optional[str]:
    signature = manifest.get("signature_info") or {}
    if signature.get("issuer"):
        return signature["issuer"]
    gen_info = manifest.get("claim_generator_info") or []
    if gen_info and gen_info[0].get("name"):
        return gen_info[0]["name"]
    return manifest.get("claim_generator")


def _declares_generative_ai(manifest: Dict[str, Any]) -> bool:
    for assertion in manifest.get("assertions", []):
        if not str(assertion.get("label", "")).startswith("c2pa.actions"):
            continue
        for action in assertion.get("data", {}).get("actions", []):
            if GENERATIVE_SOURCE_TYPE in action.get("digitalSourceType", ""):
                return True
    return False


def _is_valid(store: Dict[str, Any], manifest: Dict[str, Any]) -> bool:
    state = store.get("validation_state")
    if state:
        return str(state).lower() in VALID_STATES
    # Older SDKs only list failures; an empty list means the signature checked out
    return not store.get("validation_status") and not manifest.get("validation_status")


def parse_provenance(store: Optional[Dict[str, Any]]) -> ProvenanceResult:
    if not store:
        return ProvenanceResult(metadata={"note": "No C2PA manifest found in file"})

    active_label = store.get("active_manifest")
    manifest = store.get("manifests", {}).get(active_label) if active_label else None
    if not manifest:
        return ProvenanceResult(metadata={"note": "Manifest store has no active manifest"})

    signature = manifest.get("signature_info") or {}
    return ProvenanceResult(
        has_credentials=True,
        is_valid=_is_valid(store, manifest),
        issuer=_issuer(manifest),
        signed_at=signature.get("time"),
        metadata={
            "title": manifest.get("title"),
            "format": manifest.get("format"),
            "claim_generator": manifest.get("claim_generator"),
            "assertions": [a.get("label") for a in manifest.get("assertions", [])],
            "ingredients": len(manifest.get("ingredients", [])),
            "validation_status": store.get("validation_status") or manifest.get("validation_status") or [],
            "declares_generative_ai": _declares_generative_ai(manifest),
        },
    )


async def check_provenance(file_path: str) -> ProvenanceResult:
    """
    Provenance collaborator. "No credentials" is a normal result; only
    catastrophic I/O failures raise.
    """
    if not settings.enable_c2pa:
        return ProvenanceResult(metadata={"note": "C2PA verification disabled (set ENABLE_C2PA=true)"})

    store = await asyncio.to_thread(read_manifest_store, file_path)
    result = parse_provenance(store)
    if result.has_credentials:
        logger.info(f"[C2PA] Credentials found: issuer={result.issuer}, valid={result.is_valid}")
    return result
