"""
URL helper utilities for pet and profile photos.
"""
from typing import Optional


def gs_to_public_url(gs_url: str) -> str:
    """
    Convert gs:// URL to public HTTPS URL.
    
    Args:
        gs_url: GCS URL in format gs://bucket/path/to/file
        
    Returns:
        str: Public HTTPS URL or original URL if it is not a gs:// URL
    """
    parsed = split_gs_url(gs_url)
    if not parsed:
        return gs_url
    
    bucket, file_path = parsed
    return f"https://storage.googleapis.com/{bucket}/{file_path}"


def split_gs_url(gs_url: str) -> Optional[tuple[str, str]]:
    """Split gs://bucket/path into (bucket, path), or None if malformed."""
    if not gs_url or not gs_url.startswith("gs://"):
        return None
    
    parts = gs_url[len("gs://"):].split("/", 1)
    if len(parts) != 2 or not parts[0] or not parts[1]:
        return None
    return parts[0], parts[1]
