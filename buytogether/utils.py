from typing import Any, List, Optional

from .models import Store


def parse_product_ids(product_ids) -> List[Any]:
    """
    Accepts "5,99,5" or a sequence of ids. Blank pieces of a string are
    dropped; order and duplicates are kept.
    """
    if product_ids is None:
        return []
    if isinstance(product_ids, str):
        return [piece.strip() for piece in product_ids.split(",") if piece.strip()]
    return list(product_ids)


def get_current_store() -> Optional[Store]:
    """The store flagged as default, else the oldest active store."""
    qs = Store.objects.filter(is_active=True)
    return qs.filter(is_default=True).order_by("id").first() or qs.order_by("id").first()


def get_session_key(request) -> Optional[str]:
    """
    Guest carts are keyed by the X-Session-Key header, falling back to the
    Django session (created on demand).
    """
    key = request.headers.get("X-Session-Key")
    if key:
        return key
    session = getattr(request, "session", None)
    if session is None:
        return None
    if not session.session_key:
        session.save()
    return session.session_key


def abs_media_url(request, value) -> str:
    if not value:
        return ""
    if hasattr(value, "url"):
        url = getattr(value, "url", None) or ""
    else:
        url = str(value or "")
    if not url:
        return ""
    if url.startswith("http://") or url.startswith("https://"):
        return url
    if not url.startswith("/"):
        url = "/" + url
    if request is None:
        return url
    return request.build_absolute_uri(url)
