"""
UI service - Streamlit views over the auth, list and dashboard services.
"""

# Imported lazily so the core services stay usable without a Streamlit runtime
def get_visible_pages(permissions):
    from .pages import visible_pages
    return visible_pages(permissions)

__all__ = [
    'get_visible_pages'
]
