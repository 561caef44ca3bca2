import streamlit as st

from config.app_config import get_config
from services.auth_service.auth_context import get_auth_context
from services.auth_service.permissions import Permissions
from services.ui_service.auth_views import render_login_form, render_user_menu
from services.ui_service import get_visible_pages
from utils.logging_config import initialize_logging, get_logger, log_user_interaction

# Initialize logging and error tracking
error_tracker = initialize_logging()
logger = get_logger(__name__)

# Get configuration
config = get_config()

st.set_page_config(page_title=config.ui.app_title, page_icon="💈", layout="wide")


def main_app(context):
    """Main application content (protected by authentication)"""
    permissions = Permissions.for_role(context.user)
    pages = get_visible_pages(permissions)

    if not pages:
        st.error("🚫 Your account does not have access to the admin dashboard.")
        if st.button("🚪 Logout"):
            context.logout()
            st.rerun()
        return

    with st.sidebar:
        st.title(config.ui.app_title)
        titles = list(pages)
        default = titles.index(config.ui.login_redirect_page) if config.ui.login_redirect_page in titles else 0
        selected = st.radio("Navigation", titles, index=default, label_visibility="collapsed")

    render_user_menu(context)

    if st.session_state.get("current_page") != selected:
        st.session_state.current_page = selected
        log_user_interaction(logger, "page_opened", page=selected)

    try:
        pages[selected].render(context)
    except Exception as e:
        error_tracker.track_error(e, "page_render", page=selected)
        st.error("🔧 Something went wrong while rendering this page. Please refresh and try again.")
        logger.error(f"Unexpected error rendering {selected}: {e}", exc_info=True)


auth = get_auth_context()

if auth.require_auth():
    main_app(auth)
elif auth.require_guest():
    render_login_form(auth)
