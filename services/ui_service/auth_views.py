"""
Streamlit authentication views: login form and sidebar user menu.
"""

import streamlit as st

from config.app_config import get_config
from infrastructure.external.errors import ApiError, NetworkError
from services.auth_service.auth_context import AuthContext
from services.auth_service.demo_backend import DemoAuthBackend, login_with_demo_fallback
from services.auth_service.exceptions import AuthError
from services.auth_service.models import LoginCredentials
from utils.logging_config import get_logger, log_user_interaction


logger = get_logger(__name__)


def render_login_form(context: AuthContext):
    """Render the sign-in form; a successful login reruns the script"""
    config = get_config()

    st.title(f"💈 {config.ui.app_title}")
    st.caption("Sign in to manage bookings, customers and payments")

    with st.form("login_form"):
        email = st.text_input("📧 Email", placeholder="admin@example.com")
        password = st.text_input("🔒 Password", type="password", placeholder="Enter your password")
        remember = st.checkbox("Remember me")

        col1, col2 = st.columns([1, 1])
        with col1:
            login_clicked = st.form_submit_button("🔑 Sign In", type="primary", use_container_width=True)
        with col2:
            forgot_clicked = st.form_submit_button("❓ Forgot Password", use_container_width=True)

    if context.error:
        st.error(context.error)

    if forgot_clicked:
        _request_password_reset(context, email)
        return

    if not login_clicked:
        if config.auth.demo_mode_enabled:
            st.info("**Demo:** admin@example.com / password123 (used only when the backend is offline)")
        return

    if not email or not password:
        st.error("Please enter both email and password")
        return

    credentials = LoginCredentials(email=email.strip(), password=password, remember=remember)
    with st.spinner("Authenticating..."):
        try:
            login_with_demo_fallback(
                context,
                credentials,
                demo_backend=DemoAuthBackend(config.auth.demo_token_lifetime_minutes),
                enabled=config.auth.demo_mode_enabled,
            )
        except (AuthError, ApiError):
            # The context already holds the message for inline display
            st.rerun()

    log_user_interaction(logger, "login_submitted", remember=remember,
                         backend=context.session_manager.backend.name)
    st.rerun()


def _request_password_reset(context: AuthContext, email: str):
    if not email:
        st.warning("Enter your email address first")
        return
    try:
        context.session_manager.forgot_password(email.strip())
    except NetworkError:
        st.error("Network error. Please check your connection and try again.")
    except ApiError as e:
        st.error(e.message)
    else:
        st.success("If the address is registered, a reset link is on its way.")


def render_user_menu(context: AuthContext):
    """Sidebar block with the signed-in user and a logout button"""
    user = context.user
    if user is None:
        return

    with st.sidebar:
        st.divider()
        st.subheader("👤 Account")
        st.write(f"**{user.full_name or user.email}**")
        if user.role:
            st.write(f"Role: {user.role.value.title()}")
        if context.session_manager.backend.name == "demo":
            st.caption("🔄 Demo mode - backend offline")

        if st.button("🚪 Logout", use_container_width=True):
            log_user_interaction(logger, "logout_clicked")
            context.logout()
            st.rerun()
