"""
Auth Service Module
Sign-up, sign-in, session and profile operations against Supabase Auth
"""
import logging
from typing import Any, Callable, Dict, Optional

from supabase import Client

from ..config import Config
from ..logger import custom_logger
from ..utils.result_utils import fail, ok, error_message
from ..utils.supabase_utils import first_row

logger = logging.getLogger(__name__)


def to_plain(value: Any) -> Any:
    """Convert gotrue (pydantic) objects into JSON-ready dicts."""
    if value is None or isinstance(value, (dict, list, str, int, float, bool)):
        return value
    return value.model_dump(mode='json')


def current_user(supabase: Client):
    """
    Return the signed-in user object, or None.
    Errors from the auth service propagate.
    """
    response = supabase.auth.get_user()
    return response.user if response else None


class AuthService:
    """
    Service class for authentication and profile operations
    """
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def sign_up(self, email: str, password: str, full_name: Optional[str] = None) -> Dict:
        """
        Register a new user
        @param email: str - account email
        @param password: str - account password
        @param full_name: str - optional name stored in the user metadata
        @returns: dict - {'success': True, 'data': {'user', 'session'}} or failure
        """
        try:
            credentials = {'email': email, 'password': password}
            if full_name:
                credentials['options'] = {'data': {'full_name': full_name}}

            response = self.supabase.auth.sign_up(credentials)
            return ok(data={
                'user': to_plain(response.user),
                'session': to_plain(response.session)
            })
        except Exception as e:
            logger.error(f"Error signing up: {error_message(e)}")
            return fail(e)

    def sign_in(self, email: str, password: str) -> Dict:
        """
        Sign in with email and password
        @returns: dict - {'success': True, 'data': {'user', 'session'}} or failure
        """
        try:
            response = self.supabase.auth.sign_in_with_password({
                'email': email,
                'password': password
            })
            return ok(data={
                'user': to_plain(response.user),
                'session': to_plain(response.session)
            })
        except Exception as e:
            logger.error(f"Error signing in: {error_message(e)}")
            return fail(e)

    def sign_out(self) -> Dict:
        try:
            self.supabase.auth.sign_out()
            return ok()
        except Exception as e:
            logger.error(f"Error signing out: {error_message(e)}")
            return fail(e)

    def get_current_user(self) -> Dict:
        try:
            return ok(user=to_plain(current_user(self.supabase)))
        except Exception as e:
            logger.error(f"Error getting current user: {error_message(e)}")
            return fail(e)

    def get_session(self) -> Dict:
        """Check for an active session; ``session`` is None when signed out."""
        try:
            return ok(session=to_plain(self.supabase.auth.get_session()))
        except Exception as e:
            logger.error(f"Error checking session: {error_message(e)}")
            return fail(e)

    def reset_password(self, email: str) -> Dict:
        """Send a password reset email that redirects to the configured URL."""
        try:
            data = self.supabase.auth.reset_password_for_email(
                email, {'redirect_to': Config.PASSWORD_RESET_REDIRECT_URL}
            )
            return ok(data=to_plain(data))
        except Exception as e:
            logger.error(f"Error resetting password: {error_message(e)}")
            return fail(e)

    def update_password(self, new_password: str) -> Dict:
        try:
            response = self.supabase.auth.update_user({'password': new_password})
            return ok(data={'user': to_plain(response.user)})
        except Exception as e:
            logger.error(f"Error updating password: {error_message(e)}")
            return fail(e)

    @custom_logger.log_function_call
    def get_profile(self, user_id: str) -> Dict:
        try:
            response = self.supabase.table('profiles')\
                .select('*')\
                .eq('id', user_id)\
                .single()\
                .execute()
            return ok(data=response.data)
        except Exception as e:
            logger.error(f"Error getting profile: {error_message(e)}")
            return fail(e)

    @custom_logger.log_function_call
    def update_profile(self, user_id: str, updates: Dict[str, Any]) -> Dict:
        """
        Update the caller's profile row.
        The admin flag is never writable from here.
        """
        try:
            data = {key: value for key, value in updates.items() if key not in ('id', 'is_admin')}
            response = self.supabase.table('profiles')\
                .update(data)\
                .eq('id', user_id)\
                .execute()

            profile = first_row(response)
            if profile is None:
                return fail('Profile not found', status=404)
            return ok(data=profile)
        except Exception as e:
            logger.error(f"Error updating profile: {error_message(e)}")
            return fail(e)

    def on_auth_state_change(self, callback: Callable[[str, Any], None]):
        """
        Subscribe ``callback(event, session)`` to auth state notifications.
        @returns: the subscription handle from the auth client
        """
        return self.supabase.auth.on_auth_state_change(callback)
