import logging

from .models import User

logger = logging.getLogger(__name__)

USER_KEY = "user"
TOKEN_KEY = "token"
SCHOOL_NAME_KEY = "school_name"


class SessionStore:
    """The signed-in user as seen by one request.

    Wraps ``request.session``; nothing else reads or writes these keys.
    The school name is cached per user id so that a resolution started for
    one user can never be shown to another.
    """

    def __init__(self, session):
        self._session = session

    @property
    def token(self):
        return self._session.get(TOKEN_KEY)

    @property
    def user(self):
        data = self._session.get(USER_KEY)
        if not data:
            return None
        return User.from_api(data)

    @property
    def is_authenticated(self):
        return bool(self.token)

    @property
    def school_name(self):
        cached = self._session.get(SCHOOL_NAME_KEY)
        user = self.user
        if not cached or user is None or cached.get("user_id") != user.id:
            return None
        return cached.get("name")

    @property
    def hydrated(self):
        user = self.user
        if user is None or not user.school_id:
            return True
        cached = self._session.get(SCHOOL_NAME_KEY)
        return bool(cached) and cached.get("user_id") == user.id

    def set_user(self, user, token=None):
        if user is None:
            self.clear()
            return
        self._session[USER_KEY] = user.to_api()
        if token is not None:
            self._session[TOKEN_KEY] = token
        cached = self._session.get(SCHOOL_NAME_KEY)
        if cached and cached.get("user_id") != user.id:
            del self._session[SCHOOL_NAME_KEY]

    def resolve_school_name(self, fetch_schools):
        """Look up the current user's school name.

        ``fetch_schools`` returns every school; the result is stored against
        the user id the lookup started for and dropped if that user is no
        longer the one in the session when it finishes.
        """
        user = self.user
        if user is None or not user.school_id:
            self._session.pop(SCHOOL_NAME_KEY, None)
            return None

        schools = fetch_schools()
        current = self.user
        if current is None or current.id != user.id:
            logger.info("Discarding school name resolved for user %s", user.id)
            return None

        school = next((s for s in schools if s.id == user.school_id), None)
        name = school.name if school else None
        self._session[SCHOOL_NAME_KEY] = {"user_id": user.id, "name": name}
        return name

    def clear(self):
        for key in (USER_KEY, TOKEN_KEY, SCHOOL_NAME_KEY):
            self._session.pop(key, None)
