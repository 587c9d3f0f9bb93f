"""
Constants shared across the application.
"""

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
MEET_API_URL = "https://meet.googleapis.com/v2/spaces"
SCOPES = "https://www.googleapis.com/auth/meetings.space.created openid email profile"

# Keyed store prefixes. These namespaces are disjoint; the daily clear only
# ever touches KV_MEETING_PREFIX.
KV_MEETING_PREFIX = "meeting:"
KV_TOKEN_PREFIX = "token:"
KV_ALIAS_PREFIX = "alias:"
KV_EMAIL_TO_ALIAS_PREFIX = "email_alias:"

# Fallback identity used when nobody is signed in
DEFAULT_USER_KEY = "__default__"
DEFAULT_USER_NAME = "Default"

COOKIE_NAME = "meet_session"
COOKIE_MAX_AGE = 60 * 60 * 24 * 30  # 30 days
OAUTH_STATE_COOKIE = "oauth_state"
OAUTH_STATE_MAX_AGE = 300  # 5 minutes

ALIAS_MAX_ATTEMPTS = 5
DEFAULT_PAGE_SIZE = 1000
