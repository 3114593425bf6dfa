"""
API key authentication for the dashboard and the WordPress plugin.

Keys are shared secrets configured in PRUNEPRO_API_KEYS (pp_...).
They can be provided in:
- Authorization header: "Bearer pp_xxx"
- X-API-Key header: "pp_xxx"
"""
import hmac
import logging

from django.conf import settings
from rest_framework import authentication, exceptions

logger = logging.getLogger(__name__)

API_KEY_PREFIX = 'pp_'


class APIKeyClient:
    """Authenticated caller identified only by its key prefix."""
    is_authenticated = True
    is_anonymous = False

    def __init__(self, key_prefix):
        self.key_prefix = key_prefix

    def __str__(self):
        return f"APIKeyClient({self.key_prefix})"


class APIKeyAuthentication(authentication.BaseAuthentication):

    def authenticate(self, request):
        api_key = self._extract_api_key(request)

        if not api_key:
            return None

        if not api_key.startswith(API_KEY_PREFIX):
            logger.debug(f"API key has invalid prefix: {api_key[:6]}...")
            return None

        if not self._is_known_key(api_key):
            logger.warning(f"Rejected unknown API key {api_key[:8]}...")
            raise exceptions.AuthenticationFailed('Invalid API key')

        client = APIKeyClient(api_key[:8])
        return (client, {'auth_type': 'api_key', 'key_prefix': client.key_prefix})

    def authenticate_header(self, request):
        return 'Bearer'

    def _extract_api_key(self, request):
        """Extract API key from request headers."""
        api_key = None

        # Check Authorization header first
        auth_header = request.META.get('HTTP_AUTHORIZATION', '')
        if auth_header.startswith('Bearer '):
            api_key = auth_header.split('Bearer ')[1].strip()

        # Fall back to X-API-Key header
        if not api_key:
            api_key = request.META.get('HTTP_X_API_KEY', '').strip()

        return api_key if api_key else None

    def _is_known_key(self, api_key):
        return any(
            hmac.compare_digest(api_key.encode(), known.encode())
            for known in getattr(settings, 'PRUNEPRO_API_KEYS', [])
        )
