from django.conf import settings
from rest_framework.throttling import SimpleRateThrottle


class WindowedRateThrottle(SimpleRateThrottle):
    """
    Allow RATE_LIMIT_MAX_REQUESTS per RATE_LIMIT_WINDOW_SECONDS for each caller.

    Authenticated callers are keyed by user id, anonymous callers by address.
    The window is configured in seconds, which DRF's "n/period" strings cannot express.
    """

    scope = "api"

    def get_rate(self):
        return f"{settings.RATE_LIMIT_MAX_REQUESTS}/{settings.RATE_LIMIT_WINDOW_SECONDS}"

    def parse_rate(self, rate):
        num_requests, window = rate.split("/")
        return int(num_requests), int(window)

    def get_cache_key(self, request, view):
        if request.user and request.user.is_authenticated:
            ident = f"user-{request.user.pk}"
        else:
            ident = self.get_ident(request)
        return self.cache_format % {"scope": self.scope, "ident": ident}
