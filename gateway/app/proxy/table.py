"""
Forwarding route table.

Every backend-mirroring endpoint of the gateway is one entry here. Order
matters where a static segment shares a prefix with a path parameter
("read-all", "clear-all", "featured"): the static route comes first.
"""

from typing import List

from . import fallbacks, transforms
from .descriptor import AuthPolicy, BackendErrorPolicy, BodyMode, ForwardRoute

COOKIE_DENIED = "Access denied. Please login."
TOKEN_REQUIRED = "Authorization token required"
NO_TOKEN = "No authentication token provided"

# ============================================================================
# Admin
# ============================================================================

ADMIN_ROUTES: List[ForwardRoute] = [
    ForwardRoute(
        "POST", "/admin/auth/login", "/api/auth/login",
        auth=AuthPolicy.NONE,
        body=BodyMode.JSON,
        response_transform=transforms.admin_login,
        error_message="Login failed",
    ),
    ForwardRoute(
        "GET", "/admin/users", "/api/admin/users",
        forward_query=True,
        response_transform=transforms.users_listing,
        error_message="Failed to fetch users",
        on_backend_error=BackendErrorPolicy.SERVE_FALLBACK,
        fallback=fallbacks.mock_users,
    ),
    ForwardRoute(
        "PUT", "/admin/users/{id}/status", "/api/admin/users/{id}",
        body=BodyMode.JSON,
        body_transform=transforms.user_status_to_action,
        error_message="Failed to update user status",
    ),
    ForwardRoute(
        "GET", "/admin/providers", "/api/admin/users",
        fixed_query={"userType": "provider"},
        forward_query=True,
        error_message="Failed to fetch providers",
    ),
    ForwardRoute(
        "GET", "/admin/providers/{id}", "/api/admin/providers/{id}",
        error_message="Failed to fetch provider details",
        failure_message="Failed to fetch provider details",
    ),
    ForwardRoute(
        "PUT", "/admin/providers/{id}/profile", "/api/admin/providers/{id}/profile",
        body=BodyMode.JSON,
        error_message="Backend request failed",
        failure_message="Failed to update provider profile",
    ),
    ForwardRoute(
        "PUT", "/admin/providers/{id}/status", "/api/admin/providers/{id}/status",
        body=BodyMode.JSON,
        error_message="Failed to update provider status",
    ),
    ForwardRoute(
        "GET", "/admin/providers/{id}/documents", "/api/admin/providers/{id}/documents",
        auth=AuthPolicy.COOKIE_REQUIRED,
        unauthorized_message=COOKIE_DENIED,
        error_message="Failed to fetch documents",
        failure_message="Server error occurred",
    ),
    ForwardRoute(
        "GET",
        "/admin/providers/{id}/documents/{documentType}/view",
        "/api/admin/providers/{id}/documents/{documentType}/view",
        auth=AuthPolicy.COOKIE_REQUIRED,
        unauthorized_message=COOKIE_DENIED,
        binary_passthrough=True,
        error_message="Failed to fetch document",
        failure_message="Server error occurred",
    ),
    ForwardRoute(
        "PUT",
        "/admin/providers/{id}/documents/{documentType}/verify",
        "/api/admin/providers/{id}/documents/{documentType}/verify",
        body=BodyMode.JSON,
        unauthorized_message="Authentication required",
        error_message="Failed to verify document",
    ),
    ForwardRoute(
        "GET", "/admin/services", "/api/admin/services",
        forward_query=True,
        error_message="Failed to fetch services",
        on_backend_error=BackendErrorPolicy.SERVE_FALLBACK,
        fallback=fallbacks.mock_services,
    ),
    ForwardRoute(
        "POST", "/admin/services", "/api/admin/services",
        body=BodyMode.JSON,
        error_message="Failed to create service",
    ),
    ForwardRoute(
        "GET", "/admin/services/{id}", "/api/admin/services/{id}",
        error_message="Service not found",
    ),
    ForwardRoute(
        "PUT", "/admin/services/{id}", "/api/admin/services/{id}",
        body=BodyMode.JSON,
        error_message="Failed to update service",
    ),
    ForwardRoute(
        "DELETE", "/admin/services/{id}", "/api/admin/services/{id}",
        error_message="Failed to delete service",
    ),
]

# ============================================================================
# Authentication
# ============================================================================

AUTH_ROUTES: List[ForwardRoute] = [
    ForwardRoute(
        "POST", "/auth/login", "/api/auth/login",
        auth=AuthPolicy.NONE,
        body=BodyMode.JSON,
        body_transform=transforms.login_credentials,
        error_message="Invalid email or password",
        failure_message="Login failed",
    ),
    ForwardRoute(
        "POST", "/auth/google", "/api/oauth/google",
        auth=AuthPolicy.NONE,
        body=BodyMode.JSON,
        body_transform=transforms.google_credential,
        response_transform=transforms.google_session,
        error_message="Authentication failed",
    ),
    ForwardRoute(
        "POST", "/auth/logout", "/api/auth/logout",
        auth=AuthPolicy.BEARER_OPTIONAL,
        forward_cookies=True,
        relay_set_cookie=True,
        error_message="Logout failed",
    ),
    ForwardRoute(
        "POST", "/auth/refresh-token", "/api/auth/refresh-token",
        auth=AuthPolicy.NONE,
        forward_cookies=True,
        relay_set_cookie=True,
        error_message="Token refresh failed",
    ),
    ForwardRoute(
        "GET", "/auth/profile", "/api/auth/profile",
        unauthorized_message="Authorization header is required",
        error_message="Failed to fetch profile",
    ),
    ForwardRoute(
        "PUT", "/auth/profile", "/api/auth/profile",
        body=BodyMode.JSON,
        unauthorized_message="Authorization header is required",
        error_message="Failed to update profile",
    ),
    ForwardRoute(
        "POST", "/auth/forgot-password", "/api/auth/forgot-password",
        auth=AuthPolicy.NONE,
        body=BodyMode.JSON,
        body_transform=transforms.forgot_password_request,
        error_message="Failed to send password reset email",
        failure_message="Internal server error. Please try again later.",
    ),
    ForwardRoute(
        "POST", "/auth/reset-password", "/api/auth/reset-password",
        auth=AuthPolicy.NONE,
        body=BodyMode.JSON,
        body_transform=transforms.reset_password_request,
        error_message="Invalid or expired reset token",
        failure_message="Internal server error. Please try again later.",
    ),
]

# ============================================================================
# Marketplace
# ============================================================================

MARKETPLACE_ROUTES: List[ForwardRoute] = [
    ForwardRoute(
        "GET", "/dashboard/stats", "/api/dashboard/stats",
        unauthorized_message=NO_TOKEN,
        error_message="Failed to fetch dashboard stats",
    ),
    ForwardRoute(
        "GET", "/notifications", "/api/notifications",
        auth=AuthPolicy.BODY_TOKEN,
        unauthorized_message=TOKEN_REQUIRED,
        error_message="Failed to fetch notifications",
        failure_message="Failed to fetch notifications",
    ),
    ForwardRoute(
        "POST", "/notifications", "/api/notifications",
        auth=AuthPolicy.BODY_TOKEN,
        body=BodyMode.JSON,
        unauthorized_message=TOKEN_REQUIRED,
        error_message="Failed to create notification",
        failure_message="Failed to create notification",
    ),
    ForwardRoute(
        "PATCH", "/notifications/read-all", "/api/notifications/read-all",
        auth=AuthPolicy.BODY_TOKEN,
        unauthorized_message=TOKEN_REQUIRED,
        error_message="Failed to mark all notifications as read",
        failure_message="Failed to mark all notifications as read",
    ),
    ForwardRoute(
        "DELETE", "/notifications/clear-all", "/api/notifications/clear-all",
        unauthorized_message=TOKEN_REQUIRED,
        error_message="Failed to clear all notifications",
        failure_message="Failed to clear all notifications",
    ),
    ForwardRoute(
        "PATCH", "/notifications/{id}", "/api/notifications/{id}/read",
        auth=AuthPolicy.BODY_TOKEN,
        unauthorized_message=TOKEN_REQUIRED,
        error_message="Failed to mark notification as read",
        failure_message="Failed to mark notification as read",
    ),
    ForwardRoute(
        "DELETE", "/notifications/{id}", "/api/notifications/{id}",
        unauthorized_message=TOKEN_REQUIRED,
        error_message="Failed to delete notification",
        failure_message="Failed to delete notification",
    ),
    ForwardRoute(
        "POST",
        "/payment-requests/{bookingId}/request-payment",
        "/api/payment-requests/{bookingId}/request-payment",
        error_message="Failed to request payment",
    ),
    ForwardRoute(
        "GET", "/provider/profile", "/api/provider/profile",
        unauthorized_message="Authentication required",
        error_message="Failed to fetch profile",
    ),
    ForwardRoute(
        "PUT", "/provider/profile", "/api/provider/profile",
        body=BodyMode.JSON,
        unauthorized_message="Authentication required",
        error_message="Failed to update profile",
    ),
    ForwardRoute(
        "GET", "/providers/featured", "/api/providers/featured",
        query_defaults={"limit": "6"},
        unauthorized_message="No auth token provided",
        error_message="Failed to fetch featured providers",
    ),
    ForwardRoute(
        "GET", "/providers", "/api/providers",
        forward_query=True,
        query_defaults={"limit": "10"},
        unauthorized_message="No auth token provided",
        error_message="Failed to fetch providers",
    ),
    ForwardRoute(
        "GET", "/users/profile", "/api/users/profile",
        unauthorized_message="No token provided",
        error_message="Failed to fetch profile",
        failure_message="Failed to fetch profile",
    ),
    ForwardRoute(
        "PATCH", "/users/profile", "/api/users/profile",
        body=BodyMode.JSON,
        unauthorized_message="No token provided",
        error_message="Failed to update profile",
        failure_message="Failed to update profile",
    ),
    ForwardRoute(
        "GET", "/bookings", "/api/bookings",
        auth=AuthPolicy.BODY_TOKEN,
        unauthorized_message=TOKEN_REQUIRED,
        error_message="Failed to fetch bookings",
        failure_message="Failed to fetch bookings",
    ),
    ForwardRoute(
        "POST", "/bookings", "/api/bookings",
        auth=AuthPolicy.BODY_TOKEN,
        body=BodyMode.JSON,
        body_transform=transforms.booking_data,
        unauthorized_message=TOKEN_REQUIRED,
        error_message="Failed to create booking",
        failure_message="Failed to create booking",
    ),
]

ROUTE_TABLE: List[ForwardRoute] = ADMIN_ROUTES + AUTH_ROUTES + MARKETPLACE_ROUTES
